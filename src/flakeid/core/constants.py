"""
Snowflake bit layout constants.
"""

# Field widths (bits), high to low: timestamp-delta | node-id | sequence
TIMESTAMP_BITS = 41
NODE_BITS = 8
SEQUENCE_BITS = 14

# Maximum field values
MAX_TIMESTAMP_DELTA = (1 << TIMESTAMP_BITS) - 1  # ~69.7 years of milliseconds
MAX_NODE_ID = (1 << NODE_BITS) - 1  # 255
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1  # 16383 IDs per ms per node

# Shifts
NODE_SHIFT = SEQUENCE_BITS  # 14
TIMESTAMP_SHIFT = NODE_BITS + SEQUENCE_BITS  # 22

# Total width of a packed ID (sign bit of an int64 stays clear)
ID_BITS = TIMESTAMP_BITS + NODE_BITS + SEQUENCE_BITS  # 63
MAX_ID = (1 << ID_BITS) - 1
