"""Configuration for flakeid generators."""

from .config import DEFAULT_EPOCH, GeneratorConfig

__all__ = ["GeneratorConfig", "DEFAULT_EPOCH"]
