"""Data models for chatstack configuration."""

from .stack import StackConfig, StackImages

__all__ = ["StackConfig", "StackImages"]
