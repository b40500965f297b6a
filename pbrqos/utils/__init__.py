"""Utilities"""

from .logger import NodeLogger

__all__ = ['NodeLogger']
