"""Conversion between entities and documents."""

from .mapper import DocumentMapper
from .reader import DocumentReader
from .writer import DocumentWriter

__all__ = ["DocumentMapper", "DocumentReader", "DocumentWriter"]
