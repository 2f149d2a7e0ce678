"""Offset-tracking normalization and pre-tokenization for subword tokenizers."""

__version__ = "0.1.0"