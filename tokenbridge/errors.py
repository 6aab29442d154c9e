"""Exception types raised by the tokenizer adapter."""

from __future__ import annotations


class TokenizerAdapterError(RuntimeError):
    """Base class for every failure surfaced by :class:`TokenizerAdapter`."""


class LoadError(TokenizerAdapterError):
    """The tokenizer name could not be resolved or fetched."""


class QueryError(TokenizerAdapterError):
    """The loaded tokenizer lacks the requested metadata."""


class EncodeError(TokenizerAdapterError):
    """Batch tokenization failed or returned unusable ids."""


class DecodeError(TokenizerAdapterError):
    """Batch decoding failed or returned non-string items."""


class UnsupportedDtypeError(TokenizerAdapterError, TypeError):
    """A buffer element type is outside the supported dtype table."""


__all__ = [
    "TokenizerAdapterError",
    "LoadError",
    "QueryError",
    "EncodeError",
    "DecodeError",
    "UnsupportedDtypeError",
]
