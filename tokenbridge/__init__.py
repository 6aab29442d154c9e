"""Tokenizer adapter package: pretrained tokenizers over torch token buffers."""

from .config import TokenizerSettings, settings
from .errors import (
    DecodeError,
    EncodeError,
    LoadError,
    QueryError,
    TokenizerAdapterError,
    UnsupportedDtypeError,
)
from .tokenizer import TokenizerAdapter

__all__ = [
    "TokenizerSettings",
    "settings",
    "TokenizerAdapter",
    "TokenizerAdapterError",
    "LoadError",
    "QueryError",
    "EncodeError",
    "DecodeError",
    "UnsupportedDtypeError",
]
