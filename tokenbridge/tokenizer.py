"""Tokenizer adapter exchanging token ids as torch tensors."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import numpy as np
import torch

from tokenbridge.buffers import from_external, to_external
from tokenbridge.config import TokenizerSettings, settings as default_settings
from tokenbridge.errors import DecodeError, EncodeError, LoadError, QueryError
from tokenbridge.hub import TokenizerHandle, TokenizerHub, get_hub

logger = logging.getLogger("tokenbridge.tokenizer")


def hub_from_settings(settings: TokenizerSettings) -> TokenizerHub:
    """Build the hub binding selected by ``settings.backend``."""
    if settings.backend == "transformers":
        return get_hub(
            settings.backend,
            settings.policy(),
            cache_dir=settings.cache_dir,
            revision=settings.revision,
            local_files_only=settings.local_files_only,
            trust_remote_code=settings.trust_remote_code,
        )
    return get_hub(settings.backend, settings.policy())


class TokenizerAdapter:
    """Pretrained tokenizer behind an encode/decode/end-of-text interface.

    Token ids go in and come out as int64 ``torch.Tensor`` buffers; the
    tokenizer library only ever sees numpy arrays. The loaded handle is
    kept for the lifetime of the adapter and is not safe to share between
    threads.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        hub: Optional[TokenizerHub] = None,
        settings: Optional[TokenizerSettings] = None,
    ):
        self.settings = settings or default_settings
        self.name = name if name is not None else self.settings.tokenizer_name
        if not self.name:
            raise LoadError("Tokenizer name must be a non-empty string.")
        self.hub = hub or hub_from_settings(self.settings)
        self.handle = self._load()
        logger.debug("Tokenizer loaded: name=%s hub=%s", self.name, self.hub.__class__.__name__)

    # ---------------------------
    # Public API
    # ---------------------------
    @property
    def eos_token_id(self) -> int:
        """End-of-sequence id of the loaded tokenizer."""
        eos = self.handle.eos_token_id
        if eos is None:
            raise QueryError(f"Tokenizer {self.name!r} has no end-of-sequence token.")
        return int(eos)

    def is_end_of_text(self, token: int) -> bool:
        """Return whether ``token`` is the end-of-sequence id."""
        return int(token) == self.eos_token_id

    def encode(self, inputs: Iterable[str]) -> torch.Tensor:
        """Encode a batch of strings into an int64 tensor of token ids.

        The shape is whatever the tokenizer produces under the configured
        padding policy, usually ``[len(inputs), sequence_length]``. An empty
        batch yields a ``[0, 0]`` tensor without calling the tokenizer.
        """
        texts = list(inputs)
        for index, text in enumerate(texts):
            if not isinstance(text, str):
                raise EncodeError(f"Input {index} is {type(text).__name__}, expected str.")
        if not texts:
            return torch.zeros((0, 0), dtype=torch.int64)

        try:
            encoded = self.handle.batch_tokenize(texts)
        except Exception as exc:
            raise EncodeError(f"Tokenizer {self.name!r} failed to encode batch: {exc}") from exc

        if "input_ids" not in encoded:
            raise EncodeError("Tokenizer result has no 'input_ids' field.")
        try:
            input_ids = np.asarray(encoded["input_ids"])
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"Token ids do not form a rectangular array: {exc}") from exc
        if input_ids.dtype == object:
            raise EncodeError("Token ids do not form a rectangular numeric array.")
        if not np.can_cast(input_ids.dtype, np.int64, casting="safe"):
            raise EncodeError(f"Token ids of dtype {input_ids.dtype} do not fit in int64.")

        tokens = from_external(input_ids.astype(np.int64, copy=False))
        logger.debug("Encoded batch: size=%s shape=%s", len(texts), tuple(tokens.shape))
        return tokens

    def decode(self, tokens: torch.Tensor) -> List[str]:
        """Decode an int64 tensor of token ids, one string per row."""
        ids = to_external(tokens)
        if ids.dtype != np.int64:
            raise DecodeError(f"Token ids must be int64, got {tokens.dtype}.")

        try:
            decoded = list(self.handle.batch_decode(ids))
        except Exception as exc:
            raise DecodeError(f"Tokenizer {self.name!r} failed to decode batch: {exc}") from exc

        texts: List[str] = []
        for index, item in enumerate(decoded):
            if not isinstance(item, str):
                raise DecodeError(f"Decoded item {index} is {type(item).__name__}, expected str.")
            texts.append(item)
        logger.debug("Decoded batch: shape=%s size=%s", tuple(ids.shape), len(texts))
        return texts

    # ---------------------------
    # Internal helpers
    # ---------------------------
    def _load(self) -> TokenizerHandle:
        try:
            return self.hub.load(self.name)
        except Exception as exc:
            raise LoadError(f"Could not load tokenizer {self.name!r}: {exc}") from exc


__all__ = ["TokenizerAdapter", "hub_from_settings"]
