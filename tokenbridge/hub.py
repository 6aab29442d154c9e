"""Typed client contracts for tokenizer libraries and their bindings.

The adapter only ever talks to a :class:`TokenizerHub` and the
:class:`TokenizerHandle` it returns. Each binding below maps one concrete
library onto that narrow surface:

* :class:`TransformersHub` loads pretrained tokenizers through
  ``transformers.AutoTokenizer`` (the Hugging Face hub and its local cache).
* :class:`TiktokenHub` loads BPE encodings through ``tiktoken``.

Both bindings exchange token ids as ``numpy.ndarray`` objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import tiktoken
from transformers import AutoTokenizer

from tokenbridge.errors import LoadError

PADDING_STRATEGIES = ("longest", "max_length", "do_not_pad")
PADDING_SIDES = ("left", "right")
BACKENDS = ("transformers", "tiktoken")


@runtime_checkable
class TokenizerHandle(Protocol):
    """A loaded tokenizer."""

    @property
    def eos_token_id(self) -> Optional[int]:
        ...

    def batch_tokenize(self, texts: List[str]) -> Mapping[str, np.ndarray]:
        """Tokenize a batch; the result must contain ``input_ids``."""
        ...

    def batch_decode(self, ids: np.ndarray) -> List[str]:
        """Decode every row of ``ids`` into one string."""
        ...


@runtime_checkable
class TokenizerHub(Protocol):
    """Resolves tokenizer names into loaded handles."""

    def load(self, name: str) -> TokenizerHandle:
        ...


@dataclass(frozen=True)
class EncodingPolicy:
    """Padding, truncation and special-token handling for batch calls."""

    padding: str = "longest"
    padding_side: str = "right"
    truncation: bool = False
    max_length: Optional[int] = None
    add_special_tokens: bool = True
    skip_special_tokens: bool = True

    def __post_init__(self) -> None:
        if self.padding not in PADDING_STRATEGIES:
            raise ValueError(f"padding must be one of {PADDING_STRATEGIES}, got {self.padding!r}")
        if self.padding_side not in PADDING_SIDES:
            raise ValueError(f"padding_side must be one of {PADDING_SIDES}, got {self.padding_side!r}")
        if self.max_length is not None and self.max_length <= 0:
            raise ValueError("max_length must be a positive integer.")
        if self.padding == "max_length" and self.max_length is None:
            raise ValueError("padding='max_length' requires max_length.")
        if self.truncation and self.max_length is None:
            raise ValueError("truncation requires max_length.")


# ---------------------------
# transformers binding
# ---------------------------
class TransformersHandle:
    """Handle around a ``transformers`` tokenizer."""

    def __init__(self, tokenizer: Any, policy: EncodingPolicy):
        self.tokenizer = tokenizer
        self.policy = policy

    @property
    def eos_token_id(self) -> Optional[int]:
        return self.tokenizer.eos_token_id

    def batch_tokenize(self, texts: List[str]) -> Dict[str, np.ndarray]:
        encoded = self.tokenizer(
            texts,
            padding=self.policy.padding,
            truncation=self.policy.truncation,
            max_length=self.policy.max_length,
            add_special_tokens=self.policy.add_special_tokens,
            return_attention_mask=True,
            return_tensors="np",
        )
        return {key: np.asarray(value) for key, value in encoded.items()}

    def batch_decode(self, ids: np.ndarray) -> List[str]:
        return list(
            self.tokenizer.batch_decode(ids, skip_special_tokens=self.policy.skip_special_tokens)
        )


class TransformersHub:
    """Loads tokenizers with ``AutoTokenizer.from_pretrained``."""

    def __init__(
        self,
        policy: Optional[EncodingPolicy] = None,
        *,
        cache_dir: Optional[str] = None,
        revision: Optional[str] = None,
        local_files_only: bool = False,
        trust_remote_code: bool = False,
    ):
        self.policy = policy or EncodingPolicy()
        self.cache_dir = cache_dir
        self.revision = revision
        self.local_files_only = local_files_only
        self.trust_remote_code = trust_remote_code

    def load(self, name: str) -> TransformersHandle:
        kwargs: Dict[str, Any] = {
            "use_fast": True,
            "local_files_only": self.local_files_only,
            "trust_remote_code": self.trust_remote_code,
        }
        if self.cache_dir:
            kwargs["cache_dir"] = self.cache_dir
        if self.revision:
            kwargs["revision"] = self.revision
        tokenizer = AutoTokenizer.from_pretrained(name, **kwargs)
        # GPT-2 style tokenizers ship without a pad token; batches need one.
        if tokenizer.pad_token is None and tokenizer.eos_token is not None:
            tokenizer.pad_token = tokenizer.eos_token
        tokenizer.padding_side = self.policy.padding_side
        return TransformersHandle(tokenizer, self.policy)


# ---------------------------
# tiktoken binding
# ---------------------------
class TiktokenHandle:
    """Handle around a ``tiktoken`` encoding.

    tiktoken returns ragged Python lists, so batches are padded here with the
    end-of-text id to build a rectangular int64 array. Encodings carry no
    BOS/EOS template, so ``add_special_tokens`` has nothing to add.
    """

    def __init__(self, encoding: "tiktoken.Encoding", policy: EncodingPolicy):
        self.encoding = encoding
        self.policy = policy
        self._special_ids = {
            encoding.encode_single_token(token) for token in encoding.special_tokens_set
        }

    @property
    def eos_token_id(self) -> Optional[int]:
        if "<|endoftext|>" not in self.encoding.special_tokens_set:
            return None
        return self.encoding.eot_token

    def batch_tokenize(self, texts: List[str]) -> Dict[str, np.ndarray]:
        rows = self.encoding.encode_batch(list(texts), allowed_special={"<|endoftext|>"})
        if self.policy.truncation:
            rows = [row[: self.policy.max_length] for row in rows]
        width = self._row_width(rows)
        pad_id = self.eos_token_id
        if pad_id is None and any(len(row) != width for row in rows):
            raise ValueError(f"Encoding {self.encoding.name!r} has no token to pad with.")

        input_ids = np.full((len(rows), width), pad_id or 0, dtype=np.int64)
        attention_mask = np.zeros((len(rows), width), dtype=np.int64)
        for index, row in enumerate(rows):
            if self.policy.padding_side == "left":
                start = width - len(row)
            else:
                start = 0
            input_ids[index, start : start + len(row)] = row
            attention_mask[index, start : start + len(row)] = 1
        return {"input_ids": input_ids, "attention_mask": attention_mask}

    def batch_decode(self, ids: np.ndarray) -> List[str]:
        ids = np.asarray(ids)
        if ids.ndim == 1:
            return [self._decode_row([token]) for token in ids]
        if ids.ndim == 2:
            return [self._decode_row(row) for row in ids]
        raise ValueError(f"Expected a 1-D or 2-D array of token ids, got shape {ids.shape}")

    def _row_width(self, rows: Sequence[Sequence[int]]) -> int:
        longest = max((len(row) for row in rows), default=0)
        if self.policy.padding == "longest":
            return longest
        if self.policy.padding == "max_length":
            if longest > self.policy.max_length:
                raise ValueError(
                    f"Sequence of {longest} tokens exceeds max_length={self.policy.max_length}; "
                    "enable truncation."
                )
            return self.policy.max_length
        if any(len(row) != longest for row in rows):
            raise ValueError("Sequences differ in length and padding is disabled.")
        return longest

    def _decode_row(self, row: Sequence[int]) -> str:
        tokens = [int(token) for token in row]
        if self.policy.skip_special_tokens:
            tokens = [token for token in tokens if token not in self._special_ids]
        return self.encoding.decode(tokens)


class TiktokenHub:
    """Loads encodings with ``tiktoken.get_encoding``."""

    def __init__(self, policy: Optional[EncodingPolicy] = None):
        self.policy = policy or EncodingPolicy()

    def load(self, name: str) -> TiktokenHandle:
        return TiktokenHandle(tiktoken.get_encoding(name), self.policy)


def get_hub(backend: str, policy: Optional[EncodingPolicy] = None, **options: Any) -> TokenizerHub:
    """Return the hub binding registered under ``backend``."""
    if backend == "transformers":
        return TransformersHub(policy, **options)
    if backend == "tiktoken":
        return TiktokenHub(policy)
    raise LoadError(f"Unknown tokenizer backend {backend!r}; expected one of {BACKENDS}")


__all__ = [
    "BACKENDS",
    "EncodingPolicy",
    "TokenizerHandle",
    "TokenizerHub",
    "TransformersHandle",
    "TransformersHub",
    "TiktokenHandle",
    "TiktokenHub",
    "get_hub",
]
