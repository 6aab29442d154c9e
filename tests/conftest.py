import os
from typing import Dict, List, Optional

import numpy as np
import pytest

from tokenbridge.config import TokenizerSettings


class FakeHandle:
    """Deterministic character-level tokenizer for tests without downloads.

    Every character maps to its code point plus one, id 0 is end-of-text and
    doubles as right padding.
    """

    def __init__(self, eos_token_id: Optional[int] = 0):
        self._eos_token_id = eos_token_id
        self.tokenize_calls: List[List[str]] = []
        self.decode_calls: List[np.ndarray] = []
        self.fail_next: Optional[Exception] = None
        self.override_result: Optional[Dict[str, object]] = None
        self.override_decoded: Optional[list] = None

    @property
    def eos_token_id(self) -> Optional[int]:
        return self._eos_token_id

    def batch_tokenize(self, texts: List[str]) -> Dict[str, object]:
        self.tokenize_calls.append(list(texts))
        self._maybe_fail()
        if self.override_result is not None:
            return self.override_result
        width = max(len(text) for text in texts)
        ids = np.zeros((len(texts), width), dtype=np.int64)
        for row, text in enumerate(texts):
            ids[row, : len(text)] = [ord(char) + 1 for char in text]
        return {"input_ids": ids, "attention_mask": (ids != 0).astype(np.int64)}

    def batch_decode(self, ids: np.ndarray) -> list:
        self.decode_calls.append(ids)
        self._maybe_fail()
        if self.override_decoded is not None:
            return self.override_decoded
        if ids.ndim == 1:
            ids = ids[:, None]
        return ["".join(chr(int(token) - 1) for token in row if token != 0) for row in ids]

    def _maybe_fail(self) -> None:
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc


class FakeHub:
    """Hub that hands out one shared :class:`FakeHandle`."""

    def __init__(self, handle: Optional[FakeHandle] = None, known: tuple = ("fake-char",)):
        self.handle = handle or FakeHandle()
        self.known = known
        self.loaded: List[str] = []

    def load(self, name: str) -> FakeHandle:
        self.loaded.append(name)
        if name not in self.known:
            raise OSError(f"{name} is not a valid model identifier")
        return self.handle


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def hub_without_eos() -> FakeHub:
    return FakeHub(FakeHandle(eos_token_id=None))


@pytest.fixture
def test_settings() -> TokenizerSettings:
    return TokenizerSettings(tokenizer_name="fake-char", backend="transformers")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("TOKENBRIDGE_NETWORK_TESTS") == "1":
        return
    skip_network = pytest.mark.skip(reason="set TOKENBRIDGE_NETWORK_TESTS=1 to download tokenizers")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)
