import pytest
import torch

from tokenbridge.config import TokenizerSettings
from tokenbridge.errors import LoadError
from tokenbridge.tokenizer import TokenizerAdapter

pytestmark = pytest.mark.network


@pytest.mark.parametrize("backend", ["transformers", "tiktoken"])
def test_gpt2_round_trip(backend):
    settings = TokenizerSettings(tokenizer_name="gpt2", backend=backend)
    adapter = TokenizerAdapter("gpt2", settings=settings)

    tokens = adapter.encode(["hello world"])
    assert tokens.dtype == torch.int64
    assert tokens.shape[0] == 1
    assert tokens.shape[1] >= 1
    assert adapter.is_end_of_text(tokens[0][-1]) is False
    assert adapter.decode(tokens) == ["hello world"]


@pytest.mark.parametrize("backend", ["transformers", "tiktoken"])
def test_gpt2_batch_and_end_of_text(backend):
    settings = TokenizerSettings(tokenizer_name="gpt2", backend=backend)
    adapter = TokenizerAdapter("gpt2", settings=settings)

    texts = ["The quick brown fox", "jumps", "over the lazy dog."]
    tokens = adapter.encode(texts)
    assert tokens.shape[0] == len(texts)
    assert adapter.decode(tokens) == texts

    assert adapter.eos_token_id == 50256
    assert adapter.is_end_of_text(50256) is True
    assert adapter.is_end_of_text(tokens[0][0]) is False
    assert adapter.encode([]).shape[0] == 0


def test_unknown_model_raises_load_error():
    with pytest.raises(LoadError):
        TokenizerAdapter("this-org/definitely-not-a-tokenizer", settings=TokenizerSettings())
