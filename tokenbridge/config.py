"""Configuration management for the tokenizer adapter."""

from __future__ import annotations

import logging
import os
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenbridge.hub import BACKENDS, PADDING_SIDES, PADDING_STRATEGIES, EncodingPolicy


class TokenizerSettings(BaseSettings):
    """Pydantic-powered settings for loading and driving a tokenizer."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    tokenizer_name: str = Field(
        "gpt2",
        validation_alias="TOKENIZER_NAME",
        description="Model hub identifier (or tiktoken encoding name) to load.",
    )
    backend: str = Field(
        "transformers",
        validation_alias="TOKENIZER_BACKEND",
        description="Tokenizer library binding (transformers|tiktoken).",
    )
    cache_dir: Optional[str] = Field(
        None,
        validation_alias="TOKENIZER_CACHE_DIR",
        description="Optional cache directory for downloaded tokenizer files.",
    )
    revision: Optional[str] = Field(
        None,
        validation_alias="TOKENIZER_REVISION",
        description="Pinned hub revision (branch, tag or commit).",
    )
    local_files_only: bool = Field(
        False,
        validation_alias="TOKENIZER_LOCAL_FILES_ONLY",
        description="Never hit the network; only use cached files.",
    )
    trust_remote_code: bool = Field(
        False,
        validation_alias="TOKENIZER_TRUST_REMOTE_CODE",
        description="Allow tokenizers that ship custom Python code.",
    )
    padding: str = Field(
        "longest",
        validation_alias="TOKENIZER_PADDING",
        description="Batch padding strategy (longest|max_length|do_not_pad).",
    )
    padding_side: str = Field(
        "right",
        validation_alias="TOKENIZER_PADDING_SIDE",
        description="Side that receives padding (left|right).",
    )
    truncation: bool = Field(
        False,
        validation_alias="TOKENIZER_TRUNCATION",
        description="Truncate sequences longer than max_length.",
    )
    max_length: Optional[int] = Field(
        None,
        validation_alias="TOKENIZER_MAX_LENGTH",
        description="Sequence length used by max_length padding and truncation.",
    )
    add_special_tokens: bool = Field(
        True,
        validation_alias="TOKENIZER_ADD_SPECIAL_TOKENS",
        description="Let the tokenizer add its BOS/EOS template when encoding.",
    )
    skip_special_tokens: bool = Field(
        True,
        validation_alias="TOKENIZER_SKIP_SPECIAL_TOKENS",
        description="Drop special tokens (padding included) when decoding.",
    )
    log_level: str = Field(
        "INFO", validation_alias="LOG_LEVEL", description="Logging level for the adapter."
    )
    log_file: Optional[str] = Field(
        None, validation_alias="LOG_FILE", description="Optional file path for adapter logs."
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}.")
        return normalized

    @field_validator("padding")
    @classmethod
    def validate_padding(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in PADDING_STRATEGIES:
            raise ValueError(f"padding must be one of {PADDING_STRATEGIES}.")
        return normalized

    @field_validator("padding_side")
    @classmethod
    def validate_padding_side(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in PADDING_SIDES:
            raise ValueError(f"padding_side must be one of {PADDING_SIDES}.")
        return normalized

    @field_validator("max_length")
    @classmethod
    def positive_length(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("max_length must be a positive integer.")
        return value

    @field_validator("log_level")
    @classmethod
    def uppercase_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def max_length_for_padding(self) -> "TokenizerSettings":
        if self.padding == "max_length" and self.max_length is None:
            raise ValueError("padding='max_length' requires max_length.")
        if self.truncation and self.max_length is None:
            raise ValueError("truncation requires max_length.")
        return self

    def policy(self) -> EncodingPolicy:
        """Return the padding/truncation policy described by these settings."""
        return EncodingPolicy(
            padding=self.padding,
            padding_side=self.padding_side,
            truncation=self.truncation,
            max_length=self.max_length,
            add_special_tokens=self.add_special_tokens,
            skip_special_tokens=self.skip_special_tokens,
        )

    def configure_logging(self) -> None:
        """Configure root logging according to settings.

        The adapter itself only emits DEBUG records on ``tokenbridge.*``
        loggers; they reach these handlers when ``log_level`` is DEBUG.
        """
        handlers = [logging.StreamHandler()]
        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(self.log_file))
        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            handlers=handlers,
        )


settings = TokenizerSettings()
