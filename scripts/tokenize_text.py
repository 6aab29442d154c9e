"""Entrypoint script to encode or decode text with a pretrained tokenizer."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import torch

from tokenbridge.config import TokenizerSettings
from tokenbridge.errors import TokenizerAdapterError
from tokenbridge.tokenizer import TokenizerAdapter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Encode or decode text with a pretrained tokenizer.")
    parser.add_argument("--name", type=str, default=None, help="Tokenizer to load (default from settings).")
    parser.add_argument(
        "--backend",
        type=str,
        default=None,
        choices=["transformers", "tiktoken"],
        help="Tokenizer library binding (default from settings).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Print token ids for each text.")
    encode.add_argument("texts", nargs="+", help="Texts to encode as one batch.")

    decode = subparsers.add_parser("decode", help="Print the text for a row of token ids.")
    decode.add_argument("ids", nargs="+", type=int, help="Token ids to decode.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    overrides = {"backend": args.backend} if args.backend else {}
    settings = TokenizerSettings(**overrides)
    settings.configure_logging()

    try:
        adapter = TokenizerAdapter(args.name, settings=settings)
        if args.command == "encode":
            print(adapter.encode(args.texts).tolist())
        else:
            for text in adapter.decode(torch.tensor([args.ids], dtype=torch.int64)):
                print(text)
    except TokenizerAdapterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
