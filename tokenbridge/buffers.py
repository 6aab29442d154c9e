"""Copy numeric buffers between torch tensors and numpy arrays.

Token ids live in ``torch.Tensor`` buffers on our side, while tokenizer
libraries hand back ``numpy.ndarray`` objects. Conversions go through a
closed dtype table and a checked byte-level copy, so values come out
bit-for-bit identical and in row-major order.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import torch

from tokenbridge.errors import UnsupportedDtypeError

DTYPE_TABLE: Dict[torch.dtype, np.dtype] = {
    torch.float32: np.dtype(np.float32),
    torch.int32: np.dtype(np.int32),
    torch.int64: np.dtype(np.int64),
    torch.uint8: np.dtype(np.uint8),
}

_REVERSE_DTYPE_TABLE: Dict[np.dtype, torch.dtype] = {
    numpy_dtype: torch_dtype for torch_dtype, numpy_dtype in DTYPE_TABLE.items()
}


def external_dtype(dtype: torch.dtype) -> np.dtype:
    """Return the numpy dtype paired with a torch dtype."""
    try:
        return DTYPE_TABLE[dtype]
    except (KeyError, TypeError) as exc:
        raise UnsupportedDtypeError(f"Unsupported buffer dtype: {dtype}") from exc


def local_dtype(dtype: Any) -> torch.dtype:
    """Return the torch dtype paired with a numpy dtype."""
    try:
        return _REVERSE_DTYPE_TABLE[np.dtype(dtype)]
    except (KeyError, TypeError) as exc:
        raise UnsupportedDtypeError(f"Unsupported array dtype: {dtype}") from exc


class BufferView:
    """Flat byte view over a C-contiguous numpy array.

    Writes through the view land in the array's own memory. Copies are only
    allowed between views of identical byte length.
    """

    def __init__(self, array: np.ndarray):
        if not array.flags.c_contiguous:
            raise ValueError("BufferView requires a C-contiguous array.")
        self._array = array
        self._bytes = array.reshape(-1).view(np.uint8)

    @property
    def nbytes(self) -> int:
        return int(self._bytes.size)

    @property
    def writable(self) -> bool:
        return bool(self._array.flags.writeable)

    def copy_from(self, other: "BufferView") -> None:
        if not self.writable:
            raise ValueError("Destination buffer is read-only.")
        if other.nbytes != self.nbytes:
            raise ValueError(
                f"Byte length mismatch: source has {other.nbytes}, destination has {self.nbytes}"
            )
        self._bytes[...] = other._bytes


def to_external(buffer: torch.Tensor) -> np.ndarray:
    """Copy a tensor into a freshly allocated numpy array of the same shape."""
    if not isinstance(buffer, torch.Tensor):
        raise TypeError(f"Expected a torch.Tensor, got {type(buffer).__name__}")
    dtype = external_dtype(buffer.dtype)
    source = buffer.detach().to("cpu").contiguous()
    array = np.zeros(tuple(source.shape), dtype=dtype)
    BufferView(array).copy_from(BufferView(source.numpy()))
    return array


def from_external(array: np.ndarray) -> torch.Tensor:
    """Copy a numpy array into a freshly allocated tensor of the same shape."""
    if not isinstance(array, np.ndarray):
        raise TypeError(f"Expected a numpy.ndarray, got {type(array).__name__}")
    dtype = local_dtype(array.dtype)
    source = array if array.flags.c_contiguous else np.ascontiguousarray(array)
    buffer = torch.zeros(tuple(array.shape), dtype=dtype)
    BufferView(buffer.numpy()).copy_from(BufferView(source))
    return buffer


__all__ = [
    "DTYPE_TABLE",
    "BufferView",
    "external_dtype",
    "local_dtype",
    "to_external",
    "from_external",
]
