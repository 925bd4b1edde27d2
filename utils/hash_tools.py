"""Utilities for computing and encoding CRC-64/NVME checksums."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import BinaryIO, Literal, get_args

from awscrt import checksums

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB
DIGEST_SIZE = 8
Encoding = Literal["base64", "hex"]
SUPPORTED_ENCODINGS: tuple[str, ...] = get_args(Encoding)
DEFAULT_ENCODING: Encoding = "base64"


class Crc64NvmeAccumulator:
    """Incremental CRC-64/NVME accumulator.

    ``update`` folds bytes into the running value; ``digest`` renders it as the
    8-byte big-endian form used by S3 and the ``crc64nvme`` reference tools.
    """

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes) -> "Crc64NvmeAccumulator":
        if data:
            self._value = checksums.crc64nvme(data, self._value)
        return self

    def digest(self) -> bytes:
        return self._value.to_bytes(DIGEST_SIZE, "big")


def compute_digest(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Consume *stream* to exhaustion and return its binary digest.

    Read errors propagate unchanged; no partial digest is ever returned.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    accumulator = Crc64NvmeAccumulator()
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        accumulator.update(chunk)
    return accumulator.digest()


def compute_file_digest(path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Compute the digest for the file at *path*, closing it on every exit path."""

    with open(path, "rb") as file_handle:
        return compute_digest(file_handle, chunk_size)


def validate_encoding(encoding: str) -> Encoding:
    if encoding not in SUPPORTED_ENCODINGS:
        raise ValueError(
            f'unsupported encoding: {encoding} (must be "base64" or "hex")'
        )
    return encoding  # type: ignore[return-value]


def encode_digest(digest: bytes, encoding: Encoding = DEFAULT_ENCODING) -> str:
    """Render *digest* as lowercase hex or padded standard base64."""

    if encoding == "hex":
        return digest.hex()
    validate_encoding(encoding)
    return base64.standard_b64encode(digest).decode("ascii")


__all__ = [
    "Crc64NvmeAccumulator",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_ENCODING",
    "DIGEST_SIZE",
    "Encoding",
    "SUPPORTED_ENCODINGS",
    "compute_digest",
    "compute_file_digest",
    "encode_digest",
    "validate_encoding",
]
