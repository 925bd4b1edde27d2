"""Produce ``<checksum>  <label>`` records for collected inputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterable, TextIO

from utils.hash_tools import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ENCODING,
    Encoding,
    compute_digest,
    compute_file_digest,
    encode_digest,
)

from .path_collector import InputSource

LOGGER = logging.getLogger(__name__)

RECORD_SEPARATOR = "  "


@dataclass(slots=True, frozen=True)
class ChecksumRecord:
    """One line of a checksum listing."""

    checksum: str
    label: str

    def format(self) -> str:
        return f"{self.checksum}{RECORD_SEPARATOR}{self.label}\n"


class SumReporter:
    """Checksum each input in order and write one record per input.

    The first input that cannot be opened or read aborts the run with the
    underlying :class:`OSError`; records already written stay written.
    """

    def __init__(
        self,
        *,
        encoding: Encoding = DEFAULT_ENCODING,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._encoding = encoding
        self._chunk_size = chunk_size

    @property
    def encoding(self) -> Encoding:
        return self._encoding

    def checksum(self, source: InputSource, stdin: BinaryIO | None = None) -> ChecksumRecord:
        path = source.path
        if path is not None:
            digest = compute_file_digest(path, self._chunk_size)
        elif stdin is not None:
            digest = compute_digest(stdin, self._chunk_size)
        else:
            raise ValueError("standard input is not available")
        LOGGER.debug("Computed checksum", extra={"path": source.label})
        return ChecksumRecord(checksum=encode_digest(digest, self._encoding), label=source.label)

    def run(
        self,
        sources: Iterable[InputSource],
        out: TextIO,
        *,
        stdin: BinaryIO | None = None,
    ) -> int:
        """Write a record for every source to *out*; return how many were written."""

        written = 0
        for source in sources:
            record = self.checksum(source, stdin)
            out.write(record.format())
            written += 1
        out.flush()
        return written


__all__ = ["ChecksumRecord", "RECORD_SEPARATOR", "SumReporter"]
