"""Verify files against a previously generated checksum listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, TextIO

from utils.hash_tools import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ENCODING,
    Encoding,
    compute_file_digest,
    encode_digest,
)

from .sum_reporter import RECORD_SEPARATOR

LOGGER = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_FAILED = "FAILED"


class ChecksumListingError(ValueError):
    """Raised when a checksum listing line cannot be parsed."""


class ChecksumMismatchError(RuntimeError):
    """Raised after a check run in which at least one checksum differed."""

    def __init__(self, summary: "RunSummary") -> None:
        super().__init__(f"{summary.failures} checksum(s) did NOT match")
        self.summary = summary


@dataclass(slots=True, frozen=True)
class VerificationOutcome:
    """Result of verifying one listing line."""

    path: str
    ok: bool

    @property
    def status(self) -> str:
        return STATUS_OK if self.ok else STATUS_FAILED

    def format(self) -> str:
        return f"{self.path}: {self.status}\n"


@dataclass(slots=True)
class RunSummary:
    """Aggregate counters for a check run."""

    processed: int = 0
    failures: int = 0

    @property
    def ok(self) -> bool:
        return self.failures == 0

    def record(self, outcome: VerificationOutcome) -> None:
        self.processed += 1
        if not outcome.ok:
            self.failures += 1

    def raise_for_failures(self) -> None:
        if self.failures:
            raise ChecksumMismatchError(self)


def parse_checksum_line(line: str) -> tuple[str, str]:
    """Split *line* into ``(expected_checksum, path)`` on the first separator.

    Paths are taken literally, so a path that itself contains two consecutive
    spaces cannot be told apart from the separator.
    """

    expected, separator, path = line.partition(RECORD_SEPARATOR)
    if not separator:
        raise ChecksumListingError(f"invalid checksum line: {line!r}")
    return expected, path


def _strip_line_ending(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class CheckVerifier:
    """Recompute each listed file's checksum and compare it with the listing.

    Parse errors and I/O errors abort the run immediately. Mismatches are
    reported per line and aggregated into a :class:`RunSummary`.
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

    def verify_line(self, line: str) -> VerificationOutcome:
        expected, path = parse_checksum_line(line)
        digest = compute_file_digest(path, self._chunk_size)
        actual = encode_digest(digest, self._encoding)
        outcome = VerificationOutcome(path=path, ok=actual == expected)
        if not outcome.ok:
            LOGGER.info(
                "Checksum mismatch",
                extra={"path": path, "expected": expected, "actual": actual},
            )
        return outcome

    def iter_outcomes(self, lines: Iterable[str]) -> Iterator[VerificationOutcome]:
        for raw_line in lines:
            line = _strip_line_ending(raw_line)
            if not line:
                continue
            yield self.verify_line(line)

    def run(self, lines: Iterable[str], out: TextIO) -> RunSummary:
        """Verify every line of *lines*, writing one status line per entry.

        Raises :class:`ChecksumMismatchError` once the listing is exhausted if
        any entry failed.
        """

        summary = RunSummary()
        for outcome in self.iter_outcomes(lines):
            out.write(outcome.format())
            summary.record(outcome)
        out.flush()

        LOGGER.info(
            "Verification finished",
            extra={"processed": summary.processed, "failures": summary.failures},
        )
        summary.raise_for_failures()
        return summary


__all__ = [
    "ChecksumListingError",
    "ChecksumMismatchError",
    "CheckVerifier",
    "RunSummary",
    "STATUS_FAILED",
    "STATUS_OK",
    "VerificationOutcome",
    "parse_checksum_line",
]
