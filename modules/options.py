"""Per-invocation options and the operation request they resolve to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from utils.hash_tools import DEFAULT_CHUNK_SIZE, DEFAULT_ENCODING, Encoding, validate_encoding

STDIN_MARKER = "-"


class ConfigurationError(ValueError):
    """Raised when invocation options are invalid, before any I/O happens."""


class ChecksumOptions(BaseModel):
    """Validated options for a single s3sum run."""

    model_config = ConfigDict(frozen=True)

    files: list[str] = Field(default_factory=list)
    directory: Optional[str] = None
    recursive: bool = False
    check: Optional[str] = None
    encoding: str = DEFAULT_ENCODING
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @field_validator("directory", "check", mode="before")
    @classmethod
    def blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value:
            return None
        return value

    @field_validator("encoding")
    @classmethod
    def known_encoding(cls, value: str) -> str:
        return validate_encoding(value)

    @field_validator("chunk_size")
    @classmethod
    def positive_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("checksum.chunk_size must be positive")
        return value

    @model_validator(mode="after")
    def compatible_modes(self) -> "ChecksumOptions":
        if self.recursive and self.directory is None:
            raise ValueError("--recursive requires --directory")
        if self.check is not None and (self.files or self.directory is not None):
            raise ValueError("--check is incompatible with --file and --directory")
        return self


@dataclass(slots=True, frozen=True)
class SumRequest:
    """Checksum the collected inputs (or standard input) and print records."""

    files: tuple[str, ...]
    directory: str | None
    recursive: bool
    encoding: Encoding


@dataclass(slots=True, frozen=True)
class CheckRequest:
    """Verify the records of a checksum listing (``-`` reads standard input)."""

    listing: str
    encoding: Encoding

    @property
    def reads_stdin(self) -> bool:
        return self.listing == STDIN_MARKER


OperationRequest = Union[SumRequest, CheckRequest]


def _first_error_message(exc: ValidationError) -> str:
    for error in exc.errors():
        original = (error.get("ctx") or {}).get("error")
        if original is not None:
            return str(original)
        location = ".".join(str(part) for part in error.get("loc", ()))
        return f"{location}: {error['msg']}" if location else error["msg"]
    return str(exc)


def build_options(**values: Any) -> ChecksumOptions:
    """Construct :class:`ChecksumOptions`, mapping validation failures to
    :class:`ConfigurationError` with a single descriptive message."""

    try:
        return ChecksumOptions(**values)
    except ValidationError as exc:
        raise ConfigurationError(_first_error_message(exc)) from exc


def resolve_request(options: ChecksumOptions) -> OperationRequest:
    encoding = validate_encoding(options.encoding)
    if options.check is not None:
        return CheckRequest(listing=options.check, encoding=encoding)
    return SumRequest(
        files=tuple(options.files),
        directory=options.directory,
        recursive=options.recursive,
        encoding=encoding,
    )


__all__ = [
    "ChecksumOptions",
    "CheckRequest",
    "ConfigurationError",
    "OperationRequest",
    "STDIN_MARKER",
    "SumRequest",
    "build_options",
    "resolve_request",
]
