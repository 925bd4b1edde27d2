from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from modules.options import (
    CheckRequest,
    ConfigurationError,
    SumRequest,
    build_options,
    resolve_request,
)


def test_defaults_resolve_to_stdin_sum() -> None:
    request = resolve_request(build_options())

    assert request == SumRequest(files=(), directory=None, recursive=False, encoding="base64")


def test_check_resolves_to_check_request() -> None:
    request = resolve_request(build_options(check="-", encoding="hex"))

    assert isinstance(request, CheckRequest)
    assert request.reads_stdin
    assert request.encoding == "hex"


def test_blank_directory_and_check_are_unset() -> None:
    options = build_options(directory="", check="", files=["a.txt"])

    assert options.directory is None
    assert options.check is None


@pytest.mark.parametrize(
    ("values", "message"),
    [
        ({"encoding": "base32"}, 'unsupported encoding: base32 (must be "base64" or "hex")'),
        ({"recursive": True}, "--recursive requires --directory"),
        ({"recursive": True, "files": ["a.txt"]}, "--recursive requires --directory"),
        ({"check": "sums.txt", "files": ["a.txt"]}, "--check is incompatible with --file and --directory"),
        ({"check": "sums.txt", "directory": "dir"}, "--check is incompatible with --file and --directory"),
        ({"chunk_size": 0}, "checksum.chunk_size must be positive"),
    ],
)
def test_invalid_combinations_raise_configuration_error(values, message) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        build_options(**values)

    assert str(excinfo.value) == message


def test_encoding_is_checked_before_mode_rules() -> None:
    with pytest.raises(ConfigurationError, match="unsupported encoding"):
        build_options(encoding="rot13", recursive=True)


def test_non_numeric_chunk_size_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="chunk_size"):
        build_options(chunk_size="lots")
