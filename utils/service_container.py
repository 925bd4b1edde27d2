"""Factory helpers for constructing the checksum services consistently."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from modules.check_verifier import CheckVerifier
from modules.options import ChecksumOptions, build_options
from modules.sum_reporter import SumReporter
from utils.config_loader import get_config_value, load_config, resolve_config_path
from utils.hash_tools import DEFAULT_CHUNK_SIZE, DEFAULT_ENCODING, validate_encoding


@dataclass(slots=True)
class ServiceContainer:
    """Bundle of the services used by a single s3sum invocation."""

    config: dict[str, Any]
    config_path: Path
    options: ChecksumOptions
    sum_reporter: SumReporter
    check_verifier: CheckVerifier


def configured_encoding(config: dict[str, Any]) -> str:
    return str(
        get_config_value("checksum", "encoding", default=DEFAULT_ENCODING, config=config)
    )


def configured_chunk_size(config: dict[str, Any]) -> Any:
    return get_config_value(
        "checksum", "chunk_size", default=DEFAULT_CHUNK_SIZE, config=config
    )


def build_service_container(
    config: dict[str, Any] | None = None,
    *,
    config_path: Path | str | None = None,
    options: ChecksumOptions | None = None,
) -> ServiceContainer:
    """Construct the reporter and verifier from configuration and options.

    When *options* is omitted, they are built from the configured defaults so
    library callers get the same wiring as the command line.
    """

    resolved_path = resolve_config_path(config_path)
    config_data = config if config is not None else load_config(resolved_path)

    if options is None:
        options = build_options(
            encoding=configured_encoding(config_data),
            chunk_size=configured_chunk_size(config_data),
        )

    encoding = validate_encoding(options.encoding)
    sum_reporter = SumReporter(encoding=encoding, chunk_size=options.chunk_size)
    check_verifier = CheckVerifier(encoding=encoding, chunk_size=options.chunk_size)

    return ServiceContainer(
        config=config_data,
        config_path=resolved_path,
        options=options,
        sum_reporter=sum_reporter,
        check_verifier=check_verifier,
    )


__all__ = [
    "ServiceContainer",
    "build_service_container",
    "configured_chunk_size",
    "configured_encoding",
]
