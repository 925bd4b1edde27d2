"""Command-line entry point for s3sum.

Computes CRC-64/NVME checksums for files, directories or standard input in
the ``<checksum>  <path>`` listing format, and verifies such listings with
``--check``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Sequence, TextIO

import yaml

from modules.check_verifier import ChecksumListingError, ChecksumMismatchError
from modules.options import (
    STDIN_MARKER,
    CheckRequest,
    ConfigurationError,
    OperationRequest,
    SumRequest,
    build_options,
    resolve_request,
)
from modules.path_collector import collect_inputs
from utils.config_loader import CONFIG_ENV_VAR, get_config_value, load_config, resolve_config_path
from utils.service_container import (
    ServiceContainer,
    build_service_container,
    configured_chunk_size,
    configured_encoding,
)

LOGGER = logging.getLogger(__name__)

PROG = "s3sum"
EXIT_OK = 0
EXIT_FAILURE = 1


def _split_file_values(values: Sequence[str] | None) -> list[str]:
    files: list[str] = []
    for value in values or ():
        files.extend(part for part in value.split(",") if part)
    return files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Compute CRC64NVME checksums for S3 object integrity verification",
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        metavar="FILE",
        help="path to input file (repeatable; default: stdin)",
    )
    parser.add_argument(
        "-d",
        "--directory",
        default=None,
        help="path to directory (checksums all files)",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="recurse into subdirectories (requires --directory)",
    )
    parser.add_argument(
        "-c",
        "--check",
        default=None,
        metavar="LISTING",
        help=f'verify checksums from file (or "{STDIN_MARKER}" for stdin)',
    )
    parser.add_argument(
        "-e",
        "--encoding",
        default=None,
        help="output encoding: base64 or hex (default: checksum.encoding from config, base64)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=(
            f"Optional configuration file path. Defaults to {CONFIG_ENV_VAR} "
            "or ~/.config/s3sum/config.yaml."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log debug details to stderr",
    )
    return parser


def _load_config(path: Path | None) -> dict[str, Any]:
    resolved = resolve_config_path(path)
    try:
        return load_config(resolved)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"invalid configuration {resolved}: {exc}") from exc


def configure_logging(config: dict[str, Any], stream: TextIO, *, verbose: bool = False) -> None:
    level_name = "DEBUG" if verbose else str(
        get_config_value("logging", "level", default="WARNING", config=config)
    )
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown logging level: {level_name}")
    logging.basicConfig(
        level=level,
        format=str(get_config_value("logging", "format", default=logging.BASIC_FORMAT, config=config)),
        stream=stream,
        force=True,
    )


def _allow_raw_file_names(stdout: TextIO, stderr: TextIO) -> None:
    """Write file names decoded with ``surrogateescape`` back as their raw bytes."""

    for stream, errors in ((stdout, "surrogateescape"), (stderr, "backslashreplace")):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors=errors)


def _decoded_lines(stream: BinaryIO) -> Iterator[str]:
    for raw_line in stream:
        yield os.fsdecode(raw_line)


def run_sum(
    request: SumRequest,
    container: ServiceContainer,
    *,
    stdin: BinaryIO,
    stdout: TextIO,
) -> None:
    sources = collect_inputs(request.files, request.directory, recursive=request.recursive)
    container.sum_reporter.run(sources, stdout, stdin=stdin)


def run_check(
    request: CheckRequest,
    container: ServiceContainer,
    *,
    stdin: BinaryIO,
    stdout: TextIO,
) -> None:
    if request.reads_stdin:
        container.check_verifier.run(_decoded_lines(stdin), stdout)
        return
    with open(request.listing, "rb") as listing:
        container.check_verifier.run(_decoded_lines(listing), stdout)


def dispatch(
    request: OperationRequest,
    container: ServiceContainer,
    *,
    stdin: BinaryIO,
    stdout: TextIO,
) -> None:
    if isinstance(request, CheckRequest):
        run_check(request, container, stdin=stdin, stdout=stdout)
    else:
        run_sum(request, container, stdin=stdin, stdout=stdout)


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    _allow_raw_file_names(stdout, stderr)

    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args.config)
        configure_logging(config, stderr, verbose=args.verbose)
        options = build_options(
            files=_split_file_values(args.files),
            directory=args.directory,
            recursive=args.recursive,
            check=args.check,
            encoding=args.encoding if args.encoding is not None else configured_encoding(config),
            chunk_size=configured_chunk_size(config),
        )
        request = resolve_request(options)
        container = build_service_container(config, config_path=args.config, options=options)
        dispatch(request, container, stdin=stdin, stdout=stdout)
    except (ConfigurationError, ChecksumListingError, ChecksumMismatchError, OSError) as exc:
        LOGGER.debug("Run aborted", exc_info=True)
        print(f"{PROG}: {exc}", file=stderr)
        return EXIT_FAILURE
    return EXIT_OK


def run() -> None:  # pragma: no cover - console script entry point
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    run()
