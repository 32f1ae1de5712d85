"""Command line: bakemcp [options] <openapi-input>

Exit codes:
  0  success
  1  usage error, invalid settings, unsupported or invalid OpenAPI,
     generation failure
  2  input not found or unreadable
  3  output directory not empty (use --force)
  4  no mappable operations
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import structlog
from pydantic import ValidationError

from . import __version__
from .codegen import generate, prepare_output_dir
from .config import GeneratorSettings
from .context_builder import build_tools
from .exceptions import (
    BakeMCPError,
    InvalidSpecError,
    NoOperationsError,
    OutputDirectoryNotEmptyError,
    SpecNotFoundError,
    UnsupportedSpecVersionError,
)
from .loader import load_operations
from .log import configure_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INPUT = 2
EXIT_OUTPUT_NOT_EMPTY = 3
EXIT_NO_OPERATIONS = 4


@dataclass
class CliConfig:
    """Parsed command line arguments."""

    input_path: str
    output_dir: Path | None = None
    force: bool = False


def run(cfg: CliConfig, settings: GeneratorSettings | None = None) -> int:
    """Load, map and generate. Returns the process exit code."""
    settings = settings or GeneratorSettings()
    output_dir = cfg.output_dir or Path.cwd()

    try:
        result = load_operations(cfg.input_path, timeout=settings.fetch_timeout)
        if not result.operations:
            raise NoOperationsError()

        prepare_output_dir(output_dir, force=cfg.force)
        tools = build_tools(result.operations, result.base_url)
        generate(output_dir, tools, settings)
    except SpecNotFoundError as e:
        return _fail(EXIT_INPUT, e)
    except UnsupportedSpecVersionError as e:
        return _fail(EXIT_ERROR, e)
    except InvalidSpecError as e:
        return _fail(EXIT_ERROR, e)
    except OutputDirectoryNotEmptyError as e:
        return _fail(EXIT_OUTPUT_NOT_EMPTY, e)
    except NoOperationsError as e:
        return _fail(EXIT_NO_OPERATIONS, e)
    except BakeMCPError as e:
        return _fail(EXIT_ERROR, e, prefix="generation failed: ")
    except OSError as e:
        return _fail(EXIT_ERROR, e, prefix="generation failed: ")

    return EXIT_OK


def _fail(code: int, error: Exception, prefix: str = "") -> int:
    logger.debug("Generation aborted", exit_code=code, error=type(error).__name__)
    print(f"{prefix}{error}", file=sys.stderr)
    return code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bakemcp",
        description="Generate a FastMCP Node server from an OpenAPI 3.x document.",
    )
    parser.add_argument("input", metavar="openapi-input",
                        help="path or http(s) URL of an OpenAPI 3.x file (JSON or YAML)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="output directory (default: current directory)")
    parser.add_argument("-f", "--force", action="store_true",
                        help="overwrite non-empty output directory")
    parser.add_argument("--log-level", default=None,
                        help="logging level (default: BAKEMCP_LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"bakemcp {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; 2 means "input not found" here
        return EXIT_OK if e.code == 0 else EXIT_ERROR

    try:
        settings = GeneratorSettings()
    except ValidationError as e:
        return _fail(EXIT_ERROR, e, prefix="invalid settings: ")
    configure_logging(args.log_level or settings.log_level)

    cfg = CliConfig(input_path=args.input, output_dir=args.output, force=args.force)
    return run(cfg, settings)
