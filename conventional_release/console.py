"""Console output helpers.

Everything goes to stdout so the GitHub Actions runner can pick up workflow
commands (``::debug::``, ``::warning::``, ``::error::``). Outside of Actions
they are printed as-is, which is still readable.
"""

from __future__ import annotations

import sys


def _escape(msg: str) -> str:
    """Escape a message for use as workflow command data."""
    return msg.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of compute and publish in the job log.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    print(f"  {msg}")


def debug(msg: str) -> None:
    """Emit a debug line, only shown when step debug logging is enabled."""
    print(f"::debug::{_escape(msg)}")


def warning(msg: str) -> None:
    print(f"::warning::{_escape(msg)}")


def error(msg: str) -> None:
    print(f"::error::{_escape(msg)}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the pipeline.
    """
    error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
