"""Run configuration, immutable values threaded into each stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

DEFAULT_READ_RANGE = "Main"
DEFAULT_CREDENTIALS_PATH = Path("credentials.json")
DEFAULT_TOKEN_PATH = Path("token.json")


class OutputFormat(str, Enum):
    text = "text"
    json = "json"
    summary = "summary"


@dataclass(frozen=True)
class RunConfig:
    """Output options for a single invocation."""

    output_format: OutputFormat = OutputFormat.text
    debug: bool = False
    legacy_json: bool = False


@dataclass(frozen=True)
class SheetSettings:
    """Where to fetch the grid from and where OAuth material lives."""

    spreadsheet_id: str
    read_range: str = DEFAULT_READ_RANGE
    credentials_path: Path = DEFAULT_CREDENTIALS_PATH
    token_path: Path = DEFAULT_TOKEN_PATH

    def __post_init__(self) -> None:
        if not self.spreadsheet_id.strip():
            raise ValueError("spreadsheet_id must be non-empty")
        if not self.read_range.strip():
            raise ValueError("read_range must be non-empty")
