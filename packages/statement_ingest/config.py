"""Import settings resolved from keyword arguments or the environment.

Environment variables
---------------------
- ``STATEMENT_INGEST_ERROR_LIMIT``: row errors kept in a summary (default 5)
- ``STATEMENT_INGEST_GLOB``: file pattern for directory imports (``*.csv``)
- ``STATEMENT_INGEST_AMOUNT_FORMAT``: ``br`` (default) or ``us``
- ``STATEMENT_INGEST_REJECT_EMPTY_DESCRIPTION``: ``1/true/yes`` to reject
  rows whose description is blank

The CLI loads a local ``.env`` before calling :meth:`ImportSettings.from_env`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .parsers import AMOUNT_FORMATS, AmountFormat, resolve_amount_format

DEFAULT_ERROR_LIMIT = 5
DEFAULT_GLOB = "*.csv"
DEFAULT_SOURCE = "import"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True, slots=True)
class ImportSettings:
    error_limit: int = DEFAULT_ERROR_LIMIT
    glob_pattern: str = DEFAULT_GLOB
    amount_format: AmountFormat = field(default_factory=lambda: AMOUNT_FORMATS["br"])
    reject_empty_description: bool = False

    def __post_init__(self) -> None:
        if self.error_limit < 0:
            raise ValueError("error_limit must be >= 0")
        if not self.glob_pattern:
            raise ValueError("glob_pattern must be non-empty")

    @classmethod
    def from_env(cls, **overrides: object) -> ImportSettings:
        """Build settings from ``STATEMENT_INGEST_*`` vars; ``overrides`` win."""

        values: dict[str, object] = {
            "error_limit": _env_int("STATEMENT_INGEST_ERROR_LIMIT", DEFAULT_ERROR_LIMIT),
            "glob_pattern": os.getenv("STATEMENT_INGEST_GLOB") or DEFAULT_GLOB,
            "amount_format": resolve_amount_format(
                os.getenv("STATEMENT_INGEST_AMOUNT_FORMAT") or "br"
            ),
            "reject_empty_description": _env_bool("STATEMENT_INGEST_REJECT_EMPTY_DESCRIPTION"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


__all__ = [
    "DEFAULT_ERROR_LIMIT",
    "DEFAULT_GLOB",
    "DEFAULT_SOURCE",
    "ImportSettings",
]
