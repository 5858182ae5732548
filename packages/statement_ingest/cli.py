# ruff: noqa: I001
"""CLI for the ``statement_ingest`` package.

This module exposes callable command handlers (``cmd_import_file``,
``cmd_import_dir``, ...) and a Typer-based console interface. Environment
variables (notably ``DATABASE_URL`` and the ``STATEMENT_INGEST_*`` settings)
are loaded from a local ``.env`` using ``python-dotenv`` before delegating to
command logic. Business logic lives in ``statement_ingest.ingestor`` and the
store implementation in ``statement_ingest.persistence``.

Handlers return a process exit code: ``0`` when the command ran (an import
with rejected rows still counts as a run), ``1`` when it could not run at all.
Error messages go to stderr.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from typer.models import OptionInfo

from .config import DEFAULT_SOURCE, ImportSettings
from .logging_setup import (
    LEVEL_NAMES,
    LOG_LEVEL_ENV,
    configure_logging,
    get_logger,
    resolve_level,
)
from .models import ImportSummary

if TYPE_CHECKING:
    from .persistence import SqlTransactionStore

_log = get_logger("statement_ingest.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


@contextmanager
def _open_store(database_url: str | None) -> Iterator[SqlTransactionStore]:
    """Yield a ``SqlTransactionStore`` and dispose its engine afterwards.

    Raises ``RuntimeError`` when no database URL is configured.
    """

    # Local imports keep CLI startup fast for --help
    from db.client import Database, database_url as resolve_url
    from .persistence import SqlTransactionStore

    database = Database(resolve_url(database_url))
    try:
        yield SqlTransactionStore(database)
    finally:
        database.dispose()


def _settings(amount_format: str | None, error_limit: int | None) -> ImportSettings:
    from .parsers import resolve_amount_format

    fmt = resolve_amount_format(amount_format) if amount_format else None
    return ImportSettings.from_env(amount_format=fmt, error_limit=error_limit)


def _print_summary(summary: ImportSummary, *, as_json: bool) -> None:
    if as_json:
        print(summary.model_dump_json(by_alias=True, indent=2))
        return
    print(summary.message)
    print(
        f"inserted={summary.inserted_count} updated={summary.updated_count} "
        f"unchanged={summary.unchanged_count} rejected={summary.rejected_count}"
    )
    for name in summary.skipped_files:
        print(f"skipped: {name}")
    for err in summary.errors:
        print(f"  - {err}")


def _parse_day(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{option} must be YYYY-MM-DD, got {value!r}") from None


# ---- Command handlers --------------------------------------------------------


def cmd_init_db(*, database_url: str | None = None) -> int:
    """Create the ``bank_transactions`` table when missing.

    Intended for local SQLite files. Shared databases are migrated with
    Alembic from ``libs/db``.
    """

    from db.client import Database, database_url as resolve_url

    try:
        database = Database(resolve_url(database_url))
    except (RuntimeError, SQLAlchemyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    try:
        database.create_all()
    except SQLAlchemyError as e:
        print(f"Error: failed to create tables: {e}", file=sys.stderr)
        return 1
    finally:
        database.dispose()
    print(f"Initialized {database!r}")
    return 0


def cmd_import_file(
    csv_path: str,
    *,
    owner_id: str,
    source: str = DEFAULT_SOURCE,
    database_url: str | None = None,
    amount_format: str | None = None,
    error_limit: int | None = None,
    as_json: bool = False,
) -> int:
    """Import one statement CSV and print the summary."""

    from .errors import SchemaIncomplete
    from .ingestor import BatchIngestor

    path = Path(csv_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    try:
        settings = _settings(amount_format, error_limit)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with _open_store(database_url) as store:
            summary = BatchIngestor(store, settings).import_file(
                owner_id, data, source, filename=path.name
            )
    except SchemaIncomplete as e:
        print(f"Error: {path.name}: {e}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError, SQLAlchemyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_summary(summary, as_json=as_json)
    return 0


def cmd_import_dir(
    directory: str,
    *,
    owner_id: str,
    source: str = DEFAULT_SOURCE,
    database_url: str | None = None,
    amount_format: str | None = None,
    error_limit: int | None = None,
    as_json: bool = False,
) -> int:
    """Import every matching statement file in a directory."""

    from .errors import NoStatementFiles
    from .ingestor import BatchIngestor

    try:
        settings = _settings(amount_format, error_limit)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with _open_store(database_url) as store:
            summary = BatchIngestor(store, settings).import_directory(owner_id, directory, source)
    except (NoStatementFiles, NotADirectoryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError, SQLAlchemyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_summary(summary, as_json=as_json)
    return 0


def cmd_list_transactions(
    *,
    owner_id: str,
    start: str | None = None,
    end: str | None = None,
    sources: list[str] | None = None,
    limit: int | None = None,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Print an owner's stored transactions, newest first."""

    from .store import TransactionFilters

    try:
        filters = TransactionFilters(
            start=_parse_day(start, "--start"),
            end=_parse_day(end, "--end"),
            sources=tuple(sources) if sources else None,
            limit=limit,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with _open_store(database_url) as store:
            rows = store.find_by_owner(owner_id, filters)
    except (RuntimeError, SQLAlchemyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if as_json:
        payload = [
            {
                "ownerId": tx.owner_id,
                "date": tx.occurred_on.isoformat(),
                "description": tx.description,
                "category": tx.category,
                "amount": str(tx.amount),
                "direction": tx.direction.value,
                "source": tx.source,
            }
            for tx in rows
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    for tx in rows:
        print(
            f"{tx.occurred_on.isoformat()}\t{tx.signed_amount:>12}\t"
            f"{tx.category}\t{tx.source}\t{tx.description}"
        )
    _log.info("listed %d transaction(s) for owner %s", len(rows), owner_id)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank-statement CSV exports into the transaction store. "
        "Loads DATABASE_URL and STATEMENT_INGEST_* settings from a local .env."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Required options keep ``...``; optional ones take their default
# from the ``=`` in the signature, as Typer expects with ``Annotated``.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a statement CSV to import",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)
DIRECTORY_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--directory",
    help="Directory holding statement CSVs",
    dir_okay=True,
    file_okay=False,
    exists=False,
)

Owner = Annotated[str, typer.Option("--owner", help="Owner (user) id the rows belong to.")]
Source = Annotated[
    str, typer.Option("--source", help="Source tag stored with each row (e.g. nubank, itau).")
]
DatabaseUrl = Annotated[
    str | None, typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var).")
]
AmountFormatName = Annotated[
    str | None,
    typer.Option(
        "--amount-format",
        help="Amount notation: br (1.234,56) or us (1,234.56). Defaults to env or br.",
    ),
]
ErrorLimit = Annotated[
    int | None, typer.Option("--error-limit", min=0, help="Row errors kept in the summary.")
]
AsJson = Annotated[bool, typer.Option("--json", help="Print the result as JSON.")]


@app.command("init-db")
def init_db_cmd(database_url: DatabaseUrl = None) -> None:
    """Create the transaction table in the configured database."""

    code = cmd_init_db(database_url=database_url)
    if code:
        raise typer.Exit(code)


@app.command("import-file")
def import_file_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    owner_id: Owner,
    source: Source = DEFAULT_SOURCE,
    database_url: DatabaseUrl = None,
    amount_format: AmountFormatName = None,
    error_limit: ErrorLimit = None,
    as_json: AsJson = False,
) -> None:
    """Import a single statement CSV."""

    code = cmd_import_file(
        str(csv_path),
        owner_id=owner_id,
        source=source,
        database_url=database_url,
        amount_format=amount_format,
        error_limit=error_limit,
        as_json=as_json,
    )
    if code:
        raise typer.Exit(code)


@app.command("import-dir")
def import_dir_cmd(
    directory: Annotated[Path, DIRECTORY_OPTION],
    owner_id: Owner,
    source: Source = DEFAULT_SOURCE,
    database_url: DatabaseUrl = None,
    amount_format: AmountFormatName = None,
    error_limit: ErrorLimit = None,
    as_json: AsJson = False,
) -> None:
    """Import every statement CSV in a directory (sorted by name)."""

    code = cmd_import_dir(
        str(directory),
        owner_id=owner_id,
        source=source,
        database_url=database_url,
        amount_format=amount_format,
        error_limit=error_limit,
        as_json=as_json,
    )
    if code:
        raise typer.Exit(code)


@app.command("list-transactions")
def list_transactions_cmd(
    owner_id: Owner,
    start: Annotated[str | None, typer.Option("--start", help="First day (YYYY-MM-DD).")] = None,
    end: Annotated[str | None, typer.Option("--end", help="Last day (YYYY-MM-DD).")] = None,
    sources: Annotated[
        list[str] | None, typer.Option("--source", help="Restrict to a source; repeatable.")
    ] = None,
    limit: Annotated[int | None, typer.Option("--limit", min=1)] = None,
    database_url: DatabaseUrl = None,
    as_json: AsJson = False,
) -> None:
    """List stored transactions for an owner, newest first."""

    code = cmd_list_transactions(
        owner_id=owner_id,
        start=start,
        end=end,
        sources=sources,
        limit=limit,
        database_url=database_url,
        as_json=as_json,
    )
    if code:
        raise typer.Exit(code)


@app.callback()
def _root(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help=f"One of {', '.join(LEVEL_NAMES)}. Defaults to ${LOG_LEVEL_ENV} or INFO.",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log every row outcome (same as DEBUG).")
    ] = False,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    try:
        level = resolve_level(log_level, verbose=verbose)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    configure_logging(level)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_ingest.cli`
    main()
