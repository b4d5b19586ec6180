"""Typer-based command line interface for walking a collection page by page.

The ``pages`` command loads configuration (package defaults, optional YAML,
``.env`` file, environment), connects to the configured collection and prints
every page as indented extended JSON until the collection is exhausted or
``--max-pages`` pages were printed.

Exit codes
----------
0 success
3 connection error (unreachable store, authentication failure)
4 configuration error
5 query error (rejected query, undecodable reply)
6 timeout
"""

from __future__ import annotations

import itertools
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from bson import json_util
from dotenv import dotenv_values

from .config import ConfigModel, load_config
from .core.driver import PaginationDriver
from .core.fetcher import PageFetcher
from .core.hooks import CommandEventListener, LoggingHook, QueryHook
from .core.models import Page, parse_key
from .core.store import open_store
from .utils.errors import (
    ConfigError,
    DecodeError,
    QueryError,
    QueryTimeoutError,
    StoreConnectionError,
)
from .utils.logging import configure_logging, get_logger

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

app = typer.Typer(
    name="cursorpager",
    help="Walk a document collection in key order. Use 'cursorpager pages' to print pages.",
)

EXIT_CONNECTION = 3
EXIT_CONFIG = 4
EXIT_QUERY = 5
EXIT_TIMEOUT = 6


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> None:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _load_env(env_file: Path | None) -> dict[str, str]:
    """Return ``os.environ`` overlaid on the values of ``env_file``."""

    values: dict[str, str] = {}
    if env_file is not None and env_file.is_file():
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ)
    return values


def _render_page(page: Page, number: int, indent: int) -> str:
    body = json_util.dumps(
        list(page.documents),
        indent=indent or None,
        json_options=json_util.RELAXED_JSON_OPTIONS,
    )
    return f"# page {number} ({len(page)} documents)\n{body}"


def _build_hook(cfg: ConfigModel) -> QueryHook:
    return LoggingHook(
        get_logger("queries"),
        excluded_operations=cfg.logging.excluded_operations,
        indent=cfg.logging.indent,
    )


@app.callback()
def main() -> None:
    """Entry point for the cursorpager command group."""
    pass


@app.command()
def pages(  # noqa: PLR0913
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    env_file: Optional[Path] = typer.Option(  # noqa: B008
        Path(".env"), "--env-file", help="dotenv file read before the environment"
    ),
    limit: Optional[int] = typer.Option(  # noqa: B008
        None, "--limit", "-n", help="Documents per page (default: paging.page_size)"
    ),
    after: Optional[str] = typer.Option(  # noqa: B008
        None, "--after", help="Start after this key (ObjectId hex, integer or string)"
    ),
    max_pages: Optional[int] = typer.Option(  # noqa: B008
        None, "--max-pages", min=1, help="Stop after this many pages"
    ),
    log_commands: bool | None = typer.Option(  # noqa: B008
        None,
        "--log-commands/--no-log-commands",
        help="Log every driver command and reply",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Log queries and progress to stderr"
    ),
) -> None:
    """Print consecutive pages of the configured collection."""

    env = _load_env(env_file)
    try:
        cfg = load_config(config_path, env=env)
    except (ConfigError, OSError) as exc:
        _safe_exit(EXIT_CONFIG, str(exc).splitlines()[0])

    command_events = cfg.logging.command_events if log_commands is None else log_commands
    logger = configure_logging("DEBUG" if verbose or command_events else cfg.logging.level)
    hook = _build_hook(cfg)
    # the listener already sees the find command, the fetcher hook would repeat it
    listeners = [CommandEventListener(hook)] if command_events else []

    page_size = limit if limit is not None else cfg.paging.page_size
    start_after = parse_key(after) if after is not None else None

    try:
        with open_store(cfg, listeners=listeners, env=env) as store:
            fetcher = PageFetcher(
                store,
                key_field=cfg.paging.key_field,
                hook=None if command_events else hook,
                timeout=cfg.paging.timeout_seconds,
            )
            driver = PaginationDriver(fetcher, page_size, start_after=start_after)
            printed = 0
            for printed, page in enumerate(itertools.islice(driver, max_pages), start=1):
                typer.echo(_render_page(page, printed, cfg.logging.indent))
            logger.info(
                "Printed %d page(s); last cursor %r%s",
                printed,
                driver.cursor,
                " (exhausted)" if driver.exhausted else "",
            )
    except ConfigError as exc:
        _safe_exit(EXIT_CONFIG, str(exc))
    except StoreConnectionError as exc:
        _safe_exit(EXIT_CONNECTION, str(exc))
    except QueryTimeoutError as exc:
        _safe_exit(EXIT_TIMEOUT, str(exc))
    except (QueryError, DecodeError) as exc:
        _safe_exit(EXIT_QUERY, str(exc))
