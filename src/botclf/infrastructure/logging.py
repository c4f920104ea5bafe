"""Logging & console helpers.

Features:
    * RichHandler based console logging (color, tracebacks)
    * Optional JSON logging mode (machine ingest)
    * Optional plain-text file log under ``LOG_DIR``
    * Helper utilities (`get_console`, `render_panel`) so service layers avoid
        importing rich directly, keeping presentation concerns centralized.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

_INITIALIZED = False
_JSON_MODE = False
_CONSOLE: Console | None = None


class _JsonHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            data = {
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info:
                data["exc_info"] = logging.Formatter().formatException(record.exc_info)
            sys.stderr.write(json.dumps(data, ensure_ascii=False) + "\n")
        except Exception:  # pragma: no cover
            self.handleError(record)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def _file_handler() -> logging.Handler | None:
    log_dir = os.getenv("LOG_DIR")
    if not log_dir:
        return None
    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    except OSError as exc:  # pragma: no cover
        logging.getLogger(__name__).debug("File logging setup failed: %s", exc)
        return None
    handler = logging.FileHandler(Path(log_dir) / "botclf.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    return handler


def setup_logging(level: str | None = None, json_mode: bool | None = None, force: bool = False) -> None:
    global _INITIALIZED, _JSON_MODE
    if _INITIALIZED and not force:
        return
    _JSON_MODE = _env_flag("LOG_JSON") if json_mode is None else json_mode
    lvl_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, logging.INFO)
    handlers: list[logging.Handler] = []
    if _JSON_MODE:
        handlers.append(_JsonHandler())
    else:
        handlers.append(RichHandler(rich_tracebacks=True, show_path=False, markup=False))
    file_handler = _file_handler()
    if file_handler is not None:
        handlers.append(file_handler)
    logging.basicConfig(level=lvl, handlers=handlers, force=True,
                        format="%(message)s", datefmt="%H:%M:%S")
    _INITIALIZED = True


def enable_json_logging() -> None:
    """Switch to JSON logging (re-initializes handlers)."""
    setup_logging(json_mode=True, force=True)


def get_console() -> Console:
    """Return the shared rich Console.

    Services should *not* import rich directly; use this accessor to keep
    presentation centralized.
    """
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console()
    return _CONSOLE


def render_panel(title: str, body: str, *, style: str = "cyan") -> None:
    if _JSON_MODE:
        logging.getLogger("botclf.console").info("%s | %s", title, body)
        return
    get_console().print(Panel.fit(body, title=title, border_style=style))


def log_run_start(*, encoder_model: str, dataset: str, records: int) -> None:
    """Standard training start banner."""
    body = (
        f"[bold cyan]Encoder:[/bold cyan] {encoder_model}\n"
        f"[bold cyan]Dataset:[/bold cyan] {dataset} [dim]({records} records)[/dim]"
    )
    render_panel("train", body, style="cyan")


__all__ = [
    "enable_json_logging",
    "get_console",
    "log_run_start",
    "render_panel",
    "setup_logging",
]
