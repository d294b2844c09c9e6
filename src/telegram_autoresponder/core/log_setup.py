"""Logging setup: rich console output plus an optional plain log file."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "info",
    log_file: Optional[Path] = None,
    console: Optional[Console] = None
) -> None:
    """
    Configure the root logger.

    Args:
        level: One of debug/info/warning/error
        log_file: Also append records to this file (parent dirs are created)
        console: Console for the rich handler, a stderr console when None
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(level.upper())
    root.addHandler(RichHandler(
        console=console or Console(stderr=True),
        show_path=level == "debug",
        rich_tracebacks=True,
    ))

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)

    # Telethon is chatty at info level (connection and update-state notices)
    if level != "debug":
        logging.getLogger("telethon").setLevel(logging.WARNING)
