from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Settings

LOGGER_NAME = "tempfox"


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    no_color: bool = False

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LogConfig":
        return cls(level=settings.log_level, no_color=settings.no_color)


def setup_logging(cfg: LogConfig) -> logging.Handler:
    """Route tempfox records to stderr at ``cfg.level``.

    Other libraries stay at WARNING so a DEBUG run only shows the merge and
    launch steps.
    """
    level = getattr(logging, cfg.level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    for h in list(root.handlers):
        root.removeHandler(h)
    logging.getLogger(LOGGER_NAME).setLevel(level)

    force_no_color = cfg.no_color or os.getenv("NO_COLOR") is not None
    if not force_no_color and sys.stderr.isatty():
        # Bookmark titles and URLs may contain [brackets]; never read them as markup.
        handler: logging.Handler = RichHandler(
            rich_tracebacks=True, show_time=False, show_level=True, show_path=False, markup=False
        )
        fmt = "%(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
