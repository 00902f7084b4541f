#!/usr/bin/env python3
# ascii_image/logging_conf.py
"""
Central logging setup for the ASCII image renderer.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler
from ascii_image.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config, console: bool = True) -> None:
    """
    Configure the root logger from cfg["logging"].

    The interactive viewer owns the terminal, so it passes console=False and
    relies on the file handler alone.
    """
    level_name = cfg["logging"].get("level", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if console:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    log_file = cfg["logging"].get("file")
    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(cfg["logging"].get("rotate_bytes", 5 * 1024 * 1024)),
            backupCount=int(cfg["logging"].get("rotate_keep", 3)),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    elif not console:
        root.addHandler(logging.NullHandler())

    if cfg["logging"].get("http_debug"):
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
        logging.getLogger("requests").setLevel(logging.DEBUG)
