"""
Purpose:
- One place to configure process-wide logging for the gateway.
- Modules just do logging.getLogger(__name__); this wires handlers + format once.
"""

from __future__ import annotations
import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_configured = False

def setup_logging(level: str | int = "INFO") -> None:
    global _configured
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not _configured:
        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])
        _configured = True
    # re-calls (tests build several apps) only adjust the level
    logging.getLogger("metlens").setLevel(level)
