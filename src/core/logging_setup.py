"""Shared logging helpers.

The stdio MCP transport owns stdout, so log output always goes to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, *, fmt: Optional[str] = None) -> None:
    """Ensure the root logger is configured once."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=fmt or _DEFAULT_FORMAT, stream=sys.stderr)
    _CONFIGURED = True
