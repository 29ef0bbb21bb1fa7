"""Ambient services shared by every layer — currently the JSON logger.

This package must NEVER import from ``botapi/`` or ``dispatch/``.
"""

from core.logger import BotLogger

__all__ = [
    "BotLogger",
]
