"""Telegram inline bot that answers with generated portents."""
from __future__ import annotations

__version__ = "1.0.0"
