from __future__ import annotations

from portent.workers.dispatcher import UpdateDispatcher

__all__ = [
    "UpdateDispatcher",
]
