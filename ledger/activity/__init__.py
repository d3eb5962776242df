"""Activity logging package."""

from ledger.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
