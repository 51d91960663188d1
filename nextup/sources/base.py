"""
Task Source Interface
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..models import Task, Tracker

logger = logging.getLogger(__name__)


class TaskSource(ABC):
    """
    A tracker that tasks can be fetched from.

    Implementations raise SourceFetchError when the tracker cannot be read.
    The aggregator decides whether that aborts the run (primary source) or
    is reported and skipped (optional source).
    """

    tracker: Tracker = Tracker.MANUAL

    def __init__(self, name: str, primary: bool = False):
        self.name = name
        self.primary = primary

    @abstractmethod
    async def fetch(self) -> List[Task]:
        """Fetch the current open tasks from this source"""

    def __repr__(self) -> str:
        role = "primary" if self.primary else "optional"
        return f"<{self.__class__.__name__} {self.name} ({role})>"
