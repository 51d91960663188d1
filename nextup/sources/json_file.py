"""
Task File Source

Loads task records from a JSON or YAML file, either a list of task objects
or a mapping with a "tasks" list.
"""

import json
import logging
from pathlib import Path
from typing import List

import yaml

from ..exceptions import SourceFetchError
from ..models import Task, Tracker
from .base import TaskSource

logger = logging.getLogger(__name__)


class JsonFileSource(TaskSource):
    tracker = Tracker.MANUAL

    def __init__(
        self,
        path: str,
        primary: bool = False,
        default_tracker: Tracker = Tracker.MANUAL,
    ):
        super().__init__(name=f"file:{path}", primary=primary)
        self.path = Path(path)
        self.default_tracker = default_tracker

    async def fetch(self) -> List[Task]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self.path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except FileNotFoundError:
            raise SourceFetchError(self.name, "task file not found")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SourceFetchError(self.name, f"invalid task file: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFetchError(self.name, f"could not read task file: {e}")

        if isinstance(data, dict):
            data = data.get("tasks", [])
        if not isinstance(data, list):
            raise SourceFetchError(self.name, "expected a list of tasks")

        try:
            tasks = [Task.from_dict(item, self.default_tracker) for item in data]
        except (TypeError, ValueError) as e:
            raise SourceFetchError(self.name, f"invalid task record: {e}")

        logger.info(f"📥 Loaded {len(tasks)} tasks from {self.path}")
        return tasks
