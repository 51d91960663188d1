"""
Planning Document Source

Reads open checklist items from a markdown planning document:

    ## Authentication
    - [ ] Add SSO login #priority/high #effort/medium (#42)
    - [x] Password reset (done items are skipped)

Inline `#tags` become labels, a parenthesised `(#42)` or `(ENG-7)` becomes a
cross-reference, and the nearest heading becomes a `section/<slug>` label.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from ..exceptions import SourceFetchError
from ..models import Task, Tracker
from .base import TaskSource

logger = logging.getLogger(__name__)

HEADING = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
CHECKLIST_ITEM = re.compile(r"^\s*[-*+]\s+\[([ xX])\]\s+(.+?)\s*$")
TAG = re.compile(r"(?<![\w&(])#([A-Za-z][\w/.-]*)")
REFERENCE = re.compile(r"\(\s*(#\d+|[A-Z][A-Z0-9]*-\d+)\s*\)")


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def parse_item(text: str) -> Tuple[str, List[str], Optional[str]]:
    """Split a checklist item into (title, labels, secondary_ref)"""
    labels = TAG.findall(text)

    secondary_ref = None
    ref = REFERENCE.search(text)
    if ref:
        value = ref.group(1)
        if value.startswith("#"):
            secondary_ref = f"{Tracker.GITHUB.value}:{value[1:]}"
        else:
            secondary_ref = f"{Tracker.LINEAR.value}:{value}"

    title = REFERENCE.sub("", TAG.sub("", text))
    title = re.sub(r"\s+", " ", title).strip(" -")
    return title, labels, secondary_ref


class PlanningDocSource(TaskSource):
    """Unchecked items of a markdown checklist"""

    tracker = Tracker.PLANNING_DOC

    def __init__(self, path: str, primary: bool = False):
        super().__init__(name=f"planning:{path}", primary=primary)
        self.path = Path(path)

    async def fetch(self) -> List[Task]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise SourceFetchError(self.name, "planning document not found")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFetchError(self.name, f"could not read planning document: {e}")

        tasks = self.parse(content)
        logger.info(f"📥 Found {len(tasks)} open items in {self.path}")
        return tasks

    def parse(self, content: str) -> List[Task]:
        tasks = []
        section = None

        for line_no, line in enumerate(content.splitlines(), start=1):
            heading = HEADING.match(line)
            if heading:
                section = slugify(heading.group(1))
                continue

            item = CHECKLIST_ITEM.match(line)
            if not item or item.group(1).lower() == "x":
                continue

            title, labels, secondary_ref = parse_item(item.group(2))
            if not title:
                continue
            if section:
                labels.append(f"section/{section}")

            tasks.append(
                Task(
                    id=str(line_no),
                    title=title,
                    source=Tracker.PLANNING_DOC,
                    labels=set(labels),
                    secondary_ref=secondary_ref,
                    state="open",
                )
            )

        return tasks
