# src/mbot/tasks/task_parser.py

from __future__ import annotations

"""
Checklist parser.

Turns a markdown-ish checklist into Task objects. One task per line:

    - [ ] 2024-05-01 14:30 : Renew badge
    - [x] 2024-05-02 : Water plants

Anything else (headings, prose, unrelated list items, impossible dates or times)
is skipped without error.
"""

import logging
import re
from datetime import date, time

from .task_models import Task

logger = logging.getLogger(__name__)

TASK_LINE_RE = re.compile(
    r"^- \[(?P<status>[ xX])\]\s*"
    r"(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:\s+(?P<time>\d{2}:\d{2}))?"
    r"\s*:\s*(?P<description>.*\S)\s*$",
    re.ASCII,
)


def parse_task_line(line: str) -> Task | None:
    """Parse a single line; None if it is not a valid task line."""
    m = TASK_LINE_RE.match(line)
    if m is None:
        return None

    try:
        day = date.fromisoformat(m.group("date"))
    except ValueError:
        return None

    raw_time = m.group("time")
    clock: time | None = None
    if raw_time is not None:
        try:
            clock = time.fromisoformat(raw_time)
        except ValueError:
            return None

    # The pattern only knows ASCII whitespace; strip() also removes NBSP, U+3000...
    description = m.group("description").strip()
    if not description:
        return None

    return Task(
        completed=m.group("status").lower() == "x",
        date=day,
        time=clock,
        description=description,
    )


def parse_tasks(content: str) -> list[Task]:
    """Parse a whole document. Order follows the document."""
    tasks: list[Task] = []
    skipped = 0

    for line in content.splitlines():
        task = parse_task_line(line)
        if task is None:
            if line.startswith("- ["):
                skipped += 1
            continue
        tasks.append(task)

    if skipped:
        logger.debug("Skipped %d checklist-like lines that are not valid tasks", skipped)
    return tasks
