from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (TTY only).

The percentage is tracked whether or not a bar is shown and is passed to an
optional callback after every row, so callers without a terminal (tests, a
web front end) still see progress.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
    "percent_complete",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


def percent_complete(processed: int, total: int) -> int:
    """Percentage of rows processed, halves rounded up; 0 for an empty batch.

    >>> [percent_complete(i, 8) for i in (1, 4, 5)]
    [13, 50, 63]
    """
    if total <= 0:
        return 0
    return (200 * processed + total) // (2 * total)


class ProgressTracker:
    """Progress tracker for the rows of one import batch.

    In non-TTY environments (CI, cron) the bar is disabled to avoid ANSI
    control sequence spam; percent and the callback still work.
    """

    def __init__(
        self,
        total_rows: int,
        *,
        description: str = "Importing rows",
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        self.total_rows = total_rows
        self.description = description
        self.processed = 0
        self.percent = 0
        self.on_progress = on_progress

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self) -> int:
        """Mark one more row processed (either outcome) and return the new percentage."""
        self.processed += 1
        self.percent = percent_complete(self.processed, self.total_rows)
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
        if self.on_progress is not None:
            try:
                self.on_progress(self.percent)
            except Exception as e:
                # Callback errors never abort the batch
                logger.warning("progress callback failed at %d%%: %s", self.percent, e)
        return self.percent

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
