from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Insert progress display with tqdm (TTY only).

In non-TTY environments (CI, redirected output) no bar is created so the log
stream stays free of control sequences.
"""

__all__ = [
    "InsertProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class InsertProgress:
    """Row-level progress bar for one import's INSERT pages."""

    def __init__(self, total_rows: int, *, description: str = "Inserting rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.done = 0
        self.enabled = is_tty_enabled()
        self.pbar: tqdm[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def advance(self, rows: int) -> None:
        self.done += rows
        if self.pbar is not None:
            self.pbar.update(rows)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> InsertProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
