"""Live status line for a running generation."""

from __future__ import annotations

import os
import shutil
import sys
import threading
import time
from typing import Callable, TextIO

_BOLD = "\x1b[1m"
_GREY = "\x1b[38;2;150;157;165m"
_RESET = "\x1b[0m"

StatusSource = Callable[[], str]


def status_line(label: str, detail: str, elapsed_s: int, done: bool = False) -> str:
    text = f"{label}: {detail}" if detail and detail != label else label
    suffix = "done" if done else "working"
    return f"• {text} ({format_duration(elapsed_s)} • {suffix})"


class StatusTicker:
    """Shows elapsed time plus whatever ``status`` reports while a generation runs.

    ``status`` is read from the ticker thread. On a terminal the line is redrawn
    in place every ``interval_s``; on other streams a new line is written only
    when the reported status changes, so piped output stays readable.
    """

    def __init__(
        self,
        label: str,
        status: StatusSource | None = None,
        *,
        stream: TextIO | None = None,
        interval_s: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.label = label
        self.status = status or (lambda: "")
        self.stream = stream or sys.stdout
        self.interval_s = max(0.05, interval_s)
        self._clock = clock
        self._started_at: float | None = None
        self._in_place = bool(getattr(self.stream, "isatty", lambda: False)())
        self._last_detail: str | None = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._started_at = self._clock()
        self.refresh()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def refresh(self) -> None:
        detail = self.status() or ""
        if not self._in_place and detail == self._last_detail:
            return
        self._last_detail = detail
        line = f"{_BOLD}{status_line(self.label, detail, self.elapsed())}{_RESET}"
        with self._lock:
            if self._in_place:
                self.stream.write(f"\r{line}\033[K")
            else:
                self.stream.write(f"{line}\n")
            self.stream.flush()

    def stop(self) -> None:
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
        width = _resolve_terminal_width(self.stream, 100)
        closing = f"{_GREY}{_separator_line(f'Finished in {format_duration(self.elapsed())}', width)}{_RESET}"
        with self._lock:
            if self._in_place:
                self.stream.write(f"\r{closing}\033[K\n")
            else:
                self.stream.write(f"{closing}\n")
            self.stream.flush()

    def elapsed(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int(self._clock() - self._started_at))

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            self.refresh()


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def _separator_line(label: str, width: int) -> str:
    content = f" {label} "
    if width <= len(content) + 2:
        return content.strip()
    remaining = width - len(content)
    left = remaining // 2
    return f"{'─' * left}{content}{'─' * (remaining - left)}"


def _resolve_terminal_width(stream: TextIO | None, fallback: int) -> int:
    if stream and hasattr(stream, "fileno"):
        try:
            return os.get_terminal_size(stream.fileno()).columns
        except (OSError, ValueError):
            pass
    return shutil.get_terminal_size(fallback=(fallback, 20)).columns
