from __future__ import annotations

from typing import Callable, Optional


class RunLogger:
    """Tagged message sink for pipeline progress.

    - Messages are prefixed with a bracketed tag, e.g. "[ICO] ...".
    - If a callback is provided (a GUI log pane, a test list), deliver to it.
    - If no callback is available or it raises, fall back to print.
    """

    def __init__(self, append_cb: Optional[Callable[[str], None]] = None, quiet: bool = False) -> None:
        self._append_cb = append_cb
        self._quiet = quiet

    def log(self, message: str, tag: Optional[str] = None) -> None:
        if tag:
            message = f"[{tag}] {message}"
        if callable(self._append_cb):
            try:
                self._append_cb(message)
                return
            except Exception:
                # A broken sink must not break generation
                pass
        if not self._quiet:
            print(message)

    def child(self, tag: str) -> "TaggedLogger":
        return TaggedLogger(self, tag)


class TaggedLogger:
    """Logger bound to one tag; handed to each pipeline stage."""

    def __init__(self, parent: RunLogger, tag: str) -> None:
        self._parent = parent
        self._tag = tag

    def log(self, message: str) -> None:
        self._parent.log(message, tag=self._tag)
