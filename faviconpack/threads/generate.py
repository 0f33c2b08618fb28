from __future__ import annotations

import threading
from typing import Callable, Optional, Sequence

from faviconpack.bundle import AssetBundle, build_bundle
from faviconpack.catalog import SizeSpec
from faviconpack.errors import FaviconError
from faviconpack.utils import image as image_utils
from faviconpack.utils.logging import RunLogger


class GenerateThread(threading.Thread):
    """Build one AssetBundle off the caller's thread.

    - `on_done(token, bundle)` is called on success.
    - `on_error(token, exc)` is called when the run fails as a whole
      (bad source, precondition, archive). Per-size failures are in the bundle.
    """

    def __init__(
        self,
        token: int,
        source: image_utils.SourceLike,
        specs: Optional[Sequence[SizeSpec]],
        on_done: Callable[[int, AssetBundle], None],
        on_error: Optional[Callable[[int, Exception], None]] = None,
        logger: Optional[RunLogger] = None,
        **bundle_kwargs,
    ) -> None:
        super().__init__(daemon=True)
        self.token = token
        self._source = source
        self._specs = specs
        self._on_done = on_done
        self._on_error = on_error
        self._log = logger or RunLogger()
        self._kwargs = bundle_kwargs

    def run(self) -> None:
        self._log.log(f"run #{self.token} started", tag="Worker")
        try:
            bundle = build_bundle(self._source, self._specs, logger=self._log, **self._kwargs)
        except FaviconError as e:
            self._log.log(f"run #{self.token} failed: {e}", tag="Worker")
            if self._on_error is not None:
                self._on_error(self.token, e)
            return
        self._on_done(self.token, bundle)


class BundleRunner:
    """Starts GenerateThreads and keeps only the newest run's bundle.

    A new start() supersedes any run still in flight; its result is dropped
    when it arrives. Mid-resize cancellation is not supported.
    """

    def __init__(self, logger: Optional[RunLogger] = None) -> None:
        self._log = logger or RunLogger()
        self._lock = threading.Lock()
        self._token = 0
        self._thread: Optional[GenerateThread] = None
        self._done = threading.Event()
        self.bundle: Optional[AssetBundle] = None
        self.error: Optional[Exception] = None

    def start(self, source: image_utils.SourceLike, specs: Optional[Sequence[SizeSpec]] = None, **bundle_kwargs) -> int:
        with self._lock:
            self._token += 1
            token = self._token
            self.bundle = None
            self.error = None
            self._done.clear()
            th = GenerateThread(
                token, source, specs, self._deliver, self._deliver_error, logger=self._log, **bundle_kwargs
            )
            self._thread = th
        th.start()
        return token

    def wait(self, timeout: Optional[float] = None) -> Optional[AssetBundle]:
        """Block until the newest run finishes; returns its bundle (None on error/timeout)."""
        self._done.wait(timeout)
        return self.bundle

    @property
    def current_token(self) -> int:
        return self._token

    def _deliver(self, token: int, bundle: AssetBundle) -> None:
        with self._lock:
            if token != self._token:
                self._log.log(f"run #{token} superseded; result dropped", tag="Worker")
                return
            self.bundle = bundle
            self._done.set()

    def _deliver_error(self, token: int, exc: Exception) -> None:
        with self._lock:
            if token != self._token:
                return
            self.error = exc
            self._done.set()
