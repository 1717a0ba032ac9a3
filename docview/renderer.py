"""Background rendering of pages with a page cache and optional recolouring."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from docview.page import Page
from docview.page_cache import PageCache
from docview.plugin_api import InvalidArgumentsError, Rectangle, ZathuraError
from docview.recolor import RGBA, ImageSurface, RecolorSettings, recolor

_LOG = logging.getLogger(__name__)

SizeCalculator = Callable[[Page], "tuple[int, int, float]"]

_SIGNALS = ("completed", "cache-added", "cache-invalidated")


def _now() -> int:
    """Wall-clock time in microseconds."""
    return time.time_ns() // 1000


@dataclass
class _RenderTarget:
    """What a plugin draws on: a white surface and the scale to apply."""

    surface: ImageSurface
    scale: float = 1.0


@dataclass(eq=False)
class _Job:
    request: "RenderRequest"
    aborted: bool = False


class Renderer:
    """Renders pages on a worker thread, least recently viewed first."""

    def __init__(self, cache_size: int) -> None:
        self._cache = PageCache(cache_size)
        self._settings = RecolorSettings()
        self.recolor_enabled = False
        self._render_lock = threading.Lock()
        self._state = threading.Condition()
        self._queue: list[_Job] = []
        self._busy = False
        self._about_to_close = False
        self._closed = False
        self._requests: list[RenderRequest] = []
        self._thread = threading.Thread(
            target=self._run, name="docview-renderer", daemon=True
        )
        self._thread.start()

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # recolouring settings

    @property
    def recolor_hue(self) -> bool:
        """Whether hue is kept while recolouring."""
        return self._settings.hue

    @recolor_hue.setter
    def recolor_hue(self, enable: bool) -> None:
        self._settings.hue = bool(enable)

    @property
    def recolor_reverse_video(self) -> bool:
        """Whether images keep their colours while recolouring."""
        return self._settings.reverse_video

    @recolor_reverse_video.setter
    def recolor_reverse_video(self, enable: bool) -> None:
        self._settings.reverse_video = bool(enable)

    def set_recolor_colors(
        self, light: Optional[RGBA] = None, dark: Optional[RGBA] = None
    ) -> None:
        """Set the light and/or dark recolouring colour."""
        if light is not None:
            self._settings.light = light
        if dark is not None:
            self._settings.dark = dark

    def set_recolor_colors_str(
        self, light: Optional[str] = None, dark: Optional[str] = None
    ) -> None:
        """Set recolouring colours from text; unparsable colours are ignored."""
        if dark is not None:
            try:
                self.set_recolor_colors(dark=RGBA.parse(dark))
            except ValueError:
                _LOG.warning("invalid dark colour: %s", dark)
        if light is not None:
            try:
                self.set_recolor_colors(light=RGBA.parse(light))
            except ValueError:
                _LOG.warning("invalid light colour: %s", light)

    def recolor_colors(self) -> tuple[RGBA, RGBA]:
        """Return the (light, dark) recolouring colours."""
        return self._settings.light, self._settings.dark

    # life cycle

    def stop(self) -> None:
        """Stop delivering rendered pages; queued jobs are dropped."""
        self._about_to_close = True

    @property
    def stopped(self) -> bool:
        return self._about_to_close

    def close(self) -> None:
        """Stop rendering, drop queued jobs and end the worker thread."""
        self.stop()
        with self._state:
            self._closed = True
            dropped = self._queue
            self._queue = []
            self._state.notify_all()
        for job in dropped:
            job.request._remove_job(job)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join()

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        """Hold the render lock, e.g. to render a page outside the worker."""
        with self._render_lock:
            yield

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until no job is queued or running; return False on timeout."""
        with self._state:
            return self._state.wait_for(
                lambda: not self._queue and not self._busy, timeout
            )

    # page cache

    def is_cached(self, page_index: int) -> bool:
        """Return True if the page is in the page cache."""
        return self._cache.is_cached(page_index)

    def page_cache_add(self, page_index: int) -> None:
        """Add a page to the cache, evicting the least recently viewed page."""
        if self._cache.is_cached(page_index):
            return
        with self._state:
            requests = list(self._requests)

        def find(index: int) -> Optional[RenderRequest]:
            return next((r for r in requests if r.page.index == index), None)

        target = find(page_index)
        if target is None:
            raise LookupError(f"no render request for page {page_index}")

        def view_time(index: int) -> Optional[int]:
            request = find(index)
            return None if request is None else request.last_view_time

        evicted = self._cache.add(page_index, view_time)
        if evicted is not None:
            evicted_request = find(evicted)
            if evicted_request is not None:
                evicted_request._emit("cache-invalidated")
        target._emit("cache-added")

    # request bookkeeping

    def _register(self, request: "RenderRequest") -> None:
        with self._state:
            if request not in self._requests:
                self._requests.append(request)

    def _unregister(self, request: "RenderRequest") -> None:
        with self._state:
            if request in self._requests:
                self._requests.remove(request)

    def _push(self, job: _Job) -> None:
        with self._state:
            if self._closed:
                raise ZathuraError("the renderer is closed")
            self._queue.append(job)
            self._state.notify_all()

    # worker

    @staticmethod
    def _job_key(job: _Job) -> tuple[bool, int]:
        return (job.aborted, job.request.last_view_time)

    def _run(self) -> None:
        while True:
            with self._state:
                while not self._queue and not self._closed:
                    self._state.wait()
                if self._closed:
                    return
                job = min(self._queue, key=self._job_key)
                self._queue.remove(job)
                self._busy = True
            try:
                self._process(job)
            finally:
                with self._state:
                    self._busy = False
                    self._state.notify_all()

    def _process(self, job: _Job) -> None:
        request = job.request
        if self._about_to_close or job.aborted:
            request._remove_job(job)
            return
        number = request.page.index + 1
        _LOG.debug("Rendering page %d ...", number)
        try:
            ok = self._render(job)
        except Exception:
            _LOG.exception("Rendering raised (page %d)", number)
            ok = False
        if not ok:
            _LOG.error("Rendering failed (page %d)", number)
            request._remove_job(job)

    def _render(self, job: _Job) -> bool:
        request = job.request
        page = request.page
        plain = request.render_plain or request.size_calculator is None
        if plain:
            width, height, scale = int(page.width), int(page.height), 1.0
        else:
            width, height, scale = request.size_calculator(page)
            width, height = int(width), int(height)
        if width < 0 or height < 0:
            return False

        surface = ImageSurface(width, height, data=bytearray(b"\xff" * (width * height * 4)))
        target = _RenderTarget(surface, float(scale))
        try:
            with self.lock():
                page.render(target, False)
        except ZathuraError as exc:
            _LOG.error("page %d could not be rendered: %s", page.index + 1, exc)
            return False

        if self._about_to_close or job.aborted:
            _LOG.debug("Rendering of page %d aborted", page.index + 1)
            request._remove_job(job)
            return True

        if not request.render_plain and self.recolor_enabled:
            settings = dataclasses.replace(self._settings)
            rectangles = (
                self._image_rectangles(page, target.scale)
                if settings.reverse_video
                else None
            )
            recolor(surface, settings, rectangles)

        try:
            if not self._about_to_close and not job.aborted:
                _LOG.debug("Emitting signal for page %d", page.index + 1)
                request._emit("completed", surface)
            else:
                _LOG.debug("Rendering of page %d aborted", page.index + 1)
        finally:
            request._remove_job(job)
        return True

    @staticmethod
    def _image_rectangles(page: Page, scale: float) -> Optional[list[Rectangle]]:
        try:
            images = page.images()
        except ZathuraError:
            _LOG.warning("Failed to retrieve images.")
            return None
        return [image.position.scaled(scale) for image in images]


class RenderRequest:
    """Asks a renderer to render one page and reports the result by signals.

    Signals: ``completed`` (with the rendered surface), ``cache-added`` and
    ``cache-invalidated``. Callbacks receive the request first.
    """

    def __init__(
        self,
        renderer: Renderer,
        page: Page,
        size_calculator: Optional[SizeCalculator] = None,
    ) -> None:
        if renderer is None or page is None:
            raise InvalidArgumentsError("a render request needs a renderer and a page")
        self.renderer = renderer
        self.page = page
        self.size_calculator = size_calculator
        self.last_view_time = 0
        self.render_plain = False
        self._jobs: list[_Job] = []
        self._jobs_lock = threading.Lock()
        self._handlers: dict[str, list[Callable[..., Any]]] = {s: [] for s in _SIGNALS}
        renderer._register(self)

    def __enter__(self) -> "RenderRequest":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def connect(self, signal: str, callback: Callable[..., Any]) -> None:
        """Call ``callback(request, *args)`` whenever ``signal`` is emitted."""
        if signal not in self._handlers:
            raise ValueError(f"unknown signal: {signal}")
        self._handlers[signal].append(callback)

    def _emit(self, signal: str, *args: Any) -> None:
        for callback in list(self._handlers[signal]):
            callback(self, *args)

    @property
    def active_jobs(self) -> int:
        """Number of jobs queued or running for this request."""
        with self._jobs_lock:
            return len(self._jobs)

    def request(self, last_view_time: Optional[int] = None) -> bool:
        """Queue a render job unless one is still pending; return True if queued."""
        with self._jobs_lock:
            if any(not job.aborted for job in self._jobs):
                return False
            self.last_view_time = _now() if last_view_time is None else last_view_time
            job = _Job(self)
            self._jobs.append(job)
        try:
            self.renderer._push(job)
        except ZathuraError:
            self._remove_job(job)
            raise
        return True

    def abort(self) -> None:
        """Abort every pending job of this request."""
        with self._jobs_lock:
            for job in self._jobs:
                job.aborted = True

    def update_view_time(self) -> None:
        """Record that the page was viewed now."""
        self.last_view_time = _now()

    def close(self) -> None:
        """Unregister the request from its renderer."""
        self.renderer._unregister(self)

    def _remove_job(self, job: _Job) -> None:
        with self._jobs_lock:
            if job in self._jobs:
                self._jobs.remove(job)