"""A single page of an open document, backed by the document's plugin."""

from __future__ import annotations

from typing import Any, Callable, Optional

from docview.plugin_api import (
    Image,
    InvalidArgumentsError,
    PluginFunctions,
    Rectangle,
)


class Page:
    """A page of a document.

    The document must expose a ``plugin`` attribute whose ``functions`` hold
    the plugin's page operations.  Plugin functions report failures by
    raising; the page passes those exceptions on unchanged.
    """

    def __init__(self, document: Any, index: int) -> None:
        if document is None:
            raise InvalidArgumentsError("a page needs a document")
        self.document = document
        self.index = index
        self.width = 0.0
        self.height = 0.0
        self.visible = False
        self.data: Any = None
        self._closed = False

        page_init = self._function("page_init")
        try:
            page_init(self)
        except BaseException:
            self._discard()
            raise

    def __repr__(self) -> str:
        return (
            f"Page(index={self.index}, width={self.width}, "
            f"height={self.height}, visible={self.visible})"
        )

    def __enter__(self) -> "Page":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _functions(self) -> PluginFunctions:
        plugin = getattr(self.document, "plugin", None)
        if plugin is None:
            raise InvalidArgumentsError("the document has no plugin")
        return plugin.functions

    def _function(self, name: str) -> Callable[..., Any]:
        return self._functions.require(name)

    def _discard(self) -> None:
        """Release plugin data after a failed initialisation, ignoring errors."""
        clear = self._functions.page_clear
        if clear is not None:
            try:
                clear(self, self.data)
            except Exception:
                pass
        self._closed = True

    def close(self) -> None:
        """Let the plugin release the page's data."""
        if self._closed:
            return
        page_clear = self._function("page_clear")
        try:
            page_clear(self, self.data)
        finally:
            self._closed = True

    def search_text(self, text: Optional[str]) -> list[Rectangle]:
        """Return the rectangles where ``text`` occurs on the page."""
        if text is None:
            raise InvalidArgumentsError("no search text given")
        search = self._function("page_search_text")
        return list(search(self, self.data, text) or [])

    def links(self) -> list[Any]:
        """Return the links on the page."""
        links_get = self._function("page_links_get")
        return list(links_get(self, self.data) or [])

    def form_fields(self) -> list[Any]:
        """Return the form fields on the page."""
        fields_get = self._function("page_form_fields_get")
        return list(fields_get(self, self.data) or [])

    def images(self) -> list[Image]:
        """Return the images embedded in the page."""
        images_get = self._function("page_images_get")
        return list(images_get(self, self.data) or [])

    def image_surface(self, image: Optional[Image]) -> Any:
        """Return the rendered surface of one of the page's images."""
        if image is None:
            raise InvalidArgumentsError("no image given")
        get_surface = self._function("page_image_get_cairo")
        return get_surface(self, self.data, image)

    def text(self, rectangle: Rectangle) -> Optional[str]:
        """Return the text inside ``rectangle``."""
        get_text = self._function("page_get_text")
        return get_text(self, self.data, rectangle)

    def render(self, target: Any, printing: bool = False) -> None:
        """Render the page onto a drawing target."""
        if target is None:
            raise InvalidArgumentsError("no render target given")
        render = self._function("page_render_cairo")
        render(self, self.data, target, printing)

    def label(self) -> Optional[str]:
        """Return the page label, or None if the page has none."""
        get_label = self._function("page_get_label")
        return get_label(self, self.data)