"""Types shared between the viewer core and document plugins."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional


class ZathuraError(Exception):
    """Base class for errors reported by the document core or a plugin."""


class InvalidArgumentsError(ZathuraError, ValueError):
    """Raised when an operation receives arguments it cannot work with."""


class PluginNotImplementedError(ZathuraError, NotImplementedError):
    """Raised when a plugin does not provide a requested function."""


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle given by two corner points."""

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    def contains(self, x: float, y: float) -> bool:
        """Return True if the point lies inside the rectangle, edges included."""
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

    def scaled(self, factor: float) -> "Rectangle":
        """Return a copy with every coordinate multiplied by ``factor``."""
        return Rectangle(
            self.x1 * factor,
            self.y1 * factor,
            self.x2 * factor,
            self.y2 * factor,
        )

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1


@dataclass(eq=False)
class Image:
    """An image embedded in a page; identity distinguishes images."""

    position: Rectangle
    data: Any = None


_Function = Optional[Callable[..., Any]]


@dataclass(frozen=True)
class PluginFunctions:
    """The set of document and page operations a plugin may provide."""

    document_open: _Function = None
    document_free: _Function = None
    document_index_generate: _Function = None
    document_save_as: _Function = None
    document_attachments_get: _Function = None
    document_attachment_save: _Function = None
    document_get_information: _Function = None
    page_init: _Function = None
    page_clear: _Function = None
    page_search_text: _Function = None
    page_links_get: _Function = None
    page_form_fields_get: _Function = None
    page_images_get: _Function = None
    page_image_get_cairo: _Function = None
    page_get_text: _Function = None
    page_render: _Function = None
    page_render_cairo: _Function = None
    page_get_label: _Function = None

    def require(self, name: str) -> Callable[..., Any]:
        """Return the named function, raising if the plugin lacks it."""
        if name not in {f.name for f in fields(self)}:
            raise ValueError(f"unknown plugin function: {name}")
        function = getattr(self, name)
        if function is None:
            raise PluginNotImplementedError(f"plugin does not implement {name}")
        return function


@dataclass(frozen=True, order=True)
class PluginVersion:
    """A plugin's version number."""

    major: int = 0
    minor: int = 0
    rev: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.rev}"


@dataclass(frozen=True)
class PluginDefinition:
    """Everything a plugin declares about itself."""

    name: Optional[str]
    version: PluginVersion = field(default_factory=PluginVersion)
    functions: PluginFunctions = field(default_factory=PluginFunctions)
    mime_types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "mime_types", tuple(self.mime_types or ()))

    def validate(self) -> "PluginDefinition":
        """Check that the definition is usable; return it unchanged."""
        if not self.name:
            raise InvalidArgumentsError("plugin has no name")
        if not self.mime_types:
            raise InvalidArgumentsError("plugin does not handle any mime types")
        return self