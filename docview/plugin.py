"""Discovery and registration of document plugins by content type."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from docview.plugin_api import (
    PluginDefinition,
    PluginFunctions,
    PluginVersion,
    ZathuraError,
)

_LOG = logging.getLogger(__name__)

Loader = Callable[[Path], Optional[PluginDefinition]]


def _default_suffix() -> str:
    return ".dylib" if sys.platform == "darwin" else ".so"


def content_type_from_mime_type(mime_type: Optional[str]) -> Optional[str]:
    """Return the canonical content type for a MIME type, or None if malformed."""
    if mime_type is None:
        return None
    text = mime_type.strip().lower()
    if any(ch.isspace() for ch in text):
        return None
    major, sep, minor = text.partition("/")
    if not sep or not major or not minor or "/" in minor:
        return None
    return text


def content_types_equal(a: Optional[str], b: Optional[str]) -> bool:
    """Compare two content types, ignoring case."""
    if a is None or b is None:
        return False
    return a.lower() == b.lower()


@dataclass(eq=False)
class Plugin:
    """A registered plugin and the content types it handles."""

    definition: PluginDefinition
    path: Optional[Path] = None
    content_types: list[str] = field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        return self.definition.name

    @property
    def version(self) -> PluginVersion:
        return self.definition.version

    @property
    def functions(self) -> PluginFunctions:
        return self.definition.functions


class PluginManager:
    """Keeps plugin directories, loaded plugins and type-to-plugin mappings."""

    def __init__(
        self,
        loader: Optional[Loader] = None,
        suffix: Optional[str] = None,
    ) -> None:
        self._loader = loader
        self._suffix = suffix or _default_suffix()
        self._paths: list[Path] = []
        self._plugins: list[Plugin] = []
        self._mappings: list[tuple[str, Plugin]] = []
        self._content_types: list[str] = []

    def add_dir(self, directory: Union[str, os.PathLike]) -> None:
        """Add a directory to search for plugins."""
        self._paths.append(Path(directory))

    def load(self) -> None:
        """Load every plugin file found in the configured directories."""
        if self._loader is None:
            raise ZathuraError("no plugin loader configured")
        for directory in self._paths:
            try:
                names = sorted(os.listdir(directory))
            except OSError:
                _LOG.error("could not open plugin directory: %s", directory)
                continue
            for name in names:
                self._load_file(directory / name)

    def _load_file(self, path: Path) -> None:
        if not path.is_file():
            _LOG.debug("'%s' is not a regular file. Skipping.", path)
            return
        if not path.name.endswith(self._suffix):
            _LOG.debug("'%s' is not a plugin file. Skipping.", path)
            return
        try:
            definition = self._loader(path)
        except Exception as exc:  # a broken plugin must not stop the others
            _LOG.error("Could not load plugin '%s' (%s).", path, exc)
            return
        if definition is None:
            _LOG.error("Could not find a plugin definition in %s.", path)
            return
        try:
            plugin = self.register(definition, path)
        except ZathuraError as exc:
            _LOG.error("Could not register plugin '%s': %s", path, exc)
            return
        _LOG.debug("Successfully loaded plugin from '%s'.", path)
        _LOG.debug("plugin %s: version %s", plugin.name, plugin.version)

    def register(
        self,
        definition: PluginDefinition,
        path: Union[str, os.PathLike, None] = None,
    ) -> Plugin:
        """Register a plugin; raise if none of its types could be mapped."""
        definition.validate()
        plugin = Plugin(definition, Path(path) if path is not None else None)
        for mime_type in definition.mime_types:
            content_type = content_type_from_mime_type(mime_type)
            if content_type is None:
                _LOG.warning("plugin: unable to convert mime type: %s", mime_type)
            else:
                plugin.content_types.append(content_type)

        registered = False
        for content_type in plugin.content_types:
            if any(content_types_equal(content_type, known) for known, _ in self._mappings):
                _LOG.error("plugin: filetype already registered: %s", content_type)
                continue
            self._mappings.append((content_type, plugin))
            self._content_types.append(content_type)
            _LOG.debug("plugin: filetype mapping added: %s", content_type)
            registered = True

        if not registered:
            raise ZathuraError(f"could not register plugin {definition.name!r}")
        self._plugins.append(plugin)
        return plugin

    def get_plugin(self, content_type: Optional[str]) -> Optional[Plugin]:
        """Return the plugin mapped to a content type, or None."""
        if content_type is None:
            return None
        for known, plugin in self._mappings:
            if content_types_equal(content_type, known):
                return plugin
        return None

    def plugins(self) -> list[Plugin]:
        """Return the registered plugins in registration order."""
        return list(self._plugins)

    def content_types(self) -> list[str]:
        """Return every registered content type in registration order."""
        return list(self._content_types)