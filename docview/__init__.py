"""Document viewer core: plugin registry, pages, recoloring, page cache and renderer."""

__version__ = "0.1.0"
__all__ = ["page", "page_cache", "plugin", "plugin_api", "recolor", "renderer"]