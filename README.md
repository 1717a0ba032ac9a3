# docview

docview is the core of a document viewer, written in pure Python with no
third-party dependencies. It does not parse any document format. That work is
left to plugins, which are plain Python callables collected in a table.
docview provides the parts that sit around the plugins.

## Modules

- **`docview.plugin_api`**: the shared types.
  - `PluginDefinition` declares a plugin's name, its `PluginVersion`, the MIME
    types it handles and a `PluginFunctions` table of callables.
    `PluginDefinition.validate()` raises `InvalidArgumentsError` when the name
    or the MIME types are missing.
  - `PluginFunctions.require(name)` returns a function from the table. It
    raises `PluginNotImplementedError` if the plugin left that function out,
    and `ValueError` if no such function exists.
  - `Rectangle` has `contains(x, y)` (edges included), `scaled(factor)`,
    `width` and `height`. An `Image` is a `position` rectangle plus
    arbitrary `data`.
  - All errors derive from `ZathuraError`.
- **`docview.plugin`**: the plugin registry.
  - `PluginManager(loader, suffix)` collects directories with `add_dir`.
    `load()` visits each regular file in them whose name ends in `suffix`
    (`.so` by default, `.dylib` on macOS) and passes its path to `loader`.
    The loader is a callable you supply. It returns a `PluginDefinition`, or
    `None` when the file is not a plugin. `load()` raises `ZathuraError` if no
    loader was given. A file that fails to load is logged and skipped.
  - `register(definition, path)` adds a plugin directly. Each content type
    maps to the first plugin that claims it. Registration raises
    `ZathuraError` if none of the plugin's types could be mapped.
  - `get_plugin(content_type)`, `plugins()` and `content_types()` query the
    registry.
  - `content_type_from_mime_type` lower-cases a `major/minor` MIME type, or
    returns `None` when it is malformed. `content_types_equal` compares two
    types without regard to case.
- **`docview.page`**: the `Page` class.
  - A `Page(document, index)` calls the plugin's `page_init` on creation. The
    document must have a `plugin` attribute whose `functions` hold the
    plugin's operations.
  - It passes `search_text`, `links`, `form_fields`, `images`,
    `image_surface`, `text`, `render`, `label` and `close` on to the plugin.
    A missing plugin function raises `PluginNotImplementedError`.
  - A page also works as a context manager that closes it.
- **`docview.recolor`**: recoloring of rendered pages.
  - `recolor(surface, settings, image_rectangles)` recolors an `ImageSurface`
    (BGRA bytes) in place. It maps each pixel between the `light` and `dark`
    `RGBA` colours of a `RecolorSettings`. When `hue` is set it keeps the
    pixel's hue. When `reverse_video` is set, pixels inside the given image
    rectangles keep their colour and are only made opaque.
  - `RGBA.parse` accepts `#rgb`, `#rrggbb`, `#rrrgggbbb`, `#rrrrggggbbbb`,
    `rgb(...)` and `rgba(...)`.
- **`docview.page_cache`**: `PageCache(size)`, a fixed number of slots holding
  page indices.
  - `add(page_index, view_time)` evicts the least recently viewed page when
    the cache is full and returns the index of the evicted page.
    `view_time` maps a page index to its last view time.
  - `invalidate_lru`, `invalidate_all`, `is_cached`, `is_full` and `len()`
    complete the interface.
- **`docview.renderer`**: background rendering.
  - `Renderer(cache_size)` runs render jobs on one background thread. Pending
    jobs run before aborted ones, and among them the page with the oldest view
    time goes first.
  - The plugin's `page_render_cairo` receives a target with a white
    `surface` (`ImageSurface`) and the `scale` to draw at. When the
    `recolor_enabled` attribute is true, the surface is recolored afterwards.
    Recoloring is controlled by `recolor_hue`, `recolor_reverse_video`,
    `set_recolor_colors` and `set_recolor_colors_str`. By default the light
    colour is black and the dark colour is white.
  - `lock()` is a context manager that holds the render lock. `join(timeout)`
    waits until the queue is idle. `stop()` and `close()` end rendering.
  - `page_cache_add(page_index)` caches a page and emits the matching signals.
  - A `RenderRequest(renderer, page, size_calculator)` belongs to one page.
    `size_calculator(page)` returns `(width, height, scale)`. Without it, or
    when `render_plain` is set, the page renders at its own size.
    `request(last_view_time)` queues a job unless one is still pending.
  - A request emits `completed` (with the surface), `cache-added` and
    `cache-invalidated`. Callbacks registered with `connect` receive the
    request first.

## What docview does not do

docview has no window, page widget, printing or command-line program. It does
not load compiled plugin files by itself; `PluginManager.load` relies on the
loader you pass in. It has no document class either: a `Page` needs an object
you supply that carries the plugin.

## Install

```
pip install .
pip install ".[test]"   # with test dependencies
```

## Example

```python
from docview.plugin_api import PluginDefinition, PluginFunctions, PluginVersion
from docview.plugin import PluginManager

definition = PluginDefinition(
    name="text",
    version=PluginVersion(1, 0, 0),
    functions=PluginFunctions(page_init=lambda page: None),
    mime_types=("text/plain",),
)

manager = PluginManager()
manager.register(definition)
assert manager.get_plugin("text/plain") is not None
print(manager.content_types())
```

Recoloring a surface:

```python
from docview.recolor import RGBA, ImageSurface, RecolorSettings, recolor

surface = ImageSurface(2, 1)
surface.set_pixel(0, 0, (255, 255, 255, 255))
settings = RecolorSettings(light=RGBA.parse("#FFFFFF"), dark=RGBA.parse("#000000"))
recolor(surface, settings)
print(surface.pixel(0, 0))
```

## Tests

```
pytest
```