import pytest

from docview.plugin_api import (
    Image,
    InvalidArgumentsError,
    PluginDefinition,
    PluginFunctions,
    PluginNotImplementedError,
    PluginVersion,
    Rectangle,
    ZathuraError,
)


def test_rectangle_contains_includes_edges():
    rect = Rectangle(0, 0, 10, 5)
    assert rect.contains(0, 0) is True
    assert rect.contains(10, 5) is True
    assert rect.contains(4, 3) is True


def test_rectangle_contains_rejects_outside_points():
    rect = Rectangle(0, 0, 10, 5)
    assert rect.contains(10.5, 0) is False
    assert rect.contains(0, -1) is False


def test_rectangle_scaled_round_trip():
    rect = Rectangle(1.5, 2.0, 7.0, 9.5)
    assert rect.scaled(2).scaled(0.5) == rect
    assert rect.scaled(1) == rect


def test_rectangle_scaled_keeps_proportions():
    rect = Rectangle(1, 2, 5, 10)
    scaled = rect.scaled(3)
    assert scaled.width == pytest.approx(rect.width * 3)
    assert scaled.height == pytest.approx(rect.height * 3)


def test_image_keeps_position():
    position = Rectangle(1, 2, 3, 4)
    image = Image(position, data="payload")
    assert image.position == position
    assert image.data == "payload"


def test_require_returns_function():
    def init(page):
        return page

    functions = PluginFunctions(page_init=init)
    assert functions.require("page_init") is init


def test_require_missing_function_raises():
    functions = PluginFunctions()
    with pytest.raises(PluginNotImplementedError):
        functions.require("page_get_label")


def test_not_implemented_error_hierarchy():
    with pytest.raises(NotImplementedError):
        PluginFunctions().require("page_render_cairo")
    with pytest.raises(ZathuraError):
        PluginFunctions().require("page_render_cairo")


def test_require_unknown_name_raises_value_error():
    with pytest.raises(ValueError):
        PluginFunctions().require("no_such_function")


def test_version_string_and_default():
    assert str(PluginVersion(1, 2, 3)) == "1.2.3"
    assert PluginVersion() == PluginVersion(0, 0, 0)


def test_version_ordering():
    assert PluginVersion(1, 2, 3) < PluginVersion(1, 3, 0)


def test_definition_validate_returns_self():
    definition = PluginDefinition("pdf", mime_types=["application/pdf"])
    assert definition.validate() is definition
    assert definition.mime_types == ("application/pdf",)


def test_definition_without_name_is_invalid():
    definition = PluginDefinition(None, mime_types=("application/pdf",))
    with pytest.raises(InvalidArgumentsError):
        definition.validate()


def test_definition_without_mime_types_is_invalid():
    definition = PluginDefinition("pdf")
    with pytest.raises(InvalidArgumentsError):
        definition.validate()