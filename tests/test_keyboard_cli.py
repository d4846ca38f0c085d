import io

import pytest

from minios.keyboard import DE_LAYOUT, US_LAYOUT
from minios.keyboard_cli import USAGE, default_manager, main, run


@pytest.fixture
def manager():
    return default_manager()


def _run(argv, manager):
    out = io.StringIO()
    code = run(argv, manager, out)
    return code, out.getvalue()


def test_no_arguments_prints_usage(manager):
    code, text = _run(["keyboard"], manager)
    assert code == 0
    assert text == USAGE


def test_unknown_command_prints_usage(manager):
    code, text = _run(["keyboard", "bogus"], manager)
    assert code == 0
    assert text == USAGE


def test_show_active_layout(manager):
    _, text = _run(["keyboard", "layout"], manager)
    assert text == "Active keyboard layout: de_DE\n"


def test_list_layouts(manager):
    _, text = _run(["keyboard", "layout", "list"], manager)
    lines = text.splitlines()
    assert lines[0] == "Available keyboard layouts:"
    assert lines[1:] == [DE_LAYOUT.identifier, US_LAYOUT.identifier]


def test_set_layout(manager):
    _, text = _run(["keyboard", "layout", "set", "en_US"], manager)
    assert text == "Set layout to en_US\n"
    assert manager.active_layout == US_LAYOUT
    _, shown = _run(["keyboard", "layout"], manager)
    assert shown == "Active keyboard layout: en_US\n"


def test_set_unknown_layout_keeps_active(manager):
    _, text = _run(["keyboard", "layout", "set", "xx_XX"], manager)
    assert text == "Unknown layout xx_XX\n"
    assert manager.active_layout == DE_LAYOUT


def test_set_without_language_is_unknown_option(manager):
    _, text = _run(["keyboard", "layout", "set"], manager)
    assert text == 'Unknown option: "set"\n' + USAGE


def test_unknown_option(manager):
    _, text = _run(["keyboard", "layout", "foo"], manager)
    assert text.startswith('Unknown option: "foo"\n')
    assert text.endswith(USAGE)


@pytest.mark.parametrize(
    "argv",
    [
        ["keyboard", "layout", "list", "extra"],
        ["keyboard", "layout", "set", "en_US", "extra"],
    ],
)
def test_wrong_argument_count_prints_usage(manager, argv):
    _, text = _run(argv, manager)
    assert text == USAGE
    assert manager.active_layout == DE_LAYOUT


def test_main_uses_default_manager(capsys):
    assert main(["layout"]) == 0
    assert capsys.readouterr().out == "Active keyboard layout: de_DE\n"