from __future__ import annotations

import ctypes.util
import os


def _import_qtwidgets_or_skip():
    import pytest

    pytest.importorskip("PySide6")
    if ctypes.util.find_library("GL") is None:
        pytest.skip("PySide6 runtime is not fully available in this environment: libGL is missing")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    try:
        from PySide6.QtWidgets import QApplication, QMenu
    except ImportError as exc:
        pytest.skip(f"PySide6 QtWidgets unavailable in this environment: {exc}")
    return QApplication, QMenu


def _model(*urls: str):
    from serverdeck.core.events import EventBus
    from serverdeck.core.hosts import ServerRegistry
    from serverdeck.core.sidebar import SidebarModel
    from serverdeck.core.storage import MemoryStore

    store = MemoryStore()
    bus = EventBus()
    registry = ServerRegistry(store, bus)
    registry.load()
    sidebar = SidebarModel(store, bus, registry, platform="linux")
    for url in urls:
        registry.add_host(url)
    return registry, sidebar, bus


def test_server_list_follows_model_events() -> None:
    QApplication, _QMenu = _import_qtwidgets_or_skip()

    from serverdeck.ui.shell.sidebar import ServerListWidget

    _app = QApplication.instance() or QApplication([])
    registry, sidebar, bus = _model("https://a.example.org", "https://b.example.org")
    widget = ServerListWidget(sidebar, bus)

    assert widget.urls() == ["https://a.example.org", "https://b.example.org"]

    registry.add_host("https://c.example.org")
    registry.remove_host("https://a.example.org")
    assert widget.urls() == ["https://b.example.org", "https://c.example.org"]

    sidebar.set_badge("https://b.example.org", 4)
    assert widget._list.item(0).text().endswith("(4)")


def test_server_list_reorder_goes_through_model() -> None:
    QApplication, _QMenu = _import_qtwidgets_or_skip()

    from serverdeck.ui.shell.sidebar import ServerListWidget

    _app = QApplication.instance() or QApplication([])
    registry, sidebar, bus = _model("https://a.example.org", "https://b.example.org")
    widget = ServerListWidget(sidebar, bus)

    sidebar.reorder(["https://b.example.org", "https://a.example.org"], "https://a.example.org")

    assert widget.urls() == ["https://b.example.org", "https://a.example.org"]
    assert registry.active == "https://a.example.org"
    assert widget._list.currentItem().text().endswith("a.example.org")


def test_window_menu_lists_servers_by_position() -> None:
    QApplication, QMenu = _import_qtwidgets_or_skip()

    from serverdeck.ui.shell.menus import ServerMenu

    _app = QApplication.instance() or QApplication([])
    registry, sidebar, _bus = _model("https://a.example.org", "https://b.example.org")
    activated: list[str] = []
    menu = ServerMenu(QMenu(), activated.append)

    sidebar.set_menu(menu)
    assert menu.titles() == ["https://a.example.org", "https://b.example.org"]

    sidebar.reorder(["https://b.example.org", "https://a.example.org"], "https://b.example.org")
    assert menu.titles() == ["https://b.example.org", "https://a.example.org"]

    menu.set_title("https://a.example.org", "Team A")
    registry.remove_host("https://b.example.org")
    assert menu.titles() == ["Team A"]


def test_favicon_bytes_render_to_icons() -> None:
    QApplication, _QMenu = _import_qtwidgets_or_skip()

    from serverdeck.ui.shell.favicons import render_icon

    _app = QApplication.instance() or QApplication([])
    svg = b'<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16"><rect width="16" height="16" fill="red"/></svg>'

    icon = render_icon(svg)
    assert icon is not None
    assert not icon.isNull()
    assert render_icon(b"not an image") is None
