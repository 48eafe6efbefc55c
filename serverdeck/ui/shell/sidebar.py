"""
Server list: one row per configured server, drag-to-reorder, badges, context menu.

The widget renders ``SidebarModel`` and never keeps its own copy of the order;
every relevant bus event triggers a full refresh from the model.
"""
from __future__ import annotations

from PySide6.QtCore import QModelIndex, QPoint, Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QAbstractItemView,
    QFrame,
    QListWidget,
    QListWidgetItem,
    QMenu,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from serverdeck.core.events import (
    ActiveCleared,
    ActiveSet,
    BadgeSet,
    ContentReady,
    EventBus,
    HostTitleSet,
    SidebarColorChanged,
    SidebarEntryAdded,
    SidebarEntryRemoved,
    SidebarReordered,
)
from serverdeck.core.sidebar import SidebarEntry, SidebarModel
from serverdeck.ui.shell.favicons import FaviconCache

SIDEBAR_WIDTH = 220
URL_ROLE = Qt.ItemDataRole.UserRole


def entry_text(entry: SidebarEntry) -> str:
    text = f"{entry.initials}   {entry.title}"
    if entry.count is not None and entry.badge:
        text += f"  ({entry.badge})"
    elif entry.unread:
        text += "  •"
    return text


class ServerListWidget(QFrame):
    """Vertical server list. Emits user gestures; state changes come from the bus."""

    server_clicked = Signal(str)
    add_server_clicked = Signal()
    reload_requested = Signal(str)
    remove_requested = Signal(str)

    def __init__(
        self,
        model: SidebarModel,
        event_bus: EventBus,
        parent: QWidget | None = None,
        *,
        icons: FaviconCache | None = None,
    ) -> None:
        super().__init__(parent)
        self._model = model
        self._icons = icons
        self._pressed_url: str | None = None

        self.setObjectName("serverList")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setFixedWidth(SIDEBAR_WIDTH)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 8, 4, 8)
        layout.setSpacing(4)

        self._list = QListWidget(self)
        self._list.setDragDropMode(QAbstractItemView.DragDropMode.InternalMove)
        self._list.setDefaultDropAction(Qt.DropAction.MoveAction)
        self._list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self._list.itemPressed.connect(self._on_item_pressed)
        self._list.itemClicked.connect(lambda item: self.server_clicked.emit(item.data(URL_ROLE)))
        self._list.customContextMenuRequested.connect(self._show_context_menu)
        self._list.model().rowsMoved.connect(self._on_rows_moved)
        layout.addWidget(self._list, 1)

        self._add_btn = QToolButton(self)
        self._add_btn.setText("+  Add server")
        self._add_btn.setToolTip("Add new server")
        self._add_btn.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
        self._add_btn.setMinimumHeight(36)
        self._add_btn.clicked.connect(self.add_server_clicked.emit)
        layout.addWidget(self._add_btn)

        for event_type in (
            SidebarEntryAdded,
            SidebarEntryRemoved,
            SidebarReordered,
            ActiveSet,
            ActiveCleared,
            HostTitleSet,
            BadgeSet,
        ):
            event_bus.subscribe_weak(event_type, self._on_model_changed)
        event_bus.subscribe_weak(SidebarColorChanged, self._on_color_changed)
        if icons is not None:
            icons.icon_changed.connect(self._on_model_changed)
            event_bus.subscribe_weak(SidebarEntryAdded, self._on_entry_added)
            event_bus.subscribe_weak(ContentReady, self._on_content_ready)
            for entry in model.entries():
                icons.fetch(entry.url)

        self.refresh()

    # --- Rendering ---

    def _on_model_changed(self, _event: object) -> None:
        self.refresh()

    def refresh(self) -> None:
        self._list.blockSignals(True)
        self._list.model().blockSignals(True)
        self._list.clear()
        for entry in self._model.entries():
            item = QListWidgetItem(entry_text(entry))
            item.setData(URL_ROLE, entry.url)
            item.setToolTip(f"{entry.title}\n{entry.hotkey}")
            icon = self._icons.icon(entry.url) if self._icons is not None else None
            if icon is not None:
                item.setIcon(icon)
            self._list.addItem(item)
            if entry.active:
                item.setSelected(True)
                self._list.setCurrentItem(item)
        self._list.model().blockSignals(False)
        self._list.blockSignals(False)

    def _on_entry_added(self, event: SidebarEntryAdded) -> None:
        if self._icons is not None and self._icons.icon(event.url) is None:
            self._icons.fetch(event.url)

    def _on_content_ready(self, event: ContentReady) -> None:
        if self._icons is not None:
            self._icons.fetch(event.url)

    def urls(self) -> list[str]:
        return [self._list.item(i).data(URL_ROLE) for i in range(self._list.count())]

    def _on_color_changed(self, event: SidebarColorChanged) -> None:
        rules = []
        if event.background:
            rules.append(f"background: {event.background};")
        if event.color:
            rules.append(f"color: {event.color};")
        self.setStyleSheet(f"#serverList, #serverList QListWidget {{ {' '.join(rules)} }}" if rules else "")

    # --- Gestures ---

    def _on_item_pressed(self, item: QListWidgetItem) -> None:
        self._pressed_url = item.data(URL_ROLE)

    def _on_rows_moved(self, *_args: QModelIndex | int) -> None:
        order = self.urls()
        dragged = self._pressed_url
        # The view is still inside its drop handler; rebuild afterwards.
        QTimer.singleShot(0, lambda: self._model.reorder(order, dragged))

    def _show_context_menu(self, pos: QPoint) -> None:
        item = self._list.itemAt(pos)
        if item is None:
            return
        url = item.data(URL_ROLE)
        menu = QMenu(self)
        menu.addAction("Reload server", lambda: self.reload_requested.emit(url))
        menu.addAction("Remove server", lambda: self.remove_requested.emit(url))
        menu.exec(self._list.viewport().mapToGlobal(pos))
