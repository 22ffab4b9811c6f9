"""
Dock widget base class shared by the log and settings panels.

This module defines:
    - DockableWidget: QDockWidget with unified features and size constraints, a
      ``toggled`` signal for visibility changes and a checkable menu action.
"""
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from . import ui


class DockableWidget(QtWidgets.QDockWidget):
    """Movable, floatable and closable dock widget.

    Signals:
        toggled (bool): Emitted when the dock is shown or hidden.
    """
    toggled = QtCore.Signal(bool)

    def __init__(
            self,
            title: str,
            parent: Optional[QtWidgets.QWidget] = None,
            min_width: Optional[int] = None,
            min_height: Optional[int] = None,
            size_hint: Optional[QtCore.QSize] = None,
    ) -> None:
        super().__init__(title, parent=parent)

        self.setFeatures(
            QtWidgets.QDockWidget.DockWidgetMovable |
            QtWidgets.QDockWidget.DockWidgetFloatable |
            QtWidgets.QDockWidget.DockWidgetClosable
        )
        self.setAllowedAreas(QtCore.Qt.AllDockWidgetAreas)
        self.setContentsMargins(0, 0, 0, 0)

        self._size_hint = size_hint

        self.setMinimumWidth(min_width if min_width is not None else ui.Size.DefaultWidth(0.4))
        if min_height is not None:
            self.setMinimumHeight(min_height)

        self.visibilityChanged.connect(self.toggled.emit)

    def sizeHint(self) -> QtCore.QSize:
        if self._size_hint:
            return self._size_hint  # type: ignore[return-value]
        return QtCore.QSize(ui.Size.DefaultWidth(0.6), ui.Size.DefaultHeight(0.6))

    def toggle_action(self, shortcut: Optional[str] = None) -> QtGui.QAction:
        """A checkable action showing and hiding the dock, kept in sync with its visibility."""
        action = QtGui.QAction(self.windowTitle(), self)
        action.setCheckable(True)
        action.setChecked(self.isVisible())
        action.setStatusTip(f'Show or hide {self.windowTitle().lower()}')
        if shortcut:
            action.setShortcut(shortcut)
            action.setShortcutContext(QtCore.Qt.ApplicationShortcut)

        action.triggered.connect(self.setVisible)
        self.toggled.connect(action.setChecked)
        return action

    @QtCore.Slot()
    def raise_dock(self) -> None:
        """Show the dock and bring it to the front of its tab group."""
        self.show()
        self.raise_()

    def contextMenuEvent(self, event: QtGui.QContextMenuEvent) -> None:
        """Provide a context menu on the title bar for docking actions."""
        title_height = self.style().pixelMetric(QtWidgets.QStyle.PM_TitleBarHeight)

        if event.pos().y() > title_height:
            super().contextMenuEvent(event)
            return

        menu = QtWidgets.QMenu(self)
        toggle = menu.addAction('Toggle Floating')

        dock_actions = {}
        for name, area in (('Left', QtCore.Qt.LeftDockWidgetArea),
                           ('Right', QtCore.Qt.RightDockWidgetArea),
                           ('Bottom', QtCore.Qt.BottomDockWidgetArea)):
            dock_actions[menu.addAction(f'Dock {name}')] = area

        chosen = menu.exec(event.globalPos())
        if chosen == toggle:
            self.setFloating(not self.isFloating())
        elif chosen in dock_actions:
            window = self.parent()
            while window and not isinstance(window, QtWidgets.QMainWindow):
                window = window.parent()
            if window:
                self.setFloating(False)
                window.addDockWidget(dock_actions[chosen], self)
        event.accept()
