"""Main window composition and UI entry points for ExpenseClient.

This module defines:
    - show(): initialize and display the main window
    - TitleLabel, TitleBar: app title and the signed-in user
    - ResizableMainWidget: maximize/restore handling
    - MainWindow: page navigation, dock panels and window state persistence
"""
import functools
import logging
from typing import Dict

from PySide6 import QtWidgets, QtCore, QtGui

from . import ui
from ..core.auth import auth_manager
from ..data.view.category import CategoriesWidget
from ..data.view.dashboard import DashboardWidget
from ..data.view.expense import ExpensesWidget
from ..data.view.expenseform import ExpenseFormDialog, ExpenseFormWidget
from ..data.view.receipt import ReceiptsWidget
from ..log.view import LogDockWidget
from ..settings.lib import app_name
from ..settings.settings import SettingsDockWidget
from ..ui.actions import signals

widget = None

#: Page name, toolbar label and shortcut, in toolbar order.
PAGES = (
    ('dashboard', 'Dashboard', 'Ctrl+1'),
    ('expenses', 'Expenses', 'Ctrl+2'),
    ('new_expense', 'Add Expense', 'Ctrl+N'),
    ('categories', 'Categories', 'Ctrl+3'),
    ('receipts', 'Receipts', 'Ctrl+4'),
)


def show():
    global widget

    if widget is None:
        widget = MainWindow()

    widget.show()


class TitleLabel(QtWidgets.QWidget):
    """Painted application title."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientTitleLabel')
        QtCore.QTimer.singleShot(0, self.update_title)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)

        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.Text())

        font, metrics = self.get_font()
        x = self.rect().x()
        y = self.rect().center().y() + metrics.height() / 2.0 - metrics.descent()

        path = QtGui.QPainterPath()
        path.addText(x, y, font, self.get_title())
        painter.drawPath(path)

    @staticmethod
    def get_font():
        return ui.Font.BlackFont(ui.Size.MediumText(1.6))

    @staticmethod
    def get_title():
        return 'Expense Tracker'

    @QtCore.Slot()
    def update_title(self) -> None:
        font, metrics = self.get_font()
        self.setFixedWidth(metrics.horizontalAdvance(self.get_title()) + ui.Size.Margin(1.0))
        self.update()


class TitleBar(QtWidgets.QWidget):
    """Title, page toolbar and the signed-in user."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientTitleBar')
        self._drag_pos = None

        self.setFixedHeight(ui.Size.RowHeight(1.5))
        self.setSizePolicy(
            QtWidgets.QSizePolicy.MinimumExpanding,
            QtWidgets.QSizePolicy.Fixed
        )

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QHBoxLayout(self)

        o = ui.Size.Margin(1.0)
        self.layout().setContentsMargins(o, 0, o, 0)
        self.layout().setSpacing(ui.Size.Indicator(2.0))
        self.layout().setAlignment(QtCore.Qt.AlignVCenter)

        self.title_label = TitleLabel(parent=self)
        self.layout().addWidget(self.title_label, 0)

        self.user_label = QtWidgets.QLabel('', self)
        self.user_label.setProperty('secondary', True)
        self.layout().addWidget(self.user_label, 0)

    def _connect_signals(self) -> None:
        signals.loggedIn.connect(self.update_user)
        signals.loggedOut.connect(self.update_user)

    @QtCore.Slot()
    def update_user(self, *args) -> None:
        info = auth_manager.user_info()
        if not info:
            self.user_label.setText('')
            return
        self.user_label.setText(info['name'] or info['email'])
        self.user_label.setToolTip(info['email'])

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.LeftButton and not self.window().isMaximized():
            self._drag_pos = event.globalPosition().toPoint()
        else:
            self._drag_pos = None
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if (event.buttons() & QtCore.Qt.LeftButton and
                self._drag_pos is not None and
                not self.window().isMaximized()):
            delta = event.globalPosition().toPoint() - self._drag_pos
            self.window().move(self.window().pos() + delta)
            self._drag_pos = event.globalPosition().toPoint()
        super().mouseMoveEvent(event)

    def mouseDoubleClickEvent(self, event: QtGui.QMouseEvent) -> None:
        self.window().toggle_maximised()
        super().mouseDoubleClickEvent(event)


class ResizableMainWidget(QtWidgets.QMainWindow):
    """QMainWindow subclass handling geometry state and maximize/restore behavior."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._previous_geometry = None
        o = ui.Size.Margin(1.0)
        self._normal_margins = (int(o * 0.5), int(o * 0.25), int(o * 0.5), int(o * 0.5))
        self.setContentsMargins(*self._normal_margins)

    def showMaximized(self) -> None:
        self._previous_geometry = self.geometry()
        self.setContentsMargins(0, 0, 0, 0)
        super().showMaximized()

    def showNormal(self) -> None:
        self.setContentsMargins(*self._normal_margins)
        super().showNormal()
        if self._previous_geometry is not None:
            self.setGeometry(self._previous_geometry)
            self._previous_geometry = None

    @QtCore.Slot()
    def toggle_maximised(self) -> None:
        if self.isMaximized():
            self.showNormal()
        else:
            self.showMaximized()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.VeryDarkBackground())
        painter.drawRect(self.rect())


class MainWindow(ResizableMainWidget):
    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self._configure_dock_behavior()
        self.setWindowTitle(app_name)
        self.setObjectName('ExpenseClientMainWindow')

        self.toolbar: QtWidgets.QToolBar
        self.stack: QtWidgets.QStackedWidget
        self.page_actions: QtGui.QActionGroup
        self.pages: Dict[str, QtWidgets.QWidget] = {}

        self.dashboard_view: DashboardWidget
        self.expenses_view: ExpensesWidget
        self.expense_form: ExpenseFormWidget
        self.categories_view: CategoriesWidget
        self.receipts_view: ReceiptsWidget

        self.settings_view: SettingsDockWidget
        self.log_view: LogDockWidget

        self._create_ui()
        self._init_actions()
        self._connect_signals()
        self.load_window_settings()

    def _configure_dock_behavior(self) -> None:
        opts = self.dockOptions()
        opts |= QtWidgets.QMainWindow.AllowNestedDocks | QtWidgets.QMainWindow.AnimatedDocks
        self.setDockOptions(opts)

        positions = [
            (QtCore.Qt.LeftDockWidgetArea, QtWidgets.QTabWidget.West),
            (QtCore.Qt.RightDockWidgetArea, QtWidgets.QTabWidget.East),
            (QtCore.Qt.BottomDockWidgetArea, QtWidgets.QTabWidget.South),
        ]
        for area, pos in positions:
            self.setTabPosition(area, pos)

    def _create_ui(self) -> None:
        """
        Build the main UI: title bar with the page toolbar, the page stack and the docks.
        """
        self.setMenuWidget(TitleBar(self))

        central = QtWidgets.QWidget(self)
        central.setProperty('rounded', True)
        layout = QtWidgets.QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        self.setCentralWidget(central)

        self.toolbar = QtWidgets.QToolBar(self)
        self.toolbar.setObjectName('ExpenseClientActionToolBar')
        self.toolbar.setToolButtonStyle(QtCore.Qt.ToolButtonTextOnly)
        self.menuWidget().layout().insertWidget(1, self.toolbar, 1)

        self.stack = QtWidgets.QStackedWidget(central)
        layout.addWidget(self.stack, 1)

        page_configs = [
            {'attr': 'dashboard_view', 'class': DashboardWidget, 'page': 'dashboard'},
            {'attr': 'expenses_view', 'class': ExpensesWidget, 'page': 'expenses'},
            {'attr': 'expense_form', 'class': ExpenseFormWidget, 'page': 'new_expense'},
            {'attr': 'categories_view', 'class': CategoriesWidget, 'page': 'categories'},
            {'attr': 'receipts_view', 'class': ReceiptsWidget, 'page': 'receipts'},
        ]
        for cfg in page_configs:
            page = cfg['class'](parent=self.stack)
            setattr(self, cfg['attr'], page)
            self.pages[cfg['page']] = page
            self.stack.addWidget(page)

        dock_configs = [
            {
                'attr': 'settings_view',
                'class': SettingsDockWidget,
                'name': 'ExpenseClientSettingsDockWidget',
                'area': QtCore.Qt.RightDockWidgetArea},
            {
                'attr': 'log_view',
                'class': LogDockWidget,
                'name': 'ExpenseClientLogDockWidget',
                'area': QtCore.Qt.BottomDockWidgetArea},
        ]
        for cfg in dock_configs:
            dock = cfg['class'](parent=self)
            setattr(self, cfg['attr'], dock)
            dock.setObjectName(cfg['name'])
            self.addDockWidget(cfg['area'], dock)
            dock.hide()

            logging.debug(f'Added dock {cfg["name"]} in area {cfg["area"]}')

    def _init_actions(self) -> None:
        """
        Create the page, dock and session actions of the toolbar.
        """
        def _spacer() -> QtWidgets.QWidget:
            w = QtWidgets.QWidget(self)
            w.setAttribute(QtCore.Qt.WA_TransparentForMouseEvents, True)
            w.setAttribute(QtCore.Qt.WA_NoSystemBackground, True)
            w.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Maximum)
            return w

        self.page_actions = QtGui.QActionGroup(self)
        self.page_actions.setExclusive(True)

        for name, label, shortcut in PAGES:
            action = QtGui.QAction(label, self)
            action.setCheckable(True)
            action.setData(name)
            action.setShortcut(shortcut)
            action.setShortcutContext(QtCore.Qt.ApplicationShortcut)
            action.triggered.connect(functools.partial(self.set_page, name))
            self.page_actions.addAction(action)
            self.toolbar.addAction(action)
            self.addAction(action)

        self.toolbar.addWidget(_spacer())

        for dock, shortcut in ((self.log_view, 'Ctrl+L'), (self.settings_view, 'Ctrl+,')):
            action = dock.toggle_action(shortcut)
            action.setShortcutContext(QtCore.Qt.ApplicationShortcut)
            self.toolbar.addAction(action)
            self.addAction(action)

        self.toolbar.addSeparator()

        action = QtGui.QAction('Logout', self)
        action.setStatusTip('Sign out of the current session')
        action.triggered.connect(signals.logoutRequested)
        self.toolbar.addAction(action)
        self.addAction(action)

        action = QtGui.QAction('Maximize', self)
        action.setShortcut('Ctrl+M')
        action.triggered.connect(self.toggle_maximised)
        self.addAction(action)

    def _connect_signals(self) -> None:
        signals.pageRequested.connect(self.set_page)
        signals.editExpenseRequested.connect(self.edit_expense)
        signals.showLogs.connect(self.log_view.raise_dock)
        signals.showSettings.connect(self.settings_view.raise_dock)
        signals.loggedOut.connect(lambda: self.set_page('dashboard'))

    def current_page(self) -> str:
        for name, page in self.pages.items():
            if page is self.stack.currentWidget():
                return name
        return ''

    @QtCore.Slot(str)
    def set_page(self, name: str) -> None:
        """Show a page and check its toolbar action."""
        page = self.pages.get(name)
        if page is None:
            logging.warning(f'Unknown page: {name}')
            return
        self.stack.setCurrentWidget(page)
        for action in self.page_actions.actions():
            if action.data() == name:
                action.setChecked(True)
                break

    @QtCore.Slot(object)
    def edit_expense(self, expense) -> None:
        dialog = ExpenseFormDialog(expense, parent=self)
        dialog.finished.connect(dialog.deleteLater)
        dialog.open()

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.8),
            ui.Size.DefaultHeight(1.6)
        )

    def closeEvent(self, event) -> None:
        """Persist window geometry, dock state and the current page on close."""
        settings = QtCore.QSettings(app_name, app_name)
        settings.setValue('MainWindow/geometry', self.saveGeometry())
        settings.setValue('MainWindow/windowState', self.saveState())
        settings.setValue('MainWindow/maximized', self.isMaximized())
        settings.setValue('MainWindow/page', self.current_page())
        super().closeEvent(event)

    def load_window_settings(self) -> None:
        settings = QtCore.QSettings(app_name, app_name)
        geom_data = settings.value('MainWindow/geometry')
        raw_max = settings.value('MainWindow/maximized', False)
        if isinstance(raw_max, str):
            was_maximized = raw_max.lower() in ('true', '1')
        else:
            was_maximized = bool(raw_max)

        if isinstance(geom_data, QtCore.QByteArray):
            self.restoreGeometry(geom_data)
        else:
            self.resize(self.sizeHint())
            primary = QtGui.QGuiApplication.primaryScreen()
            if primary is not None:
                avail = primary.availableGeometry()
                self.move(
                    avail.x() + (avail.width() - self.width()) // 2,
                    avail.y() + (avail.height() - self.height()) // 2
                )

        state = settings.value('MainWindow/windowState')
        if isinstance(state, QtCore.QByteArray):
            self.restoreState(state)

        self.set_page(settings.value('MainWindow/page', 'dashboard') or 'dashboard')

        if was_maximized:
            self.showMaximized()
