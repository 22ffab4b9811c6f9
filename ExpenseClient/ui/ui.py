"""UI styling utilities for ExpenseClient.

This module provides:
    - Font and FontDatabase: weighted fonts derived from the application font
    - Theme: supported UI themes (light, dark)
    - Size: standardized size constants and scaling logic
    - Color: standardized color palette for widgets and themes
    - CHART_COLORS: the series palette shared by the dashboard charts
    - BaseProgressDialog: countdown dialog shown while a blocking call runs
    - RoundedRowDelegate: selection painter used by the table views
"""
import enum
import logging
import math
import os
import re
from typing import Optional

from PySide6 import QtWidgets, QtGui, QtCore


class Font(enum.Enum):
    """Enumeration of font weights."""

    BlackFont = QtGui.QFont.Black
    BoldFont = QtGui.QFont.DemiBold
    MediumFont = QtGui.QFont.Medium
    LightFont = QtGui.QFont.Normal
    ThinFont = QtGui.QFont.Light

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.db = None

    def __call__(self, size):
        """
        Returns a QFont object for the given size and this font enum.

        Args:
            size (float|int): The desired font size.

        Returns:
            tuple: (QFont, QFontMetricsF)
        """
        if self.db is None:
            self.db = FontDatabase()
        return self.db.get(size, self)


class FontDatabase:
    """Caches sized and weighted copies of the application's default font."""

    def __init__(self):
        if not QtWidgets.QApplication.instance():
            msg = 'FontDatabase must be created after a QApplication is initiated.'
            logging.error(msg)
            raise RuntimeError(msg)

        self._family = QtWidgets.QApplication.font().family()
        self.font_cache = {role: {} for role in Font}
        self.metrics_cache = {role: {} for role in Font}

    @property
    def family(self):
        """Return the font family used by the app."""
        return self._family

    def get(self, size, role):
        """Retrieve the font and metrics for the given font size and role.

        Args:
            size (float): The font size.
            role (Font): The font role.

        Returns:
            tuple: (QFont, QFontMetricsF)
        """
        if not isinstance(role, Font):
            raise ValueError(f'Invalid font role: {role}. Must be a member of Font.')
        if size <= 0:
            raise RuntimeError(f'Font size must be greater than 0, got {size}')

        if size in self.font_cache[role]:
            return (QtGui.QFont(self.font_cache[role][size]),
                    QtGui.QFontMetricsF(self.metrics_cache[role][size]))

        font = QtGui.QFont(self._family)
        font.setWeight(role.value)
        font.setPixelSize(round(size))

        self.font_cache[role][size] = font
        self.metrics_cache[role][size] = QtGui.QFontMetricsF(font)

        return font, self.metrics_cache[role][size]


class Theme(enum.StrEnum):
    Light = 'light'
    Dark = 'dark'


class Size(enum.Enum):
    """Enumeration of size values used for UI scaling."""
    SmallText = 11.0
    MediumText = 12.0
    LargeText = 16.0
    Indicator = 4.0
    Separator = 1.0
    Margin = 18.0
    Section = 86.0
    RowHeight = 34.0
    Thumbnail = 128.0
    DefaultWidth = 640.0
    DefaultHeight = 480.0

    def __new__(cls, value):
        obj = object.__new__(cls)
        obj._value_ = float(value)
        return obj

    def __eq__(self, other):
        if isinstance(other, (float, int)):
            return self._value_ == float(other)
        return super().__eq__(other)

    def __hash__(self):
        return hash(self._name_)

    def __call__(self, multiplier=1.0, apply_scale=True):
        """
        Returns the scaled size value.

        Args:
            multiplier (float): A multiplier to apply to the size.
            apply_scale (bool): If True, applies UI scaling factors.

        Returns:
            int: The scaled size.
        """
        if apply_scale:
            return round(self.value * float(multiplier))
        return round(self._value_ * float(multiplier))

    @property
    def value(self):
        """float: The scaled size value."""
        return self.size(self._value_)

    @classmethod
    def size(cls, value, ui_scale_factor=1.0, dpi=72.0):
        """Scale a value by DPI and UI scale factor."""
        return math.ceil(float(value) * (float(dpi) / 72.0)) * float(ui_scale_factor)


class Color(enum.Enum):
    """Enumeration of colours used across the UI."""

    Opaque = {
        Theme.Light.value: (250, 250, 250, 30),
        Theme.Dark.value: (0, 0, 0, 30),
    }
    Transparent = {
        Theme.Light.value: (0, 0, 0, 0),
        Theme.Dark.value: (0, 0, 0, 0),
    }
    VeryDarkBackground = {
        Theme.Light.value: (245, 245, 245),
        Theme.Dark.value: (30, 30, 30),
    }
    DarkBackground = {
        Theme.Light.value: (220, 220, 220),
        Theme.Dark.value: (45, 45, 45),
    }
    Background = {
        Theme.Light.value: (190, 190, 190),
        Theme.Dark.value: (65, 65, 65),
    }
    LightBackground = {
        Theme.Light.value: (170, 170, 170),
        Theme.Dark.value: (85, 85, 85),
    }
    DisabledText = {
        Theme.Light.value: (120, 120, 120),
        Theme.Dark.value: (135, 135, 135),
    }
    SecondaryText = {
        Theme.Light.value: (70, 70, 70),
        Theme.Dark.value: (185, 185, 185),
    }
    Text = {
        Theme.Light.value: (30, 30, 30),
        Theme.Dark.value: (225, 225, 225),
    }
    SelectedText = {
        Theme.Light.value: (0, 0, 0),
        Theme.Dark.value: (255, 255, 255),
    }
    Blue = {
        Theme.Light.value: (59, 130, 246),
        Theme.Dark.value: (88, 138, 180),
    }
    LightBlue = {
        Theme.Light.value: (96, 165, 250),
        Theme.Dark.value: (98, 158, 190),
    }
    Red = {
        Theme.Light.value: (179, 94, 94),
        Theme.Dark.value: (229, 114, 114),
    }
    Green = {
        Theme.Light.value: (60, 180, 125),
        Theme.Dark.value: (90, 200, 155),
    }
    Yellow = {
        Theme.Light.value: (233, 146, 1),
        Theme.Dark.value: (253, 166, 1),
    }

    @classmethod
    def _get_theme(cls):
        from ..settings import lib
        theme = lib.settings['theme']
        if theme not in [f.value for f in Theme]:
            theme = Theme.Dark.value
        return theme

    def __new__(cls, v):
        if not isinstance(v, dict):
            raise ValueError(f'Invalid color value: {v}. Must be a dictionary, got {type(v)}: {v}')
        obj = object.__new__(cls)
        obj._value_ = v
        return obj

    def __call__(self, qss=False):
        """
        Returns a QColor or CSS rgba string.

        Args:
            qss (bool): If True, returns a CSS rgba string suitable for QSS.

        Returns:
            QColor or str: A QColor instance if qss=False, otherwise a CSS rgba string.
        """
        theme = self._get_theme()
        if theme not in self._value_:
            theme = Theme.Dark.value

        color = QtGui.QColor(*self._value_[theme])
        if not qss:
            return color

        return self.rgb(color)

    @staticmethod
    def rgb(color):
        """Returns the CSS rgba string for a QColor."""
        rgb = [str(f) for f in color.getRgb()]
        return f'rgba({",".join(rgb)})'


#: Series colours of the dashboard charts, cycled by index.
CHART_COLORS = (
    '#0088FE',
    '#00C49F',
    '#FFBB28',
    '#FF8042',
    '#8884D8',
    '#82CA9D',
    '#FFC658',
    '#FF6B9D',
)


def chart_color(index: int) -> QtGui.QColor:
    """Returns the chart colour for the given series index."""
    return QtGui.QColor(CHART_COLORS[index % len(CHART_COLORS)])


def init_stylesheet():
    """Loads and expands the style sheet template used by the app.

    The template is stored in ``config/stylesheet.qss``. Tokens written as
    ``<Name>`` are replaced by colour, font and size values.

    Returns:
        str: The style sheet.

    """
    if not QtWidgets.QApplication.instance():
        raise RuntimeError('init_stylesheet() must be called after a QApplication is initiated.')

    from ..settings import lib
    if not os.path.isfile(lib.settings.stylesheet_path):
        raise FileNotFoundError(f'Style sheet file not found: {lib.settings.stylesheet_path}')

    with open(lib.settings.stylesheet_path, 'r', encoding='utf-8') as f:
        qss = f.read()

    kwargs = {}

    for _enum in Font:
        font, _ = _enum(Size.MediumText())
        kwargs[_enum.name] = font.family()

    for _enum in Color:
        key = _enum.name
        if key in kwargs:
            raise KeyError(f'Key {key} already set!')
        kwargs[key] = Color.rgb(_enum())

    for _enum in Size:
        for i in [float(f) / 10.0 for f in range(1, 101)]:
            key = f'{_enum.name}@{i:.1f}'
            if key in kwargs:
                raise KeyError(f'Key {key} already set!')
            kwargs[key] = round(_enum() * i)

    # Tokens are defined as "<token>" in the stylesheet file
    for match in re.finditer(r'<(.*?)>', qss):
        key = match.group(1)
        if key not in kwargs:
            raise KeyError(f'Key {key} not found in kwargs!')
        qss = qss.replace(f'<{key}>', str(kwargs[key]))

    if re.search(r'<(.*?)>', qss):
        raise RuntimeError('Not all tokens were replaced!')

    return qss


def apply_theme() -> None:
    """Set the style sheet for the entire app.

    This function should be called after the QApplication is created.

    """
    if not QtWidgets.QApplication.instance():
        raise RuntimeError('apply_theme() must be called after a QApplication is initiated.')

    if os.environ.get('EXPENSECLIENT_DISABLE_STYLESHEET', '').lower() in ['1', 'true', 'yes']:
        logging.warning('Stylesheet disabled by environment variable.')
        return

    qss = init_stylesheet()
    QtWidgets.QApplication.instance().setStyleSheet(qss)

    for widget in QtWidgets.QApplication.instance().topLevelWidgets():
        try:
            widget.setStyleSheet(qss)
        except RuntimeError as ex:
            logging.debug(f'Could not style {widget}: {ex}')


class BaseProgressDialog(QtWidgets.QDialog):
    """
    Modal countdown dialog shown while a blocking operation runs.

    Subclasses lay out their content in :meth:`_populate_content`.

    Signals:
        cancelled (): Emitted when the user cancels the operation.
        errorOccurred (str): Emitted with a message to display.
    """
    cancelled = QtCore.Signal()
    errorOccurred = QtCore.Signal(str)

    def __init__(self, total_timeout: int, status_text: str,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle('Please wait')
        self.setModal(True)

        self.total_timeout: int = total_timeout
        self.remaining: int = total_timeout
        self.status_text: str = status_text

        self.countdown_timer = QtCore.QTimer(self)
        self.countdown_timer.setInterval(1000)

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = Size.Margin(1.0)
        self.layout().setContentsMargins(o, o, o, o)
        self.layout().setSpacing(Size.Indicator(1.0))
        self._populate_content(self.layout())

    def _populate_content(self, layout: QtWidgets.QVBoxLayout) -> None:
        self.status_label = QtWidgets.QLabel(self.status_text)
        layout.addWidget(self.status_label, 1)

        self.countdown_label = QtWidgets.QLabel(f'Please wait ({self.remaining}s)...')
        layout.addWidget(self.countdown_label, 1)

        self.cancel_button = QtWidgets.QPushButton('Cancel')
        layout.addWidget(self.cancel_button, 1)

    def _connect_signals(self) -> None:
        self.countdown_timer.timeout.connect(self.update_countdown)
        self.cancel_button.clicked.connect(self.on_cancel)

    def showEvent(self, event: QtGui.QShowEvent) -> None:
        super().showEvent(event)
        self.countdown_timer.start()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:
        self.countdown_timer.stop()
        super().hideEvent(event)

    @QtCore.Slot()
    def update_countdown(self) -> None:
        self.remaining -= 1
        self._update_countdown_label()
        if self.remaining <= 0:
            self.on_timeout()

    def _update_countdown_label(self) -> None:
        self.countdown_label.setText(f'Please wait ({self.remaining}s)...')

    @QtCore.Slot()
    def on_timeout(self) -> None:
        self.countdown_timer.stop()
        self.countdown_label.setText('Operation timed out.')

    @QtCore.Slot()
    def on_cancel(self) -> None:
        self.countdown_timer.stop()
        self.cancelled.emit()
        self.reject()


class RoundedRowDelegate(QtWidgets.QStyledItemDelegate):
    """Delegate that draws rounded-corner backgrounds for selected row cells."""

    def __init__(self, first_column: int = 0, last_column: int = -1,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._first_column = first_column
        self._last_column = last_column

    def paint(self, painter: QtGui.QPainter, option: QtWidgets.QStyleOptionViewItem,
              index: QtCore.QModelIndex) -> None:
        """Paint the item with rounded corners if selected."""
        selected = option.state & QtWidgets.QStyle.State_Selected
        column = index.column()

        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing)
        painter.setPen(QtCore.Qt.NoPen)
        color = Color.Background() if selected else Color.Transparent()
        painter.setBrush(color)

        last_column = index.model().columnCount() + self._last_column

        o = Size.Indicator(1.5)
        rect = QtCore.QRectF(option.rect)
        half = rect.width() / 2.0

        if column == self._first_column and column == last_column:
            painter.drawRoundedRect(rect, o, o)
        elif column == self._first_column:
            painter.drawRoundedRect(rect.adjusted(0, 0, -half + o, 0), o, o)
            painter.fillRect(rect.adjusted(half, 0, 0, 0), color)
        elif column == last_column:
            painter.drawRoundedRect(rect.adjusted(half - o, 0, 0, 0), o, o)
            painter.fillRect(rect.adjusted(0, 0, -half, 0), color)
        else:
            painter.fillRect(rect, color)
        painter.restore()

        super().paint(painter, option, index)
