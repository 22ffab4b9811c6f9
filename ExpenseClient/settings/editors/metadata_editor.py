"""
Editors for the application preferences stored in the metadata section:
locale, currency, theme, page size and the dashboard options.

The editors load their options and current value from the persistent settings
object (lib.settings) and write every change straight back. The combo-box
editors share a common base class.
"""
import logging

import babel
from babel import numbers
from PySide6 import QtCore, QtWidgets

from .. import lib
from .. import locale
from ...ui import ui
from ...ui.actions import signals


class BaseComboBoxEditor(QtWidgets.QComboBox):
    """Base combo-box editor for a metadata property.

    The editor is initialized using:
      - property_name: key for lib.settings.
      - default_value: used when the stored value is not one of the options.
      - options: list of (display, value) tuples.
    """

    def __init__(self, property_name, default_value, options, parent=None):
        super().__init__(parent=parent)
        self._options = options
        self.property_name = property_name
        self.default_value = default_value
        self.setView(QtWidgets.QListView(self))

        self._connect_signals()
        self.init_data()

    def get_options(self):
        """Return a list of option tuples (display, value)."""
        return self._options

    def init_data(self):
        self.blockSignals(True)
        try:
            self.clear()
            for display, value in self.get_options():
                self.addItem(display, userData=value)

            idx = self.findData(self.validate_value(lib.settings[self.property_name]))
            if idx != -1:
                self.setCurrentIndex(idx)
        finally:
            self.blockSignals(False)

    def validate_value(self, value):
        """Return value if it is one of the options, otherwise the default."""
        for _, option in self.get_options():
            if value == option:
                return option
        return self.default_value

    def _connect_signals(self):
        self.currentIndexChanged.connect(self.save)

        @QtCore.Slot(str, object)
        def on_metadata_changed(key: str, value: object) -> None:
            if key != self.property_name:
                return
            if self.currentData() == value:
                return
            self.init_data()

        signals.metadataChanged.connect(on_metadata_changed)

    @QtCore.Slot(int)
    def save(self, index):
        if index == -1:
            return
        value = self.itemData(index)
        logging.debug(f'Setting {self.property_name} to {value}')
        lib.settings[self.property_name] = value


class LocaleEditor(BaseComboBoxEditor):
    """Editor for the formatting locale. Display names come from Babel."""

    def __init__(self, parent=None):
        options = []
        for loc in locale.LOCALE_MAP:
            display = babel.Locale.parse(loc).get_display_name('en')
            options.append((display, loc))
        super().__init__('locale', locale.DEFAULT_LOCALE, options, parent=parent)


class CurrencyEditor(BaseComboBoxEditor):
    """Editor for the display and default expense currency."""

    def __init__(self, parent=None):
        options = []
        for code in locale.CURRENCIES:
            name = numbers.get_currency_name(code, locale='en')
            options.append((f'{code} - {name}', code))
        super().__init__('currency', locale.DEFAULT_CURRENCY, options, parent=parent)


class ThemeEditor(BaseComboBoxEditor):

    def __init__(self, parent=None):
        options = [(theme.capitalize(), theme) for theme in lib.THEMES]
        super().__init__('theme', lib.THEMES[0], options, parent=parent)


class PageSizeEditor(BaseComboBoxEditor):
    """Editor for the number of expenses shown per page."""

    def __init__(self, parent=None):
        options = [(str(size), size) for size in lib.PAGE_SIZES]
        super().__init__('page_size', lib.PAGE_SIZES[0], options, parent=parent)


class SpinBoxEditor(QtWidgets.QSpinBox):
    """Integer editor for a metadata property."""

    def __init__(self, prop, minimum, maximum, parent=None):
        super().__init__(parent=parent)
        self.property_name = prop
        self.setRange(minimum, maximum)
        self.setKeyboardTracking(False)

        self._connect_signals()
        self.init_data()

    def init_data(self):
        v = lib.settings[self.property_name]
        self.blockSignals(True)
        self.setValue(v or self.minimum())
        self.blockSignals(False)

    def _connect_signals(self):
        self.valueChanged.connect(self.save)

        @QtCore.Slot(str, object)
        def on_metadata_changed(key: str, value: object) -> None:
            if key == self.property_name and value != self.value():
                self.init_data()

        signals.metadataChanged.connect(on_metadata_changed)

    @QtCore.Slot(int)
    def save(self, value):
        lib.settings[self.property_name] = int(value)


class LoessFractionEditor(QtWidgets.QDoubleSpinBox):
    """Editor for the trend line smoothing fraction."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setRange(0.1, 1.0)
        self.setSingleStep(0.05)
        self.setDecimals(2)
        self.setKeyboardTracking(False)

        self.valueChanged.connect(self.save)

        @QtCore.Slot(str, object)
        def on_metadata_changed(key: str, value: object) -> None:
            if key == 'loess_fraction' and abs(float(value) - self.value()) > 0.001:
                self.init_data()

        signals.metadataChanged.connect(on_metadata_changed)
        self.init_data()

    def init_data(self):
        self.blockSignals(True)
        self.setValue(lib.settings['loess_fraction'] or 0.5)
        self.blockSignals(False)

    @QtCore.Slot(float)
    def save(self, value):
        lib.settings['loess_fraction'] = round(float(value), 2)


class MetadataWidget(QtWidgets.QWidget):
    """Form of the general preferences."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setSizePolicy(QtWidgets.QSizePolicy.MinimumExpanding, QtWidgets.QSizePolicy.Maximum)

        self.locale_editor = None
        self.currency_editor = None
        self.theme_editor = None
        self.page_size_editor = None
        self.months_editor = None
        self.top_editor = None
        self.loess_editor = None

        self._create_ui()

    def _create_ui(self):
        layout = QtWidgets.QFormLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(ui.Size.Indicator(1.0))

        self.locale_editor = LocaleEditor(self)
        layout.addRow('Locale', self.locale_editor)
        self.currency_editor = CurrencyEditor(self)
        layout.addRow('Currency', self.currency_editor)
        self.theme_editor = ThemeEditor(self)
        layout.addRow('Theme', self.theme_editor)
        self.page_size_editor = PageSizeEditor(self)
        layout.addRow('Expenses per Page', self.page_size_editor)
        self.months_editor = SpinBoxEditor('dashboard_months', 1, 60, parent=self)
        layout.addRow('Dashboard Months', self.months_editor)
        self.top_editor = SpinBoxEditor('top_expenses', 1, 50, parent=self)
        layout.addRow('Top Expenses', self.top_editor)
        self.loess_editor = LoessFractionEditor(self)
        layout.addRow('Trend Smoothing', self.loess_editor)
