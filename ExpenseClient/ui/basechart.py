"""Shared chart slice, model, and base view for category-based charts."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd
from PySide6 import QtCore, QtGui, QtWidgets

from . import ui
from ..settings import lib, locale


@dataclass(slots=True)
class ChartSlice:
    """Slice data plus geometry."""
    category: str
    amount_txt: str
    value: float
    percentage: float
    color: QtGui.QColor
    start_qt: int
    span_qt: int
    # geometry fields for slice rendering
    base_rect: QtCore.QRect = field(default_factory=QtCore.QRect, repr=False)
    popped_rect: QtCore.QRect = field(default_factory=QtCore.QRect, repr=False)
    half_rect: QtCore.QRect = field(default_factory=QtCore.QRect, repr=False)
    base_path: QtGui.QPainterPath = field(default_factory=QtGui.QPainterPath, repr=False)
    popped_path: QtGui.QPainterPath = field(default_factory=QtGui.QPainterPath, repr=False)
    mid_deg: float = 0.0
    dx: int = 0
    dy: int = 0
    dx_max: int = 0
    dy_max: int = 0

    @property
    def label(self) -> str:
        return f'{self.category}: {self.amount_txt}'

    @property
    def tooltip(self) -> str:
        return f'{self.category}: {self.amount_txt} ({locale.format_percentage(self.percentage)})'


class ChartModel(QtCore.QObject):
    """Builds ChartSlice instances from a category breakdown.

    The breakdown is the frame returned by :func:`ExpenseClient.data.data.category_breakdown`,
    with ``category``, ``value`` and ``percentage`` columns. Spans are in
    sixteenths of a degree, starting at twelve o'clock.
    """

    def __init__(self) -> None:
        super().__init__()
        self._slices: List[ChartSlice] = []
        self._version: int = 0
        self._total: float = 0.0

    @property
    def slices(self) -> List[ChartSlice]:
        return self._slices

    @property
    def version(self) -> int:
        return self._version

    @property
    def total(self) -> float:
        return self._total

    def rebuild(self, breakdown: pd.DataFrame, currency: Optional[str] = None) -> None:
        """Populate slices from ``breakdown``. Categories with no positive amount are skipped."""
        self._version += 1
        self._slices = []
        self._total = 0.0

        if breakdown is None or breakdown.empty:
            logging.debug('ChartModel: no data available')
            return

        df = breakdown[breakdown['value'] > 0].reset_index(drop=True)
        total = float(df['value'].sum())
        if df.empty or total <= 0:
            return

        self._total = total

        qt_circle = 360 * 16
        rotation_qt = 90 * 16
        spans: List[tuple[int, int, float]] = []
        for idx, row in df.iterrows():
            span_qt = int(round(float(row['value']) / total * qt_circle))
            spans.append((idx, span_qt, float(row['value'])))

        used = sum(s for _, s, _ in spans)
        leftover = qt_circle - used
        if leftover:
            max_idx = max(spans, key=lambda t: t[2])[0]
            for n, (idx, span_qt, val) in enumerate(spans):
                if idx == max_idx:
                    spans[n] = (idx, span_qt + leftover, val)
                    break

        cursor = 0
        for idx, span_qt, value in spans:
            row = df.loc[idx]
            self._slices.append(
                ChartSlice(
                    category=str(row['category']),
                    amount_txt=locale.format_currency_value(value, currency, lib.settings['locale']),
                    value=value,
                    percentage=float(row['percentage']),
                    color=ui.chart_color(idx),
                    start_qt=(cursor + rotation_qt) % qt_circle,
                    span_qt=span_qt,
                )
            )
            cursor += span_qt

    def clear(self) -> None:
        """Clear the model."""
        self._slices = []
        self._total = 0.0
        self._version += 1


class BaseChartView(QtWidgets.QWidget):
    """Base widget for interactive category charts.

    The owner pushes data with :meth:`set_breakdown`; the view animates the
    slices in and shows ``empty_text`` when there is nothing to draw.
    """
    hoverChanged = QtCore.Signal(int)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._show_legend: bool = True
        self._show_tooltip: bool = True
        self._geom_sig: tuple[int, int, int] = (-1, -1, -1)
        self._hover_index: int = -1
        self._empty_text: str = 'No expenses for selected month'

        self._anim_progress = 0.0

        self.model = ChartModel()

        self.setMouseTracking(True)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)

        self._animation = QtCore.QVariantAnimation(self)
        self._animation.setDuration(400)
        self._animation.setStartValue(0.0)
        self._animation.setEndValue(1.0)
        self._animation.setEasingCurve(QtCore.QEasingCurve.OutQuad)
        self._animation.setLoopCount(1)
        self._animation.setDirection(QtCore.QAbstractAnimation.Forward)
        self._animation.finished.connect(self._animation.stop)

        self._create_ui()
        self._connect_signals()
        self._init_actions()

    def _create_ui(self) -> None:
        self.setMinimumSize(
            ui.Size.DefaultWidth(0.5), ui.Size.DefaultWidth(0.5)
        )
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Expanding
        )

    def _connect_signals(self) -> None:
        def on_anim_value_changed(value: float) -> None:
            self._anim_progress = value
            self._geom_sig = (-1, -1, -1)
            self.update()

        self._animation.valueChanged.connect(on_anim_value_changed)

    @property
    def empty_text(self) -> str:
        return self._empty_text

    def set_empty_text(self, text: str) -> None:
        self._empty_text = text
        self.update()

    def set_breakdown(self, breakdown: pd.DataFrame, currency: Optional[str] = None) -> None:
        """Show a new category breakdown."""
        self.model.rebuild(breakdown, currency)
        self._hover_index = -1
        self._geom_sig = (-1, -1, -1)
        if self.model.slices:
            self._animation.stop()
            self._animation.start()
        self.update()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.model.clear()
        self._hover_index = -1
        self._geom_sig = (-1, -1, -1)
        self.update()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        self._recalc_geometry()

        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing)

        self._draw_background(painter)

        if not self.model.slices:
            self._draw_empty(painter)
            return

        self._draw_slices(painter)

        if self._show_legend:
            self._draw_legend(painter)

        if self._show_tooltip:
            self._draw_tooltip(painter)

    def _draw_background(self, painter: QtGui.QPainter) -> None:
        if self.property('rounded'):
            painter.setBrush(ui.Color.VeryDarkBackground())
            painter.setPen(QtCore.Qt.NoPen)
            painter.drawRoundedRect(
                self.rect(), ui.Size.Indicator(2.0), ui.Size.Indicator(2.0)
            )
        else:
            painter.fillRect(self.rect(), ui.Color.VeryDarkBackground())
        offset = ui.Size.Margin(1.0)
        inner = self.rect().adjusted(offset, offset, -offset, -offset)
        painter.setBrush(ui.Color.DarkBackground())
        painter.setPen(QtCore.Qt.NoPen)
        painter.drawRoundedRect(inner, ui.Size.Indicator(2.0), ui.Size.Indicator(2.0))

    def _draw_empty(self, painter: QtGui.QPainter) -> None:
        font, _ = ui.Font.MediumFont(ui.Size.MediumText(1.0))
        painter.setFont(font)
        painter.setPen(ui.Color.SecondaryText())
        painter.drawText(self.rect(), QtCore.Qt.AlignCenter | QtCore.Qt.TextWordWrap, self._empty_text)

    # Subclasses must implement:
    def _recalc_geometry(self) -> None:
        raise NotImplementedError

    def _draw_slices(self, painter: QtGui.QPainter) -> None:
        raise NotImplementedError

    def _slice_at(self, pos: QtCore.QPoint) -> int:
        raise NotImplementedError

    def _draw_legend(self, painter: QtGui.QPainter) -> None:
        raise NotImplementedError

    def _draw_tooltip(self, painter: QtGui.QPainter) -> None:
        raise NotImplementedError

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        idx = self._slice_at(event.pos())
        if idx != self._hover_index:
            self._hover_index = idx
            self.hoverChanged.emit(idx)
        self.update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        if self._hover_index != -1:
            self._hover_index = -1
            self.hoverChanged.emit(-1)
            self.update()
        super().leaveEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        self._geom_sig = (-1, -1, -1)
        self.update()
        super().resizeEvent(event)

    def _init_actions(self) -> None:
        @QtCore.Slot(bool)
        def toggle_legend(checked: bool) -> None:
            self._show_legend = checked
            self.update()

        action = QtGui.QAction('Toggle Legend', self)
        action.setCheckable(True)
        action.setChecked(self._show_legend)
        action.setToolTip('Show/hide legend')
        action.setStatusTip('Show/hide legend')
        action.setShortcut('Alt+1')
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(toggle_legend)
        self.addAction(action)

        @QtCore.Slot(bool)
        def toggle_tooltip(checked: bool) -> None:
            self._show_tooltip = checked
            self.update()

        action = QtGui.QAction('Toggle Tooltip', self)
        action.setCheckable(True)
        action.setChecked(self._show_tooltip)
        action.setToolTip('Show/hide tooltip')
        action.setStatusTip('Show/hide tooltip')
        action.setShortcut('Alt+2')
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(toggle_tooltip)
        self.addAction(action)
