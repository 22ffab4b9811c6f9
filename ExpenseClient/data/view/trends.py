"""Monthly spending graph.

This module provides:
    - paint decorator: wraps paint helpers with save/restore and error logging
    - Geometry: container for calculated drawing regions
    - MonthlyTrendGraph: custom QWidget showing monthly bars and a LOESS trend line
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd
from PySide6 import QtCore, QtGui, QtWidgets

from ...settings import lib
from ...settings import locale
from ...ui import ui


def paint(func):  # type: ignore[valid-type]
    """Decorator to wrap paint helpers with save/restore + exception log."""

    def wrapper(self, painter: QtGui.QPainter) -> None:  # type: ignore[valid-type]
        painter.save()
        try:
            func(self, painter)
        except Exception as ex:
            logging.error(f'MonthlyTrendGraph: error in {func.__name__}', exc_info=ex)
        painter.restore()

    return wrapper


@dataclass
class Geometry:
    """All pixel-space objects bundled in one container."""
    area: QtCore.QRectF = field(default_factory=QtCore.QRectF)
    bars: list[QtCore.QRectF] = field(default_factory=list)
    trend_path: QtGui.QPainterPath = field(default_factory=QtGui.QPainterPath)
    trend_points: list[QtCore.QPointF] = field(default_factory=list)
    labels: list[tuple[QtGui.QStaticText, QtCore.QPointF]] = field(default_factory=list)
    baseline_y: float = 0.0
    data_max: float = 0.0


class MonthlyTrendGraph(QtWidgets.QWidget):
    """Bars of the monthly totals with the smoothed trend drawn over them.

    The data is the frame returned by :func:`ExpenseClient.data.data.monthly_trend`:
    one row per month with ``month``, ``label``, ``amount`` and ``loess`` columns.
    """
    monthClicked = QtCore.Signal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._df: pd.DataFrame = pd.DataFrame()
        self._currency: Optional[str] = None
        self._selected_month: str = ''

        self._geom: Geometry = Geometry()

        self._show_bars: bool = True
        self._show_trend: bool = True
        self._show_axes: bool = True
        self._show_tooltip: bool = True

        self._hover_index: Optional[int] = None
        self._hover_text: Optional[str] = None
        self._hover_pos: Optional[QtCore.QPoint] = None

        self.setMouseTracking(True)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.setMinimumHeight(ui.Size.DefaultHeight(0.5))
        self.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Expanding)

        self._init_actions()

    def _init_actions(self) -> None:
        """Set up context-menu actions for toggles and smoothing."""
        bars_action = QtGui.QAction('Show Bars', self, checkable=True)
        bars_action.setChecked(self._show_bars)
        bars_action.toggled.connect(self.toggle_bars)
        bars_action.setStatusTip('Show or hide the bars')
        bars_action.setShortcut('alt+1')
        self.addAction(bars_action)

        trend_action = QtGui.QAction('Show Trend', self, checkable=True)
        trend_action.setChecked(self._show_trend)
        trend_action.toggled.connect(self.toggle_trend)
        trend_action.setStatusTip('Show or hide the trend line')
        trend_action.setShortcut('alt+2')
        self.addAction(trend_action)

        axes_action = QtGui.QAction('Show Axes', self, checkable=True)
        axes_action.setChecked(self._show_axes)
        axes_action.toggled.connect(self.toggle_axes)
        axes_action.setStatusTip('Show or hide the axes')
        axes_action.setShortcut('alt+3')
        self.addAction(axes_action)

        tooltip_action = QtGui.QAction('Show Tooltip', self, checkable=True)
        tooltip_action.setChecked(self._show_tooltip)
        tooltip_action.toggled.connect(self.toggle_tooltip)
        tooltip_action.setStatusTip('Show or hide the tooltip')
        tooltip_action.setShortcut('alt+4')
        self.addAction(tooltip_action)

        action = QtGui.QAction(self)
        action.setSeparator(True)
        self.addAction(action)

        smooth_action = QtGui.QAction('Adjust Smoothing...', self)
        smooth_action.triggered.connect(self.open_loess_dialog)
        self.addAction(smooth_action)

    def set_data(self, monthly: pd.DataFrame, currency: Optional[str] = None) -> None:
        """Show a monthly series."""
        self._df = monthly.reset_index(drop=True) if monthly is not None else pd.DataFrame()
        self._currency = currency
        self._hover_index = None
        self._hover_text = None
        self._rebuild_geometry()
        self.update()

    def set_selected_month(self, month: str) -> None:
        self._selected_month = month or ''
        self.update()

    @property
    def empty(self) -> bool:
        return self._df.empty or not (self._df['amount'] > 0).any()

    @QtCore.Slot(bool)
    def toggle_bars(self, visible: bool) -> None:
        self._show_bars = bool(visible)
        self.update()

    @QtCore.Slot(bool)
    def toggle_trend(self, visible: bool) -> None:
        self._show_trend = bool(visible)
        self.update()

    @QtCore.Slot(bool)
    def toggle_axes(self, visible: bool) -> None:
        self._show_axes = bool(visible)
        self.update()

    @QtCore.Slot(bool)
    def toggle_tooltip(self, visible: bool) -> None:
        self._show_tooltip = bool(visible)
        self.update()

    @QtCore.Slot()
    def open_loess_dialog(self) -> None:
        """Open a dialog to adjust the LOESS smoothing fraction.

        The fraction is saved to the settings while the slider moves, so the
        dashboard recomputes the trend live. Cancelling restores the original value.
        """
        dialog = QtWidgets.QDialog(self)
        dialog.setWindowTitle('Adjust Smoothing Fraction')
        layout = QtWidgets.QVBoxLayout(dialog)
        label = QtWidgets.QLabel(f'Loess Fraction: {lib.settings["loess_fraction"]:.2f}', dialog)
        layout.addWidget(label)
        slider = QtWidgets.QSlider(QtCore.Qt.Horizontal, dialog)
        slider.setMinimum(10)
        slider.setMaximum(100)
        slider.setValue(int(lib.settings['loess_fraction'] * 100))
        layout.addWidget(slider)
        buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel,
            parent=dialog
        )
        layout.addWidget(buttons)
        original = lib.settings['loess_fraction']

        def on_slider(val: int) -> None:
            frac = float(val / 100.0)
            label.setText(f'Loess Fraction: {frac:.2f}')
            lib.settings['loess_fraction'] = frac

        slider.valueChanged.connect(on_slider)
        buttons.accepted.connect(dialog.accept)

        def on_reject() -> None:
            lib.settings['loess_fraction'] = original
            dialog.reject()

        buttons.rejected.connect(on_reject)
        dialog.open()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.0), ui.Size.DefaultHeight(0.6))

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        self._rebuild_geometry()
        super().resizeEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)

        self._draw_background(painter)

        if self.empty:
            self._draw_empty(painter)
            return

        # Too small to draw anything useful
        if self._geom.baseline_y < self._geom.area.top() + ui.Size.Margin(0.5):
            return

        if self._show_bars:
            self._draw_bars(painter)
        if self._show_trend:
            self._draw_trend(painter)
        if self._show_axes:
            self._draw_axes(painter)
        if self._show_tooltip:
            self._draw_tooltip(painter)

    @paint
    def _draw_background(self, painter: QtGui.QPainter) -> None:
        if self.property('rounded'):
            painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(ui.Color.VeryDarkBackground())
            painter.drawRoundedRect(self.rect(), ui.Size.Indicator(2.0), ui.Size.Indicator(2.0))
        else:
            painter.fillRect(self.rect(), ui.Color.VeryDarkBackground())

        o = ui.Size.Margin(1.0)
        rect = self.rect().adjusted(o, o, -o, -o)

        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.DarkBackground())

        o = ui.Size.Indicator(2.0)
        painter.drawRoundedRect(rect, o, o)

    @paint
    def _draw_empty(self, painter: QtGui.QPainter) -> None:
        font, _ = ui.Font.MediumFont(ui.Size.MediumText(1.0))
        painter.setFont(font)
        painter.setPen(ui.Color.SecondaryText())
        painter.drawText(self.rect(), QtCore.Qt.AlignCenter, 'No expenses found')

    @paint
    def _draw_axes(self, painter: QtGui.QPainter) -> None:
        geom = self._geom
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        painter.setPen(QtGui.QPen(ui.Color.SecondaryText()))
        painter.drawLine(
            QtCore.QPointF(geom.area.left(), geom.baseline_y),
            QtCore.QPointF(geom.area.right(), geom.baseline_y)
        )

        font, metrics = ui.Font.LightFont(ui.Size.SmallText(1.0))
        painter.setFont(font)
        painter.setPen(QtGui.QPen(ui.Color.Text()))

        max_lbl = locale.format_currency_value(geom.data_max, self._currency, lib.settings['locale'])
        painter.drawText(
            QtCore.QPointF(geom.area.left(), geom.area.top() - metrics.descent()),
            max_lbl
        )

        # month labels, skipping the ones that would overlap
        occupied: list[QtCore.QRectF] = []
        for static_text, pos in geom.labels:
            size = static_text.size()
            rect = QtCore.QRectF(pos, size)
            if any(rect.intersects(o) for o in occupied):
                continue
            occupied.append(rect.adjusted(-ui.Size.Indicator(1.0), 0, ui.Size.Indicator(1.0), 0))
            painter.drawStaticText(pos, static_text)

    @paint
    def _draw_bars(self, painter: QtGui.QPainter) -> None:
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        geom = self._geom
        if not geom.bars:
            return

        base_color = ui.chart_color(0)
        theme_color = ui.Color.VeryDarkBackground()
        rate = 0.5
        blend_color = QtGui.QColor(
            int(base_color.red() * rate + theme_color.red() * (1 - rate)),
            int(base_color.green() * rate + theme_color.green() * (1 - rate)),
            int(base_color.blue() * rate + theme_color.blue() * (1 - rate))
        )

        painter.setPen(QtCore.Qt.NoPen)
        months = self._df['month'].tolist()
        for idx, rect in enumerate(geom.bars):
            selected = idx < len(months) and months[idx] == self._selected_month
            painter.setBrush(base_color if (selected or idx == self._hover_index) else blend_color)
            painter.drawRoundedRect(rect, ui.Size.Indicator(0.5), ui.Size.Indicator(0.5))

    @paint
    def _draw_trend(self, painter: QtGui.QPainter) -> None:
        geom = self._geom
        if geom.trend_path.isEmpty():
            return

        painter.setBrush(QtCore.Qt.NoBrush)

        pen = QtGui.QPen(ui.chart_color(3))
        pen.setCosmetic(True)
        pen.setWidthF(ui.Size.Indicator(0.75))
        pen.setCapStyle(QtCore.Qt.RoundCap)
        pen.setJoinStyle(QtCore.Qt.RoundJoin)
        painter.setPen(pen)

        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.drawPath(geom.trend_path)

    @paint
    def _draw_tooltip(self, painter: QtGui.QPainter) -> None:
        if self._hover_index is None or not self._hover_text or self._hover_pos is None:
            return

        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        font, _ = ui.Font.BoldFont(ui.Size.MediumText(1.0))
        painter.setFont(font)
        metrics = painter.fontMetrics()
        text = self._hover_text
        tw = metrics.horizontalAdvance(text)
        th = metrics.height()
        pad = ui.Size.Indicator(2.0)
        w = tw + pad * 2
        h = th + pad * 2
        ax = self._geom.area
        x = self._hover_pos.x() - w / 2
        x = max(ax.left(), min(x, ax.right() - w))
        margin = ui.Size.Separator(3.0)
        y = self._hover_pos.y() - h - margin
        if y < ax.top():
            y = self._hover_pos.y() + margin
        tooltip_rect = QtCore.QRectF(x, y, w, h)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.VeryDarkBackground())
        painter.drawRoundedRect(tooltip_rect, pad, pad)
        painter.setPen(QtGui.QPen(ui.Color.Text()))
        painter.drawText(QtCore.QPointF(x + pad, y + pad + metrics.ascent()), text)

    def _rebuild_geometry(self) -> None:
        """Populate self._geom from current data + widget size."""
        self._geom = Geometry()
        geom = self._geom

        rect = self.contentsRect()
        m = ui.Size.Margin(2.0)
        _, metrics = ui.Font.LightFont(ui.Size.SmallText(1.0))
        label_h = metrics.height() + ui.Size.Indicator(2.0)
        geom.area = QtCore.QRectF(rect.adjusted(m, m, -m, -m - label_h))
        geom.baseline_y = geom.area.bottom()

        if self._df.empty:
            return

        amounts = self._df['amount'].astype(float).clip(lower=0.0)
        if 'loess' in self._df:
            trend = self._df['loess'].astype(float).clip(lower=0.0)
        else:
            trend = amounts

        n = len(amounts)
        w = geom.area.width()
        gap = ui.Size.Indicator(1.0) if n > 1 else 0.0
        bar_w = max((w - gap * (n - 1)) / n, ui.Size.Separator(1.0))
        step = bar_w + gap

        data_max = max(float(amounts.max()), float(trend.max()), 0.0)
        geom.data_max = data_max
        rng = data_max or 1.0

        for i in range(n):
            ratio = max(0.0, min(amounts.iat[i] / rng, 1.0))
            pix_h = ratio * geom.area.height()
            x0 = geom.area.left() + i * step
            geom.bars.append(QtCore.QRectF(x0, geom.baseline_y - pix_h, bar_w, pix_h))

        for i in range(n):
            ratio = max(0.0, min(trend.iat[i] / rng, 1.0))
            pt = QtCore.QPointF(
                geom.area.left() + i * step + bar_w / 2,
                geom.baseline_y - ratio * geom.area.height()
            )
            geom.trend_points.append(pt)
            if i == 0:
                geom.trend_path.moveTo(pt)
            else:
                geom.trend_path.lineTo(pt)

        for i, lbl in enumerate(self._df['label'].tolist()):
            txt = QtGui.QStaticText(str(lbl))
            txt.prepare(QtGui.QTransform(), ui.Font.LightFont(ui.Size.SmallText(1.0))[0])
            size = txt.size()
            x_c = geom.area.left() + i * step + bar_w / 2
            geom.labels.append((txt, QtCore.QPointF(x_c - size.width() / 2,
                                                    geom.baseline_y + ui.Size.Indicator(1.0))))

    @QtCore.Slot()
    def clear_data(self) -> None:
        self._df = pd.DataFrame()
        self._hover_index = None
        self._hover_text = None
        self._geom = Geometry()
        self.update()

    def _bar_at(self, pos: QtCore.QPoint) -> Optional[int]:
        ptf = QtCore.QPointF(pos)
        for idx, rect in enumerate(self._geom.bars):
            column = QtCore.QRectF(rect.left(), self._geom.area.top(), rect.width(), self._geom.area.height())
            if column.contains(ptf):
                return idx
        return None

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        """Show tooltip when hovering over a month."""
        pos = event.pos()
        self._hover_pos = pos
        hovered = self._bar_at(pos)

        if hovered != self._hover_index:
            self._hover_index = hovered
            if hovered is not None:
                row = self._df.iloc[hovered]
                total_str = locale.format_currency_value(float(row['amount']), self._currency, lib.settings['locale'])
                self._hover_text = f"{row['label']}: {total_str}"
            else:
                self._hover_text = None

        self.update()
        super().mouseMoveEvent(event)

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        idx = self._bar_at(event.pos())
        if idx is not None and event.button() == QtCore.Qt.LeftButton:
            self.monthClicked.emit(str(self._df.iloc[idx]['month']))
        super().mousePressEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        """Clear hover state when mouse leaves widget."""
        if self._hover_index is not None or self._hover_text is not None:
            self._hover_index = None
            self._hover_text = None
            self._hover_pos = None
            self.update()
        super().leaveEvent(event)
