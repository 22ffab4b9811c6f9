"""Pie chart view of the selected month's spending by category."""
import math
from typing import Optional, List

from PySide6 import QtCore, QtGui, QtWidgets

from ...ui import ui
from ...ui.basechart import BaseChartView


class PieChartView(BaseChartView):
    """Interactive exploded-view pie chart.

    Every slice is labelled ``{category}: {amount}`` around the pie; hovering a
    slice pops it out and shows its share of the month.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        # explosion offsets
        self.min_offset_px = ui.Size.Indicator(1.0)
        self.max_offset_px = ui.Size.Indicator(10.0)
        self.gap_px = self.min_offset_px

    @staticmethod
    def _slice_path(rect: QtCore.QRect, start_deg: float, span_deg: float) -> QtGui.QPainterPath:
        path = QtGui.QPainterPath()
        path.moveTo(rect.center())
        path.arcTo(rect, start_deg, span_deg)
        path.closeSubpath()
        return path

    def _recalc_geometry(self) -> None:
        sig = (self.model.version, self.width(), self.height())
        if sig == self._geom_sig:
            return

        if not self.model.slices:
            self._geom_sig = sig
            return

        widget_rect = self.rect()
        edge = min(widget_rect.width(), widget_rect.height())
        outer = QtCore.QRect(
            widget_rect.x() + (widget_rect.width() - edge) // 2,
            widget_rect.y() + (widget_rect.height() - edge) // 2,
            edge,
            edge,
        )

        # leave room for the labels around the pie
        margin = ui.Size.Margin(2.5)
        outer = outer.adjusted(margin, margin, -margin, -margin)

        radius = max(outer.width(), 0) / 2.0
        max_off_clip = min(self.max_offset_px, radius * 0.30)

        # grow the pie in while the intro animation runs
        shrink = int(radius * (1.0 - self._anim_progress) * 0.5)
        inset = int(max_off_clip) + shrink
        inner = outer.adjusted(inset, inset, -inset, -inset)

        for sl in self.model.slices:
            alpha_rad = math.radians(sl.span_qt / 16.0)
            sin_half = math.sin(alpha_rad / 2.0)
            t_raw = 0.0 if sin_half == 0 else self.gap_px / (2.0 * sin_half)
            t = max(self.min_offset_px, min(t_raw, max_off_clip))

            start_deg = sl.start_qt / 16.0
            span_deg = sl.span_qt / 16.0
            sl.mid_deg = start_deg + span_deg / 2.0
            theta = math.radians(sl.mid_deg)

            # a single slice is a full circle and stays centred
            if len(self.model.slices) == 1:
                t = 0.0
            sl.dx = int(round(t * math.cos(theta)))
            sl.dy = int(round(-t * math.sin(theta)))
            sl.dx_max = int(round(max_off_clip * math.cos(theta)))
            sl.dy_max = int(round(-max_off_clip * math.sin(theta)))

            sl.base_rect = QtCore.QRect(inner.translated(sl.dx, sl.dy))
            sl.popped_rect = QtCore.QRect(inner.translated(sl.dx_max, sl.dy_max))
            sl.half_rect = QtCore.QRect(
                inner.translated(
                    (sl.dx + sl.dx_max) // 2,
                    (sl.dy + sl.dy_max) // 2,
                )
            )

            sl.base_path = self._slice_path(sl.base_rect, start_deg, span_deg)
            sl.popped_path = self._slice_path(sl.popped_rect, start_deg, span_deg)

        self._geom_sig = sig

    def _slice_at(self, pos: QtCore.QPoint) -> int:
        for index, sl in enumerate(self.model.slices):
            if sl.popped_path.contains(QtCore.QPointF(pos)):
                return index
        return -1

    def _draw_slices(self, painter: QtGui.QPainter) -> None:
        for idx, sl in enumerate(self.model.slices):
            rect = sl.half_rect if idx == self._hover_index else sl.base_rect
            painter.setBrush(sl.color)
            if idx == self._hover_index:
                pen = QtGui.QPen(sl.color.lighter(125))
                pen.setWidthF(ui.Size.Separator(2.0))
                painter.setPen(pen)
            else:
                painter.setPen(QtCore.Qt.NoPen)
            painter.drawPie(rect, sl.start_qt, sl.span_qt)

    def _draw_legend(self, painter: QtGui.QPainter) -> None:
        if not self.model.slices:
            return

        pad = ui.Size.Indicator(1.0)
        radial_step = ui.Size.Separator(0.8)
        font, metrics = ui.Font.MediumFont(ui.Size.SmallText())
        painter.setFont(font)

        slices_sorted = sorted(self.model.slices, key=lambda sl: sl.mid_deg)
        placed_boxes: List[QtCore.QRectF] = []

        offset = ui.Size.Margin(1.0)
        bg_rect = self.rect().adjusted(offset, offset, -offset, -offset)
        legend_bound = bg_rect.adjusted(pad, pad, -pad, -pad)

        for sl in slices_sorted:
            idx = self.model.slices.index(sl)
            rect_ref = sl.half_rect if idx == self._hover_index else sl.base_rect
            centre = rect_ref.center()
            base_r = rect_ref.width() / 2.0 + pad * 2
            theta = math.radians(sl.mid_deg)
            text = sl.label
            txt_w = metrics.horizontalAdvance(text)
            txt_h = metrics.height()

            # walk outwards until the label fits without overlapping
            current_r = base_r
            max_radius = math.hypot(legend_bound.width(), legend_bound.height())
            max_iters = int(max_radius / max(radial_step, 1)) + 1
            box = QtCore.QRectF()
            for _ in range(max_iters):
                cx = centre.x() + current_r * math.cos(theta)
                cy = centre.y() - current_r * math.sin(theta)
                box = QtCore.QRectF(
                    cx - txt_w / 2 - pad,
                    cy - txt_h / 2 - pad,
                    txt_w + pad * 2,
                    txt_h + pad * 2,
                )
                if all(not box.intersects(other) for other in placed_boxes) and \
                        box.left() >= legend_bound.left() and box.right() <= legend_bound.right() and \
                        box.top() >= legend_bound.top() and box.bottom() <= legend_bound.bottom():
                    break
                current_r += radial_step
            placed_boxes.append(box)

        for sl, box in zip(slices_sorted, placed_boxes):
            painter.save()
            painter.setOpacity(0.5)
            painter.setBrush(ui.Color.VeryDarkBackground())
            painter.setPen(QtCore.Qt.NoPen)
            painter.drawRoundedRect(box, pad, pad)
            painter.restore()
            painter.setPen(sl.color.darker(110))
            painter.drawText(
                QtCore.QPointF(box.x() + pad, box.y() + pad + metrics.ascent()), sl.label)

    def _draw_tooltip(self, painter: QtGui.QPainter) -> None:
        if not 0 <= self._hover_index < len(self.model.slices):
            return

        sl = self.model.slices[self._hover_index]
        cursor_pos = self.mapFromGlobal(QtGui.QCursor.pos())

        text = sl.tooltip
        font, metrics = ui.Font.BoldFont(ui.Size.MediumText())
        painter.setFont(font)

        pad = ui.Size.Indicator(2.0)
        swatch = metrics.height()
        width = swatch + pad + metrics.horizontalAdvance(text) + pad * 2
        height = swatch + pad * 2

        x = max(self.rect().left(), min(cursor_pos.x() - width / 2, self.rect().right() - width))
        y = cursor_pos.y() - height - pad
        if y < self.rect().top():
            y = cursor_pos.y() + pad

        bg = QtCore.QRectF(x, y, width, height)
        painter.setBrush(ui.Color.VeryDarkBackground())
        painter.setPen(QtCore.Qt.NoPen)
        painter.drawRoundedRect(bg, pad, pad)

        painter.setBrush(sl.color)
        painter.drawEllipse(QtCore.QRectF(bg.x() + pad, bg.y() + pad, swatch, swatch))

        painter.setPen(ui.Color.Text())
        painter.drawText(
            QtCore.QPointF(bg.x() + pad + swatch + pad, bg.y() + pad + metrics.ascent()),
            text,
        )
