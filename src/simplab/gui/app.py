"""Qt application entrypoint for the SimpLab GUI."""

from __future__ import annotations

import sys
from typing import Sequence

import numpy as np
from PySide6 import QtCore, QtWidgets
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from simplab.containers import Container
from simplab.errors import SimpLabError
from simplab.gui.render import beaker_drawing
from simplab.session import LabSession

BEAKER_WIDTH = 0.6
BEAKER_SPACING = 0.9


class BeakerCanvas(FigureCanvasQTAgg):
    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        self.figure = Figure(figsize=(6, 4), tight_layout=True)
        super().__init__(self.figure)
        self.setParent(parent)
        self.axes = self.figure.add_subplot(1, 1, 1)
        self._rng = np.random.default_rng(0)

    def draw_containers(self, containers: Sequence[Container], active_id: str | None) -> None:
        self.axes.clear()
        for index, container in enumerate(containers):
            x0 = index * BEAKER_SPACING
            visuals = container.visuals
            drawing = beaker_drawing(container.result.visual_data, visuals.fill_level)

            self.axes.add_patch(
                Rectangle((x0, 0.0), BEAKER_WIDTH, drawing.liquid_height,
                          facecolor=drawing.liquid_rgb, edgecolor="none")
            )
            if drawing.precipitate_rgb is not None:
                self.axes.add_patch(
                    Rectangle((x0, 0.0), BEAKER_WIDTH, drawing.precipitate_height,
                              facecolor=drawing.precipitate_rgb, edgecolor="grey")
                )
            if drawing.bubble_count:
                xs = x0 + self._rng.uniform(0.05, BEAKER_WIDTH - 0.05, drawing.bubble_count)
                ys = self._rng.uniform(0.02, drawing.liquid_height, drawing.bubble_count)
                self.axes.scatter(xs, ys, s=12, facecolors="none", edgecolors="white")

            outline = "orangered" if drawing.warm else "black"
            width = 2.5 if container.id == active_id else 1.0
            self.axes.plot(
                [x0, x0, x0 + BEAKER_WIDTH, x0 + BEAKER_WIDTH],
                [1.0, 0.0, 0.0, 1.0],
                color=outline,
                linewidth=width,
            )
            self.axes.text(x0 + BEAKER_WIDTH / 2, -0.08, container.label, ha="center", va="top")

        self.axes.set_xlim(-0.2, max(len(containers), 1) * BEAKER_SPACING)
        self.axes.set_ylim(-0.2, 1.1)
        self.axes.set_axis_off()
        self.draw()


class LabWindow(QtWidgets.QMainWindow):
    def __init__(self, session: LabSession | None = None) -> None:
        super().__init__()
        self.setWindowTitle("SimpLab")
        self.resize(1100, 700)
        self.session = session or LabSession()
        if not self.session.manager.containers:
            self.session.new_container()

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)

        layout = QtWidgets.QHBoxLayout(central)
        panel = QtWidgets.QWidget()
        panel_layout = QtWidgets.QVBoxLayout(panel)

        self.container_box = QtWidgets.QComboBox()
        self.container_box.currentIndexChanged.connect(lambda _index: self._refresh())
        panel_layout.addWidget(self.container_box)

        self.substance_list = QtWidgets.QListWidget()
        for substance in self.session.manager.catalog:
            item = QtWidgets.QListWidgetItem(f"{substance.name} ({substance.formula})")
            item.setData(QtCore.Qt.ItemDataRole.UserRole, substance.id)
            self.substance_list.addItem(item)
        self.substance_list.itemDoubleClicked.connect(self._add_substance)
        panel_layout.addWidget(self.substance_list)

        buttons = {
            "Add Selected": self._add_selected,
            "Remove Last": self._remove_last,
            "Clear": self._clear,
            "New Beaker": self._new_container,
            "Record Run": self._record_run,
        }
        for text, handler in buttons.items():
            button = QtWidgets.QPushButton(text)
            button.clicked.connect(handler)
            panel_layout.addWidget(button)

        self.info_label = QtWidgets.QLabel()
        self.info_label.setWordWrap(True)
        panel_layout.addWidget(self.info_label)

        self.canvas = BeakerCanvas()

        layout.addWidget(panel, stretch=1)
        layout.addWidget(self.canvas, stretch=2)
        self._reload_containers()

    def _active_id(self) -> str | None:
        return self.container_box.currentData()

    def _reload_containers(self, select: str | None = None) -> None:
        self.container_box.blockSignals(True)
        self.container_box.clear()
        for container in self.session.manager.containers:
            self.container_box.addItem(container.label, container.id)
        if select is not None:
            self.container_box.setCurrentIndex(self.container_box.findData(select))
        self.container_box.blockSignals(False)
        self._refresh()

    def _guarded(self, action) -> None:
        try:
            action()
        except SimpLabError as exc:
            QtWidgets.QMessageBox.warning(self, "SimpLab", str(exc))
        self._refresh()

    def _add_substance(self, item: QtWidgets.QListWidgetItem) -> None:
        container_id = self._active_id()
        if container_id is None:
            return
        substance_id = item.data(QtCore.Qt.ItemDataRole.UserRole)
        self._guarded(lambda: self.session.add_substance(container_id, substance_id))

    def _add_selected(self) -> None:
        item = self.substance_list.currentItem()
        if item is not None:
            self._add_substance(item)

    def _remove_last(self) -> None:
        container_id = self._active_id()
        if container_id is not None:
            self._guarded(lambda: self.session.remove_last(container_id))

    def _clear(self) -> None:
        container_id = self._active_id()
        if container_id is not None:
            self._guarded(lambda: self.session.clear(container_id))

    def _record_run(self) -> None:
        container_id = self._active_id()
        if container_id is not None:
            self._guarded(lambda: self.session.record_run(container_id))

    def _new_container(self) -> None:
        try:
            container = self.session.new_container()
        except SimpLabError as exc:
            QtWidgets.QMessageBox.warning(self, "SimpLab", str(exc))
            return
        self._reload_containers(select=container.id)

    def _refresh(self) -> None:
        active_id = self._active_id()
        if active_id is not None:
            result = self.session.manager.get(active_id).result
            lines = [result.description, result.equation, f"pH ≈ {result.ph:g}"]
            if result.products:
                lines.append("Products: " + ", ".join(p.name for p in result.products))
            lines.append(f"Runs recorded: {len(self.session.history)}")
            self.info_label.setText("\n".join(line for line in lines if line))
        self.canvas.draw_containers(self.session.manager.containers, active_id)


def main() -> None:
    app = QtWidgets.QApplication(sys.argv)
    window = LabWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
