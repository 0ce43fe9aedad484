"""Qt application entry point for the rt_rotator preview tool."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import sys

from PySide6 import QtCore, QtGui, QtWidgets

APP_VERSION: str

if __package__ in (None, ""):
    PACKAGE_ROOT = Path(__file__).resolve().parents[1]
    if str(PACKAGE_ROOT) not in sys.path:
        sys.path.insert(0, str(PACKAGE_ROOT))

    import rt_rotator as _pkg

    from rt_rotator.errors import RotatorError
    from rt_rotator.models import AppConfig, Point, RotationMode, RotationState
    from rt_rotator.rotation import RotationInteraction
    from rt_rotator.session import Directories, RotatorSession
    from rt_rotator.utils import fit_scale, rotated_bounds

    APP_VERSION = getattr(_pkg, "__version__", "0.0.0")
else:
    from . import __version__ as APP_VERSION
    from .errors import RotatorError
    from .models import AppConfig, Point, RotationMode, RotationState
    from .rotation import RotationInteraction
    from .session import Directories, RotatorSession
    from .utils import fit_scale, rotated_bounds

log = logging.getLogger(__name__)

WINDOW_TITLE = "Rawtherapee Image Rotator"


# ------------------------------- Image Canvas ---------------------------------


class ImageCanvas(QtWidgets.QWidget):
    """Shows the current preview rotated by the accumulated angle.

    Drags on the canvas are fed to a :class:`RotationInteraction`; the
    resulting state is announced through :attr:`rotationChanged`.
    """

    rotationChanged = QtCore.Signal(object)  # RotationState

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._pixmap: Optional[QtGui.QPixmap] = None
        self._interaction = RotationInteraction()
        self.setMouseTracking(False)
        self.setMinimumSize(160, 120)
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding,
        )

    # ----------------------------- Properties ---------------------------------

    @property
    def state(self) -> RotationState:
        return self._interaction.state

    @property
    def interaction(self) -> RotationInteraction:
        return self._interaction

    def has_image(self) -> bool:
        return self._pixmap is not None and not self._pixmap.isNull()

    def set_image(self, path: Optional[Path]) -> None:
        self._interaction.cancel()
        if path is None:
            self._pixmap = None
        else:
            pix = QtGui.QPixmap(str(path))
            if pix.isNull():
                log.warning("Could not load preview %s", path)
            self._pixmap = pix
        self.update()

    def set_state(self, state: RotationState) -> None:
        self._interaction = RotationInteraction(state)
        self.update()

    # ----------------------------- Interaction --------------------------------

    @staticmethod
    def _point(e: QtGui.QMouseEvent) -> Point:
        pos = e.position()
        return Point(float(pos.x()), float(pos.y()))

    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() == QtCore.Qt.MouseButton.LeftButton and self.has_image():
            self._interaction.begin(self._point(e))
            e.accept()
        else:
            super().mousePressEvent(e)

    def mouseMoveEvent(self, e: QtGui.QMouseEvent) -> None:
        if not self._interaction.dragging:
            return
        before = self._interaction.state
        after = self._interaction.move(self._point(e))
        if after != before:
            self.rotationChanged.emit(after)
        self.update()

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            return
        if not self._interaction.dragging:
            return
        before = self._interaction.state
        after = self._interaction.release(self._point(e))
        if after != before:
            self.rotationChanged.emit(after)
        self.update()

    # ----------------------------- Painting -----------------------------------

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), self.palette().window())

        if not self.has_image():
            painter.setPen(QtGui.QPen(QtGui.QColor(120, 120, 120)))
            painter.drawText(
                self.rect(),
                QtCore.Qt.AlignmentFlag.AlignCenter,
                "No image.\nOpen an image directory to start.",
            )
            return

        assert self._pixmap is not None
        angle = self._interaction.state.accumulated_degrees
        pw, ph = float(self._pixmap.width()), float(self._pixmap.height())
        bw, bh = rotated_bounds(pw, ph, angle)
        scale = fit_scale(bw, bh, float(self.width()), float(self.height()))

        painter.save()
        painter.translate(self.width() / 2.0, self.height() / 2.0)
        painter.rotate(angle)
        painter.scale(scale, scale)
        painter.drawPixmap(QtCore.QPointF(-pw / 2.0, -ph / 2.0), self._pixmap)
        painter.restore()

        gesture = self._interaction.gesture
        if gesture is not None and self.state.mode is RotationMode.LINE:
            painter.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0), 1))
            painter.drawLine(
                QtCore.QPointF(gesture.start.x, gesture.start.y),
                QtCore.QPointF(gesture.end.x, gesture.end.y),
            )


# -------------------------------- Main Window ---------------------------------


class MainWindow(QtWidgets.QMainWindow):
    openDirectoryRequested = QtCore.Signal()
    imageSelected = QtCore.Signal(int)
    stepRequested = QtCore.Signal(int)  # -1 previous, +1 next
    modeChanged = QtCore.Signal(object)  # RotationMode
    resetRequested = QtCore.Signal()
    applyRequested = QtCore.Signal()
    conversionRequested = QtCore.Signal()

    def __init__(self, cfg: AppConfig, app_version: str) -> None:
        super().__init__(None)
        self.setWindowTitle(f"{WINDOW_TITLE} {app_version}".strip())
        self.resize(400, 300)
        self.setMinimumSize(300, 220)

        # Parameters
        self.image_dir_edit = QtWidgets.QLineEdit(cfg.image_dir)
        self.image_ext_edit = QtWidgets.QLineEdit(cfg.image_ext)
        self.raw_dir_edit = QtWidgets.QLineEdit(cfg.raw_dir)
        self.raw_ext_edit = QtWidgets.QLineEdit(cfg.raw_ext)
        self.open_btn = QtWidgets.QPushButton("Open image directory")
        self.open_btn.clicked.connect(self.openDirectoryRequested)

        self.params_box = QtWidgets.QGroupBox("Parameters")
        self.params_box.setCheckable(True)
        params_body = QtWidgets.QWidget(self.params_box)
        params_form = QtWidgets.QFormLayout(params_body)
        params_form.setFieldGrowthPolicy(
            QtWidgets.QFormLayout.FieldGrowthPolicy.AllNonFixedFieldsGrow
        )
        params_form.addRow("Image directory", self.image_dir_edit)
        params_form.addRow("Image extension", self.image_ext_edit)
        params_form.addRow("Raw directory", self.raw_dir_edit)
        params_form.addRow("Raw extension", self.raw_ext_edit)
        params_form.addRow(self.open_btn)
        params_v = QtWidgets.QVBoxLayout(self.params_box)
        params_v.addWidget(params_body)
        self.params_box.toggled.connect(params_body.setVisible)

        # Rotation mode
        self.line_radio = QtWidgets.QRadioButton("Line")
        self.free_radio = QtWidgets.QRadioButton("Free")
        self.mode_group = QtWidgets.QButtonGroup(self)
        self.mode_group.addButton(self.line_radio)
        self.mode_group.addButton(self.free_radio)
        self.set_mode(cfg.rotation_mode)
        self.line_radio.toggled.connect(self._on_mode_toggled)
        mode_row = QtWidgets.QHBoxLayout()
        mode_row.addWidget(QtWidgets.QLabel("Rotation mode:"))
        mode_row.addWidget(self.line_radio)
        mode_row.addWidget(self.free_radio)
        mode_row.addStretch(1)

        # File list + canvas
        self.file_list = QtWidgets.QListWidget()
        self.file_list.currentRowChanged.connect(self._on_row_changed)
        self.canvas = ImageCanvas()
        splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal)
        splitter.addWidget(self.file_list)
        splitter.addWidget(self.canvas)
        splitter.setStretchFactor(1, 1)

        # Bottom bar
        self.rotation_label = QtWidgets.QLabel()
        self.reset_btn = QtWidgets.QPushButton("Reset rotation")
        self.reset_btn.clicked.connect(self.resetRequested)
        self.apply_btn = QtWidgets.QPushButton("Apply additional rotation")
        self.apply_btn.clicked.connect(self.applyRequested)
        self.generate_btn = QtWidgets.QPushButton("Generate conversion command")
        self.generate_btn.clicked.connect(self.conversionRequested)
        self.command_edit = QtWidgets.QPlainTextEdit(cfg.conversion_command)
        self.command_edit.setFixedHeight(60)

        self.conversion_box = QtWidgets.QGroupBox("Conversion")
        self.conversion_box.setCheckable(True)
        self.conversion_box.setChecked(False)
        conv_body = QtWidgets.QWidget(self.conversion_box)
        conv_v = QtWidgets.QVBoxLayout(conv_body)
        conv_v.addWidget(self.generate_btn)
        conv_v.addWidget(self.command_edit)
        conv_outer = QtWidgets.QVBoxLayout(self.conversion_box)
        conv_outer.addWidget(conv_body)
        conv_body.setVisible(False)
        self.conversion_box.toggled.connect(conv_body.setVisible)

        bottom = QtWidgets.QVBoxLayout()
        bottom.addWidget(self.rotation_label)
        bottom.addWidget(self.reset_btn)
        bottom.addWidget(self.apply_btn)
        bottom.addWidget(self.conversion_box)

        central = QtWidgets.QWidget(self)
        v = QtWidgets.QVBoxLayout(central)
        v.addWidget(self.params_box)
        v.addLayout(mode_row)
        v.addWidget(splitter, stretch=1)
        v.addLayout(bottom)
        self.setCentralWidget(central)

        self.set_rotation(cfg.current_rotation)

    # --- helpers ---
    def directories(self) -> Directories:
        return Directories(
            image_dir=self.image_dir_edit.text().strip(),
            image_ext=self.image_ext_edit.text().strip(),
            raw_dir=self.raw_dir_edit.text().strip(),
            raw_ext=self.raw_ext_edit.text().strip(),
        )

    def mode(self) -> RotationMode:
        return RotationMode.LINE if self.line_radio.isChecked() else RotationMode.FREE

    def set_mode(self, mode: RotationMode) -> None:
        radio = self.line_radio if mode is RotationMode.LINE else self.free_radio
        radio.setChecked(True)

    def set_rotation(self, degrees: float) -> None:
        self.rotation_label.setText(f"rotation: {degrees:g}")

    def set_files(self, files: List[Path], current: int) -> None:
        self.file_list.blockSignals(True)
        self.file_list.clear()
        for f in files:
            self.file_list.addItem(f.name)
        self.file_list.blockSignals(False)
        self.set_current_row(current)

    def set_current_row(self, row: int) -> None:
        self.file_list.blockSignals(True)
        for i in range(self.file_list.count()):
            item = self.file_list.item(i)
            font = item.font()
            font.setBold(i == row)
            item.setFont(font)
        if 0 <= row < self.file_list.count():
            self.file_list.setCurrentRow(row)
        self.file_list.blockSignals(False)

    def set_command(self, text: str) -> None:
        self.command_edit.setPlainText(text)

    def show_error(self, err: Exception) -> None:
        """Modal error box; the window stays disabled until it is dismissed."""
        self.centralWidget().setEnabled(False)
        try:
            QtWidgets.QMessageBox.critical(self, "Error!", str(err))
        finally:
            self.centralWidget().setEnabled(True)

    def _on_mode_toggled(self, _checked: bool) -> None:
        self.modeChanged.emit(self.mode())

    def _on_row_changed(self, row: int) -> None:
        if row >= 0:
            self.imageSelected.emit(row)

    def keyReleaseEvent(self, e: QtGui.QKeyEvent) -> None:
        # The list and text fields already act on their own arrow key presses
        focus = self.focusWidget()
        if focus is self.file_list or isinstance(
            focus, (QtWidgets.QLineEdit, QtWidgets.QPlainTextEdit)
        ):
            super().keyReleaseEvent(e)
            return
        key = e.key()
        if key == QtCore.Qt.Key.Key_Up:
            self.stepRequested.emit(-1)
        elif key == QtCore.Qt.Key.Key_Down:
            self.stepRequested.emit(1)
        else:
            super().keyReleaseEvent(e)


# ---------------------------- Main Controller ---------------------------------


class MainController(QtCore.QObject):
    def __init__(
        self,
        app: QtWidgets.QApplication,
        cfg: Optional[AppConfig] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        super().__init__(None)
        self.app = app
        self._cfg_path = config_path
        self.cfg = cfg if cfg is not None else self._load_config()
        self.session = RotatorSession.from_config(self.cfg)

        self._app_version = app.applicationVersion() or APP_VERSION
        self.window = MainWindow(self.cfg, self._app_version)
        self.window.canvas.set_state(self.session.rotation)

        # Wire signals
        w = self.window
        w.openDirectoryRequested.connect(self.open_image_directory)
        w.imageSelected.connect(self.select_image)
        w.stepRequested.connect(self.step)
        w.modeChanged.connect(self._on_mode_changed)
        w.resetRequested.connect(self.reset_rotation)
        w.applyRequested.connect(self.apply_rotation)
        w.conversionRequested.connect(self.generate_conversion_command)
        w.canvas.rotationChanged.connect(self._on_rotation_changed)

    def show(self) -> None:
        self.window.show()

    # ---------------------------- Config I/O ----------------------------------

    def _config_path(self) -> Path:
        if self._cfg_path is not None:
            return self._cfg_path
        return Path.home() / ".rt_rotator_config.json"

    def _load_config(self) -> AppConfig:
        p = self._config_path()
        if p.exists():
            try:
                return AppConfig.from_json(p.read_text(encoding="utf-8"))
            except (OSError, ValueError, TypeError) as exc:
                log.warning("Ignoring unreadable config %s: %s", p, exc)
        return AppConfig()

    def save_config(self) -> None:
        self.session.set_directories(self.window.directories())
        self.session.store(self.cfg)
        self.cfg.conversion_command = self.window.command_edit.toPlainText()
        p = self._config_path()
        try:
            p.write_text(self.cfg.to_json(), encoding="utf-8")
        except OSError as exc:
            log.warning("Could not save config %s: %s", p, exc)

    # ---------------------------- Event Handlers ------------------------------

    def _on_mode_changed(self, mode: RotationMode) -> None:
        state = self.session.set_mode(mode)
        self._show_rotation(state)

    def _on_rotation_changed(self, state: RotationState) -> None:
        self.session.set_rotation(state)
        self.window.set_rotation(state.accumulated_degrees)

    def _show_rotation(self, state: RotationState) -> None:
        self.window.canvas.set_state(state)
        self.window.set_rotation(state.accumulated_degrees)

    def _show_selection(self) -> None:
        self.window.set_current_row(self.session.index)
        self.window.canvas.set_image(self.session.current_image)
        self._show_rotation(self.session.rotation)

    def _fail(self, err: RotatorError) -> None:
        log.error("%s", err)
        self.window.show_error(err)

    # ----------------------------- Core Actions --------------------------------

    def open_image_directory(self) -> None:
        self.session.set_directories(self.window.directories())
        try:
            files = self.session.open_image_directory()
        except RotatorError as err:
            self._fail(err)
            return
        self.window.set_files(files, self.session.index)
        self._show_selection()

    def select_image(self, index: int) -> None:
        self.session.select(index)
        self._show_selection()

    def step(self, direction: int) -> None:
        moved = (
            self.session.select_next()
            if direction > 0
            else self.session.select_previous()
        )
        if moved:
            self._show_selection()

    def reset_rotation(self) -> None:
        self._show_rotation(self.session.reset_rotation())

    def apply_rotation(self) -> Optional[Path]:
        """Write the ``.pp3.rot`` for the current image."""
        self.session.set_directories(self.window.directories())
        try:
            out = self.session.apply_rotation()
        except RotatorError as err:
            self._fail(err)
            return None
        self.window.statusBar().showMessage(f"Wrote {out.name}", 4000)
        return out

    def generate_conversion_command(self) -> None:
        self.session.set_directories(self.window.directories())
        try:
            command = self.session.conversion_command()
        except RotatorError as err:
            self._fail(err)
            return
        self.window.set_command(command)
        self.cfg.conversion_command = command


# ---------------------------------- Main --------------------------------------


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rt-rotator",
        description="Straighten previews and write rotated RawTherapee sidecars",
    )
    parser.add_argument(
        "image_dir", nargs="?", default="", help="Directory of preview images"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args, _qt_args = parser.parse_known_args(list(argv))
    return args


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.debug)
    log.info("Starting %s %s", WINDOW_TITLE, APP_VERSION)

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName("rt_rotator")
    app.setApplicationVersion(APP_VERSION)

    ctrl = MainController(app)
    if args.image_dir:
        ctrl.window.image_dir_edit.setText(args.image_dir)
        ctrl.open_image_directory()
    ctrl.show()
    ret = app.exec()

    ctrl.save_config()
    sys.exit(ret)


if __name__ == "__main__":
    main()
