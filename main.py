# -*- coding: utf-8 -*-
"""
Photostamp editor
Place a logo, a date stamp and annotations on a batch of photos, preview
them and export the batch.
"""

# standard library
import sys
import asyncio
import logging
from dataclasses import replace
from pathlib import Path

# third party
from PySide6.QtWidgets import (
    QApplication, QWidget, QPushButton, QLabel, QListWidget, QListWidgetItem,
    QHBoxLayout, QVBoxLayout, QFileDialog, QSlider, QLineEdit, QComboBox,
    QMessageBox, QSpinBox, QColorDialog, QInputDialog, QGroupBox, QFrame,
    QScrollArea, QSplitter, QButtonGroup,
)
from PySide6.QtGui import QColor, QPainter, Qt
from PySide6.QtCore import QSize, QThread, Signal

# local modules
from photostamp.batch_worker import BatchExporter, DirectorySink
from photostamp.config import (
    APP_NAME, FONT_FAMILIES, EXPORT_SIZES, LOGO_SCALE_RANGE, LOGO_OPACITY_RANGE,
    DATE_SCALE_RANGE, DATE_OPACITY_RANGE, QUALITY_RANGE, DEFAULT_EXPORT_QUALITY, EXPORT_FORMATS,
    DEFAULT_DATE_FORMAT,
)
from photostamp.image_io import DecodeError, generate_thumbnail, is_image_file, load_logo_asset
from photostamp.models import ExportSettings
from photostamp.placement import LOGO, DATE
from photostamp.pipeline import LAYER_LOGO
from photostamp.logos import LogoLibrary, LogoLibraryManager
from photostamp.presets import JsonPresetStore, PresetManager
from photostamp.qt_surface import PixmapCache, QtPainterSurface, pil_to_qpixmap
from photostamp.session import EditorSession

logger = logging.getLogger("photostamp")

TOOL_LABELS = [("box", "▭ Box"), ("dashed-box", "┅ Dashed"), ("arrow", "➜ Arrow"), ("text", "T Text")]


class ExportWorker(QThread):
    """
    Background export thread.

    Runs the batch coroutine so the UI thread stays responsive.

    Signals:
        progress: (done, total, message)
        finished_signal: the ExportSummary, None when the export failed
    """
    progress = Signal(int, int, str)
    finished_signal = Signal(object)

    def __init__(self, exporter):
        super().__init__()
        self.exporter = exporter
        self.exporter.progress_callback = self._on_progress

    def _on_progress(self, idx, total, success, message):
        self.progress.emit(idx, total, message)

    def run(self):
        summary = None
        try:
            summary = asyncio.run(self.exporter.run())
        except Exception:
            logger.exception("export failed")
        finally:
            # the window re-enables the export button on this signal
            self.finished_signal.emit(summary)


class PreviewCanvas(QWidget):
    """
    Interactive preview of the current image.

    Paints the session's preview frame and turns mouse events into
    annotation gestures, selection clicks and logo/date drags.
    """
    changed = Signal()

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.cache = PixmapCache()
        self.frame = None
        self.view_scale = 1.0
        self.origin = (0.0, 0.0)
        self._drag = None   # (layer, press point, op origin)
        self.setMouseTracking(True)
        self.setMinimumSize(400, 300)

    def _layout(self):
        entry = self.session.current_image
        if entry is None:
            return
        self.view_scale = self.session.view_scale(self.width(), self.height())
        w = entry.width * self.view_scale
        h = entry.height * self.view_scale
        self.origin = ((self.width() - w) / 2, (self.height() - h) / 2)

    def _local(self, event):
        pos = event.position()
        return pos.x() - self.origin[0], pos.y() - self.origin[1]

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#ecf0f1"))
        entry = self.session.current_image
        if entry is None:
            painter.setPen(QColor("#7f8c8d"))
            painter.drawText(self.rect(), Qt.AlignCenter, "Select an image")
            painter.end()
            return
        self._layout()
        self.frame = self.session.preview_frame(self.view_scale)
        QtPainterSurface(painter, self.cache).draw(self.frame, self.origin)
        painter.end()

    def mousePressEvent(self, event):
        entry = self.session.current_image
        if entry is None or event.button() != Qt.LeftButton:
            return
        point = self._local(event)
        engine = self.session.annotations
        transform = self.session.surface_transform(self.view_scale)

        if engine.tool is None:
            hit = engine.pick(entry.id, point, transform)
            if hit is not None:
                engine.select(hit.id)
                ox, oy = transform.to_surface(hit.position)
                self._drag = ("annotation", point, (ox, oy))
                self.changed.emit()
                self.update()
                return
            op = self.frame.hit_overlay(point) if self.frame is not None else None
            if op is not None:
                layer = LOGO if op.layer == LAYER_LOGO else DATE
                self._drag = (layer, point, (op.x, op.y))
                return

        engine.pointer_down(entry.id, point, transform)
        self.changed.emit()
        self.update()

    def mouseMoveEvent(self, event):
        entry = self.session.current_image
        if entry is None:
            return
        point = self._local(event)
        if self._drag is not None:
            self._drag_to(entry, point)
        else:
            self.session.annotations.pointer_move(point, self.session.surface_transform(self.view_scale))
        self.update()

    def mouseReleaseEvent(self, event):
        entry = self.session.current_image
        if entry is None or event.button() != Qt.LeftButton:
            return
        point = self._local(event)
        if self._drag is not None:
            self._drag_to(entry, point)
            self._drag = None
        else:
            self.session.annotations.pointer_up(point, self.session.surface_transform(self.view_scale))
        self.changed.emit()
        self.update()

    def _drag_to(self, entry, point):
        layer, press, (ox, oy) = self._drag
        raw = (ox + point[0] - press[0], oy + point[1] - press[1])
        if layer == "annotation":
            self.session.annotations.drag_end(
                entry.id, self.session.annotations.selected_id, raw,
                self.session.surface_transform(self.view_scale))
        else:
            self.session.placement.drag_end(layer, raw, self.view_scale, entry)


class MainWindow(QWidget):
    """
    Editor main window.

    Image list on the left, preview in the center, logo/date/annotation,
    preset and export controls on the right.
    """
    def __init__(self):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(1400, 800)

        self.session = EditorSession()
        self.session.annotations.text_prompt = self.prompt_text
        self.session.presets = PresetManager(JsonPresetStore(), self.session.placement)
        self.session.logos = LogoLibraryManager(LogoLibrary(), self.session.placement)

        self.thumb_size = 120
        self.output_dir = None
        self.worker = None

        self.setup_ui()
        self.setAcceptDrops(True)
        self.refresh_presets()
        self.refresh_logos()

    def setup_ui(self):
        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self.create_left_panel())
        splitter.addWidget(self.create_center_panel())
        splitter.addWidget(self.create_right_panel())
        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 5)
        splitter.setStretchFactor(2, 3)

        main_layout = QVBoxLayout(self)
        main_layout.addWidget(splitter)
        main_layout.setContentsMargins(10, 10, 10, 10)

    def create_left_panel(self):
        panel = QWidget()
        layout = QVBoxLayout(panel)

        import_btn = QPushButton("➕ Import images / folder")
        import_btn.clicked.connect(self.on_import)
        layout.addWidget(import_btn)

        self.list_widget = QListWidget()
        self.list_widget.setIconSize(QSize(self.thumb_size, self.thumb_size))
        self.list_widget.itemClicked.connect(self.on_thumb_clicked)
        layout.addWidget(self.list_widget)

        remove_btn = QPushButton("🗑️ Remove image")
        remove_btn.clicked.connect(self.on_remove_image)
        layout.addWidget(remove_btn)
        return panel

    def create_center_panel(self):
        panel = QWidget()
        layout = QVBoxLayout(panel)
        self.canvas = PreviewCanvas(self.session)
        layout.addWidget(self.canvas)

        hint = QLabel("💡 Drag files onto the window to import | drag the logo and date to move them")
        hint.setAlignment(Qt.AlignCenter)
        layout.addWidget(hint)
        layout.addWidget(self.create_annotation_group())
        return panel

    def create_right_panel(self):
        panel = QWidget()
        scroll = QScrollArea()
        scroll.setWidget(panel)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)

        layout = QVBoxLayout(panel)
        layout.setSpacing(15)
        layout.addWidget(self.create_preset_group())
        layout.addWidget(self.create_logo_group())
        layout.addWidget(self.create_date_group())
        layout.addWidget(self.create_export_group())
        layout.addStretch()
        return scroll

    def _slider(self, lo, hi, value, on_change):
        """Percent slider mapped onto a float range."""
        slider = QSlider(Qt.Horizontal)
        slider.setRange(int(lo * 100), int(hi * 100))
        slider.setValue(int(value * 100))
        slider.valueChanged.connect(lambda v: on_change(v / 100))
        return slider

    def create_logo_group(self):
        group = QGroupBox("🖼️ Logo")
        layout = QVBoxLayout()
        placement = self.session.placement

        btn_layout = QHBoxLayout()
        select_btn = QPushButton("📁 Select logo")
        select_btn.clicked.connect(self.select_logo_file)
        btn_layout.addWidget(select_btn)
        remove_btn = QPushButton("Remove")
        remove_btn.clicked.connect(self.remove_logo)
        btn_layout.addWidget(remove_btn)
        layout.addLayout(btn_layout)

        self.logo_label = QLabel("No logo")
        layout.addWidget(self.logo_label)

        layout.addWidget(QLabel("Library"))
        self.logo_combo = QComboBox()
        layout.addWidget(self.logo_combo)
        lib_layout = QHBoxLayout()
        for label, slot in (("Use", self.use_library_logo),
                            ("➕ Add", self.add_library_logo),
                            ("🗑️ Delete", self.delete_library_logo)):
            btn = QPushButton(label)
            btn.clicked.connect(slot)
            lib_layout.addWidget(btn)
        layout.addLayout(lib_layout)

        layout.addWidget(QLabel("Size (fraction of image width)"))
        self.logo_scale_slider = self._slider(*LOGO_SCALE_RANGE, placement.logo.scale,
                                              lambda v: self._set(placement.set_logo_scale, v))
        layout.addWidget(self.logo_scale_slider)

        layout.addWidget(QLabel("Opacity"))
        self.logo_opacity_slider = self._slider(*LOGO_OPACITY_RANGE, placement.logo.opacity,
                                                lambda v: self._set(placement.set_logo_opacity, v))
        layout.addWidget(self.logo_opacity_slider)

        group.setLayout(layout)
        return group

    def create_date_group(self):
        group = QGroupBox("📅 Date stamp")
        layout = QVBoxLayout()
        placement = self.session.placement

        self.date_input = QLineEdit(placement.date.text)
        self.date_input.setPlaceholderText(DEFAULT_DATE_FORMAT)
        self.date_input.textChanged.connect(lambda t: self._set(placement.set_date_text, t))
        layout.addWidget(self.date_input)

        self.font_combo = QComboBox()
        self.font_combo.addItems(FONT_FAMILIES)
        self.font_combo.setCurrentText(placement.date.font.family)
        self.font_combo.currentTextChanged.connect(
            lambda f: self._set(lambda v: placement.set_font(family=v), f))
        layout.addWidget(self.font_combo)

        self.color_btn = QPushButton(placement.date.font.color)
        self.color_btn.clicked.connect(self.choose_color)
        layout.addWidget(self.color_btn)

        layout.addWidget(QLabel("Size"))
        self.date_scale_slider = self._slider(*DATE_SCALE_RANGE, placement.date.scale,
                                              lambda v: self._set(placement.set_date_scale, v))
        layout.addWidget(self.date_scale_slider)

        layout.addWidget(QLabel("Opacity"))
        self.date_opacity_slider = self._slider(*DATE_OPACITY_RANGE, placement.date.opacity,
                                                lambda v: self._set(placement.set_date_opacity, v))
        layout.addWidget(self.date_opacity_slider)

        group.setLayout(layout)
        return group

    def create_annotation_group(self):
        group = QGroupBox("✏️ Annotations")
        layout = QHBoxLayout()
        self.tool_buttons = QButtonGroup(self)
        self.tool_buttons.setExclusive(False)
        for tool, label in TOOL_LABELS:
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.setProperty("tool", tool)
            self.tool_buttons.addButton(btn)
            layout.addWidget(btn)
        self.tool_buttons.buttonClicked.connect(self.on_tool_clicked)

        layout.addWidget(QLabel("Thickness"))
        self.thickness_spin = QSpinBox()
        self.thickness_spin.setRange(1, 20)
        self.thickness_spin.setValue(int(self.session.annotations.tool_settings.thickness))
        self.thickness_spin.valueChanged.connect(self.on_tool_style_changed)
        layout.addWidget(self.thickness_spin)

        layout.addWidget(QLabel("Radius"))
        self.radius_spin = QSpinBox()
        self.radius_spin.setRange(0, 100)
        self.radius_spin.valueChanged.connect(self.on_tool_style_changed)
        layout.addWidget(self.radius_spin)

        delete_btn = QPushButton("Delete selected")
        delete_btn.clicked.connect(self.delete_selected_annotation)
        layout.addWidget(delete_btn)

        for label, slot in (("Save…", self.save_annotations), ("Load…", self.load_annotations)):
            btn = QPushButton(label)
            btn.clicked.connect(slot)
            layout.addWidget(btn)

        self.canvas.changed.connect(self.sync_tool_buttons)
        group.setLayout(layout)
        return group

    def create_preset_group(self):
        group = QGroupBox("💾 Presets")
        layout = QVBoxLayout()
        self.preset_combo = QComboBox()
        layout.addWidget(self.preset_combo)

        btn_layout = QHBoxLayout()
        for label, slot in (("📂 Apply", self.apply_selected_preset),
                            ("💾 Save", self.save_current_as_preset),
                            ("🗑️ Delete", self.delete_selected_preset)):
            btn = QPushButton(label)
            btn.clicked.connect(slot)
            btn_layout.addWidget(btn)
        layout.addLayout(btn_layout)
        group.setLayout(layout)
        return group

    def create_export_group(self):
        group = QGroupBox("💾 Export")
        layout = QVBoxLayout()

        self.output_dir_btn = QPushButton("📁 Select output folder")
        self.output_dir_btn.clicked.connect(self.select_output_dir)
        layout.addWidget(self.output_dir_btn)
        self.output_dir_label = QLabel("Not selected")
        self.output_dir_label.setWordWrap(True)
        layout.addWidget(self.output_dir_label)

        self.format_combo = QComboBox()
        self.format_combo.addItems(list(EXPORT_FORMATS))
        layout.addWidget(self.format_combo)

        self.size_combo = QComboBox()
        self.size_combo.addItems(EXPORT_SIZES)
        layout.addWidget(self.size_combo)

        quality_layout = QHBoxLayout()
        quality_layout.addWidget(QLabel("Quality:"))
        self.quality_spin = QSpinBox()
        self.quality_spin.setRange(*QUALITY_RANGE)
        self.quality_spin.setSingleStep(5)
        self.quality_spin.setValue(DEFAULT_EXPORT_QUALITY)
        quality_layout.addWidget(self.quality_spin)
        layout.addLayout(quality_layout)

        self.suffix_input = QLineEdit("_wm")
        self.suffix_input.setPlaceholderText("filename suffix")
        layout.addWidget(self.suffix_input)

        self.export_btn = QPushButton("✅ Export all")
        self.export_btn.setMinimumHeight(40)
        self.export_btn.clicked.connect(self.on_export)
        layout.addWidget(self.export_btn)

        group.setLayout(layout)
        return group

    # --- state changes ---
    def _set(self, setter, value):
        setter(value)
        self.canvas.update()

    def prompt_text(self):
        text, ok = QInputDialog.getText(self, "Text annotation", "Enter text:")
        return text if ok else None

    def on_tool_clicked(self, button):
        tool = button.property("tool") if button.isChecked() else None
        self.session.annotations.set_tool(tool)
        self.sync_tool_buttons()

    def sync_tool_buttons(self):
        active = self.session.annotations.tool
        for btn in self.tool_buttons.buttons():
            btn.setChecked(btn.property("tool") == active)
        self.canvas.setCursor(Qt.CrossCursor if active else Qt.ArrowCursor)

    def on_tool_style_changed(self):
        engine = self.session.annotations
        engine.tool_settings = replace(engine.tool_settings,
                                       thickness=self.thickness_spin.value(),
                                       corner_radius=self.radius_spin.value())

    def delete_selected_annotation(self):
        engine = self.session.annotations
        if self.session.current_id and engine.selected_id:
            engine.remove_annotation(self.session.current_id, engine.selected_id)
            self.canvas.update()

    def save_annotations(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save annotations", "annotations.json", "JSON (*.json)")
        if not path:
            return
        try:
            self.session.save_annotations(path)
        except OSError as e:
            QMessageBox.warning(self, "Annotations", str(e))

    def load_annotations(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load annotations", "", "JSON (*.json)")
        if not path:
            return
        try:
            count = self.session.load_annotations(path)
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Annotations", str(e))
            return
        logger.info("loaded %d annotation(s) from %s", count, path)
        self.canvas.update()

    def select_logo_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select logo", "", "Images (*.png *.jpg *.jpeg)")
        if not path:
            return
        try:
            asset = load_logo_asset(path)
        except DecodeError as e:
            QMessageBox.warning(self, "Logo", str(e))
            return
        self.session.placement.set_logo_asset(asset)
        self.session.logos.selected_id = None
        self.canvas.cache.clear()
        self.logo_label.setText(asset.name)
        self.canvas.update()

    def remove_logo(self):
        self.session.logos.clear_selection()
        self.canvas.cache.clear()
        self.logo_label.setText("No logo")
        self.canvas.update()

    # --- logo library ---
    def refresh_logos(self):
        manager = self.session.logos
        if not manager.fetch():
            QMessageBox.warning(self, "Logo library", manager.error)
        self.logo_combo.clear()
        for logo in manager.logos:
            self.logo_combo.addItem(logo.get("name", "logo"), logo.get("id"))
            if logo.get("isActive"):
                self.logo_combo.setCurrentIndex(self.logo_combo.count() - 1)

    def add_library_logo(self):
        path, _ = QFileDialog.getOpenFileName(self, "Add logo", "", "Images (*.png *.jpg *.jpeg)")
        if not path:
            return
        manager = self.session.logos
        if not manager.upload(path):
            QMessageBox.warning(self, "Logo library", manager.error)
            return
        self.refresh_logos()

    def use_library_logo(self):
        logo_id = self.logo_combo.currentData()
        if logo_id is None:
            return
        manager = self.session.logos
        if not manager.select(logo_id):
            QMessageBox.warning(self, "Logo library", manager.error)
            return
        self.canvas.cache.clear()
        self.logo_label.setText(self.session.placement.logo.asset.name)
        self.canvas.update()

    def delete_library_logo(self):
        logo_id = self.logo_combo.currentData()
        if logo_id is None:
            return
        manager = self.session.logos
        was_selected = manager.selected_id == logo_id
        if not manager.delete(logo_id):
            QMessageBox.warning(self, "Logo library", manager.error)
        elif was_selected:
            self.canvas.cache.clear()
            self.logo_label.setText("No logo")
            self.canvas.update()
        self.refresh_logos()

    def choose_color(self):
        color = QColorDialog.getColor(QColor(self.session.placement.date.font.color), self, "Date color")
        if color.isValid():
            hex_code = color.name().upper()
            self.session.placement.set_font(color=hex_code)
            self.color_btn.setText(hex_code)
            self.canvas.update()

    def sync_controls(self):
        """Push store values back into the widgets after a preset is applied."""
        placement = self.session.placement
        for widget, value in ((self.logo_scale_slider, placement.logo.scale),
                              (self.logo_opacity_slider, placement.logo.opacity),
                              (self.date_scale_slider, placement.date.scale),
                              (self.date_opacity_slider, placement.date.opacity)):
            widget.blockSignals(True)
            widget.setValue(int(round(value * 100)))
            widget.blockSignals(False)
        self.date_input.blockSignals(True)
        self.date_input.setText(placement.date.text)
        self.date_input.blockSignals(False)
        self.font_combo.blockSignals(True)
        self.font_combo.setCurrentText(placement.date.font.family)
        self.font_combo.blockSignals(False)
        self.color_btn.setText(placement.date.font.color)
        self.canvas.update()

    # --- presets ---
    def refresh_presets(self):
        manager = self.session.presets
        if not manager.fetch():
            QMessageBox.warning(self, "Presets", manager.error)
        self.preset_combo.clear()
        for p in manager.presets:
            self.preset_combo.addItem(p.get("name", "custom"), p.get("id"))

    def save_current_as_preset(self):
        name, ok = QInputDialog.getText(self, "Save preset", "Preset name:")
        if not ok or not name:
            return
        manager = self.session.presets
        if not manager.save_current(name):
            QMessageBox.warning(self, "Presets", manager.error)
            return
        self.refresh_presets()
        self.preset_combo.setCurrentIndex(self.preset_combo.findData(manager.selected_id))

    def apply_selected_preset(self):
        preset_id = self.preset_combo.currentData()
        if preset_id is None:
            return
        manager = self.session.presets
        if not manager.apply(preset_id):
            QMessageBox.warning(self, "Presets", manager.error)
            return
        self.sync_controls()

    def delete_selected_preset(self):
        preset_id = self.preset_combo.currentData()
        if preset_id is None:
            return
        manager = self.session.presets
        if not manager.delete(preset_id):
            QMessageBox.warning(self, "Presets", manager.error)
        self.refresh_presets()

    # --- images ---
    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        paths = [u.toLocalFile() for u in event.mimeData().urls()]
        self.add_paths(paths)

    def on_import(self):
        dlg = QFileDialog(self, "Select images or a folder")
        dlg.setFileMode(QFileDialog.ExistingFiles)
        dlg.setNameFilters(["Images (*.png *.jpg *.jpeg *.bmp *.tif *.tiff)"])
        if dlg.exec():
            self.add_paths(dlg.selectedFiles())

    def add_paths(self, paths):
        for entry in self.session.add_paths([p for p in paths if Path(p).is_dir() or is_image_file(p)]):
            self.add_thumbnail_item(entry)
        self.canvas.update()

    def add_thumbnail_item(self, entry):
        thumb = generate_thumbnail(entry.source, max_size=self.thumb_size)
        item = QListWidgetItem(entry.name)
        item.setData(Qt.UserRole, entry.id)
        item.setIcon(pil_to_qpixmap(thumb))
        self.list_widget.addItem(item)

    def on_thumb_clicked(self, item):
        self.session.select_image(item.data(Qt.UserRole))
        self.canvas.update()

    def on_remove_image(self):
        item = self.list_widget.currentItem()
        if item is None:
            return
        self.session.remove_image(item.data(Qt.UserRole))
        self.list_widget.takeItem(self.list_widget.row(item))
        self.canvas.cache.clear()
        self.canvas.update()

    # --- export ---
    def select_output_dir(self):
        d = QFileDialog.getExistingDirectory(self, "Select output folder")
        if d:
            self.output_dir = d
            self.output_dir_label.setText(d)

    def on_export(self):
        if not self.session.images:
            QMessageBox.warning(self, "Export", "Import at least one image")
            return
        if not self.output_dir:
            QMessageBox.warning(self, "Export", "Select an output folder")
            return
        settings = ExportSettings(
            suffix=self.suffix_input.text(),
            format=self.format_combo.currentText(),
            quality=self.quality_spin.value(),
            size=self.size_combo.currentText(),
        )
        exporter = BatchExporter.from_session(self.session, settings, DirectorySink(self.output_dir))
        self.export_btn.setEnabled(False)
        self.worker = ExportWorker(exporter)
        self.worker.progress.connect(self.on_export_progress)
        self.worker.finished_signal.connect(self.on_export_finished)
        self.worker.start()

    def on_export_progress(self, done, total, message):
        logger.info("[%d/%d] %s", done, total, message)
        self.export_btn.setText(f"[{done}/{total}] {message}")

    def on_export_finished(self, summary):
        self.export_btn.setEnabled(True)
        self.export_btn.setText("✅ Export all")
        if summary is None:
            QMessageBox.warning(self, "Export failed", "The export stopped with an error, see the log.")
            return
        lines = [f"{len(summary.written)} image(s) exported."]
        lines += [f"Skipped {name}: {reason}" for name, reason in summary.skipped]
        QMessageBox.information(self, "Export finished", "\n".join(lines))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    w = MainWindow()
    w.show()
    sys.exit(app.exec())
