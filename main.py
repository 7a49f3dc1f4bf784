import logging
import sys
from pathlib import Path

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QSlider,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from bst.bst_ctrl import BSTController
from core.global_ctrl import GlobalController
from widgets.graphics_view import CustomGraphicsView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window with left (visualization) and right (notes) panels."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Binary Search Tree Visualizer")
        self.resize(1280, 760)

        self.global_ctrl = GlobalController()
        self.bst_ctrl = BSTController(self.global_ctrl)

        self._build_ui()
        self.speed_slider.valueChanged.connect(self._on_speed_slider_changed)
        self.bst_ctrl.on_activate(self.graphics_view)

        style_path = Path(__file__).parent / "resources" / "styles.qss"
        if style_path.exists():
            with open(style_path, "r", encoding="utf-8") as handle:
                self.setStyleSheet(handle.read())
            logger.info("loaded style sheet %s", style_path)

    def _build_ui(self):
        central = QWidget(self)
        self.setCentralWidget(central)

        root_layout = QHBoxLayout(central)
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(8)

        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.setSpacing(6)

        self.graphics_view = CustomGraphicsView()
        left_layout.addWidget(self.graphics_view, 1)

        speed_layout = QHBoxLayout()
        speed_label = QLabel("Animation Speed")
        self.speed_value_label = QLabel("1.0×")
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(50, 300)  # 0.5x – 3x
        self.speed_slider.setValue(100)
        speed_layout.addWidget(speed_label)
        speed_layout.addWidget(self.speed_slider, 1)
        speed_layout.addWidget(self.speed_value_label)
        left_layout.addLayout(speed_layout)

        left_layout.addWidget(self.bst_ctrl.build_panel(), 0)

        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)
        right_layout.setContentsMargins(0, 0, 0, 0)
        note_label = QLabel("Notes")
        self.editor = QTextEdit()
        self.editor.setPlaceholderText(
            "Shortcuts: I / P / T run a traversal, S or Esc stops it, "
            "R builds a random tree, C clears."
        )
        right_layout.addWidget(note_label)
        right_layout.addWidget(self.editor, 1)

        root_layout.addWidget(left_panel, 14)
        root_layout.addWidget(right_panel, 6)

    def _on_speed_slider_changed(self, value):
        speed = value / 100.0
        self.speed_value_label.setText(f"{speed:.1f}×")
        self.global_ctrl.set_speed(speed)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    window = MainWindow()
    window.showMaximized()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
