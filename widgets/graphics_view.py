from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPainter, QWheelEvent
from PyQt5.QtWidgets import QGraphicsView

MIN_ZOOM = 0.05
MAX_ZOOM = 4.0


class CustomGraphicsView(QGraphicsView):
    """
    Canvas for the tree scene:
    - normal wheel: vertical panning only
    - Ctrl + wheel: zoom with factor 1.1, clamped to [MIN_ZOOM, MAX_ZOOM]
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setRenderHints(QPainter.Antialiasing | QPainter.TextAntialiasing)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setViewportUpdateMode(QGraphicsView.FullViewportUpdate)
        self.setFocusPolicy(Qt.StrongFocus)

    def wheelEvent(self, event: QWheelEvent):
        delta = event.angleDelta().y()
        if event.modifiers() & Qt.ControlModifier:
            factor = 1.1 if delta > 0 else (1 / 1.1)
            zoom = self.transform().m11() * factor
            if MIN_ZOOM <= zoom <= MAX_ZOOM:
                self.scale(factor, factor)
        else:
            self.translate(0, -delta * 0.2)
        event.accept()
