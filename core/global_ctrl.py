from PyQt5.QtCore import QObject, pyqtSignal

MIN_SPEED = 0.5
MAX_SPEED = 3.0


class GlobalController(QObject):
    """
    Holds the global playback speed and emits changes so that every
    animation can adjust its duration consistently.
    """

    speedChanged = pyqtSignal(float)

    def __init__(self, speed: float = 1.0):
        super().__init__()
        self._speed = max(MIN_SPEED, min(MAX_SPEED, speed))

    @property
    def speed(self) -> float:
        return self._speed

    def set_speed(self, value: float):
        """Clamp and broadcast the speed multiplier."""
        value = max(MIN_SPEED, min(MAX_SPEED, value))
        if abs(value - self._speed) > 1e-3:
            self._speed = value
            self.speedChanged.emit(self._speed)

    def scale_duration(self, base_ms: int) -> int:
        """Higher speed → shorter duration."""
        return max(1, int(base_ms / self._speed))
