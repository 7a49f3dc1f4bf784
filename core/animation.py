from PyQt5.QtCore import (
    QEasingCurve,
    QParallelAnimationGroup,
    QPropertyAnimation,
    QSequentialAnimationGroup,
    QVariantAnimation,
)
from PyQt5.QtGui import QColor


class AnimationToolkit:
    """
    Factory for the scene animations. Every duration passes through the
    global speed multiplier.
    """

    def __init__(self, global_ctrl):
        self.global_ctrl = global_ctrl

    def _duration(self, base_ms):
        return self.global_ctrl.scale_duration(base_ms)

    def move_item(self, item, end_pos, duration=800, easing=QEasingCurve.InOutCubic):
        anim = QPropertyAnimation(item, b"pos")
        anim.setDuration(self._duration(duration))
        anim.setEndValue(end_pos)
        anim.setEasingCurve(easing)
        return anim

    def fade_item(self, item, start=0.0, end=1.0, duration=800):
        anim = QPropertyAnimation(item, b"opacity")
        anim.setDuration(self._duration(duration))
        anim.setStartValue(start)
        anim.setEndValue(end)
        anim.setEasingCurve(QEasingCurve.InOutQuad)
        return anim

    def recolor(self, setter, start_color, end_color, duration=300):
        """
        One-way colour transition; setter receives QColor
        (e.g. node.setFillColor).
        """
        anim = QVariantAnimation()
        anim.setDuration(self._duration(duration))
        anim.setStartValue(QColor(start_color))
        anim.setEndValue(QColor(end_color))
        anim.setEasingCurve(QEasingCurve.InOutQuad)

        def _update(value):
            if isinstance(value, QColor):
                setter(value)

        anim.valueChanged.connect(_update)
        return anim

    def flash_brush(self, setter, start_color, end_color, duration=400, loops=1):
        """Colour goes to end_color and back, `loops` times."""
        seq = QSequentialAnimationGroup()
        for _ in range(max(1, loops)):
            seq.addAnimation(self.recolor(setter, start_color, end_color, duration))
            seq.addAnimation(self.recolor(setter, end_color, start_color, duration))
        return seq

    def pause(self, duration=150):
        pause = QVariantAnimation()
        pause.setDuration(self._duration(duration))
        pause.setStartValue(0)
        pause.setEndValue(0)
        return pause

    @staticmethod
    def parallel(*animations):
        group = QParallelAnimationGroup()
        for anim in animations:
            if anim:
                group.addAnimation(anim)
        return group

    @staticmethod
    def sequential(*animations):
        group = QSequentialAnimationGroup()
        for anim in animations:
            if anim:
                group.addAnimation(anim)
        return group
