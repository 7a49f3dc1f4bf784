import math
from typing import Dict, List, Optional

from PyQt5.QtCore import QEvent, QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QBrush, QColor, QPainterPath, QPen
from PyQt5.QtWidgets import QGraphicsItem, QGraphicsObject, QGraphicsPathItem, QMenu

from bst.bst_layout import NODE_HEIGHT, NODE_WIDTH, level_order, node_center
from core.base_view import BaseStructureView

PATH_COLOR = "#4fc3f7"
FOUND_COLOR = "#ff5252"
DELETE_COLOR = "#ff7043"
TRAVERSAL_COLOR = "#ffd54f"
TRAVERSAL_STEP_MS = 1000


class BSTView(BaseStructureView):
    deleteRequested = pyqtSignal(int)
    findRequested = pyqtSignal(int)
    clearRequested = pyqtSignal()
    traversalProgress = pyqtSignal(list)
    traversalFinished = pyqtSignal(bool)

    def __init__(self, global_ctrl):
        super().__init__(global_ctrl)
        self.scene.installEventFilter(self)

        self.node_items: Dict[int, BSTNodeItem] = {}
        self.edge_items: Dict[tuple, BSTEdgeItem] = {}
        self._traversal = None
        self._traversal_restore: List[tuple] = []

    # ---------- Public API ----------

    def reset(self):
        self.stop_traversal()
        self.stop_all_animations()
        self.scene.clear()
        self.node_items.clear()
        self.edge_items.clear()

    def animate_build(self, snapshot, positions):
        self.reset()
        if not snapshot["nodes"]:
            return

        sequential = self.anim.sequential()
        for node_id in level_order(snapshot):
            info = self._node_info(snapshot, node_id)
            node_item = self._create_node_item(info["id"], info["value"])
            target = _point(positions[node_id])
            node_item.setPos(QPointF(target.x(), target.y() - 160))
            node_item.setOpacity(0.0)

            drop = self.anim.move_item(node_item, target, duration=560)
            fade = self.anim.fade_item(node_item, 0.0, 1.0, duration=560)
            sequential.addAnimation(self.anim.parallel(drop, fade))

        sequential.addAnimation(self.anim.pause(140))
        self._track_animation(
            sequential,
            finalizer=lambda: self._finalize_snapshot(snapshot, positions),
        )

    def animate_insert(self, snapshot, positions, inserted_id, path_ids):
        """
        path_ids 是插入前查找经过的已有节点（根到新节点的父节点）。
        """
        info = self._node_info(snapshot, inserted_id)
        target = _point(positions[inserted_id])
        node_item = self._create_node_item(info["id"], info["value"])
        node_item.setOpacity(0.0)

        path_ids = [nid for nid in path_ids if nid in self.node_items]
        sequence = self.anim.sequential()

        if not path_ids:
            node_item.setPos(QPointF(target.x(), target.y() - 160))
            drop = self.anim.move_item(node_item, target, duration=840)
            fade = self.anim.fade_item(node_item, 0.0, 1.0, duration=840)
            sequence.addAnimation(self.anim.parallel(drop, fade))
            self._track_animation(
                sequence,
                finalizer=lambda: self._finalize_snapshot(snapshot, positions),
            )
            return

        # 新节点从根的右侧出现，沿查找路径逐层下移
        root_item = self.node_items[path_ids[0]]
        node_item.setPos(self._stage_position(root_item.pos()))
        sequence.addAnimation(self.anim.fade_item(node_item, 0.0, 1.0, duration=300))

        temp_highlights: List[EdgeFlashItem] = []
        for idx, parent_id in enumerate(path_ids):
            parent_item = self.node_items[parent_id]
            is_final = idx == len(path_ids) - 1
            if is_final:
                end_center = QPointF(*node_center(positions[inserted_id]))
            else:
                end_center = self._item_center(self.node_items[path_ids[idx + 1]])

            sequence.addAnimation(
                self.anim.flash_brush(
                    parent_item.setFillColor,
                    parent_item.fillColor,
                    QColor(PATH_COLOR),
                    duration=240,
                )
            )
            flash = self._edge_flash_animation(parent_item, end_center, temp_highlights)
            if flash:
                sequence.addAnimation(flash)

            if is_final:
                sequence.addAnimation(self.anim.move_item(node_item, target, duration=780))
            else:
                child_item = self.node_items[path_ids[idx + 1]]
                sequence.addAnimation(
                    self.anim.move_item(
                        node_item, self._stage_position(child_item.pos()), duration=630
                    )
                )

        relayout = self._animate_relayout(positions, skip_ids={inserted_id})
        if relayout:
            sequence.addAnimation(relayout)

        def _finalize():
            for item in temp_highlights:
                if item.scene():
                    self.scene.removeItem(item)
            self._finalize_snapshot(snapshot, positions)

        self._track_animation(sequence, finalizer=_finalize)

    def animate_delete(self, snapshot, positions, target_id, removed_id, path_ids):
        """
        target_id 是保存被删值的节点；removed_id 是真正摘下的节点。
        两者不同时说明发生了后继拷贝：后继节点移到目标位置后消失，
        目标节点在最终快照中换成后继的值。
        """
        target = self.node_items.get(target_id)
        removed = self.node_items.get(removed_id)
        if target is None or removed is None:
            self._finalize_snapshot(snapshot, positions)
            return

        restore_colors: List[tuple] = []
        traversal = self._build_path_flash(
            [nid for nid in path_ids if nid != target_id], restore_colors
        )
        sequence = self.anim.sequential()
        if traversal:
            sequence.addAnimation(traversal)
        sequence.addAnimation(
            self.anim.flash_brush(
                target.setFillColor,
                target.fillColor,
                QColor(DELETE_COLOR),
                duration=360,
                loops=2,
            )
        )

        if removed is not target:
            sequence.addAnimation(
                self.anim.flash_brush(
                    removed.setFillColor,
                    removed.fillColor,
                    QColor(PATH_COLOR),
                    duration=300,
                )
            )
            merge = self.anim.move_item(removed, target.pos(), duration=520)
            fade = self.anim.fade_item(removed, 1.0, 0.0, duration=520)
            sequence.addAnimation(self.anim.parallel(merge, fade))
        else:
            lift = self.anim.move_item(removed, removed.pos() + QPointF(0, -150), duration=420)
            fade = self.anim.fade_item(removed, 1.0, 0.0, duration=420)
            sequence.addAnimation(self.anim.parallel(lift, fade))

        relayout = self._animate_relayout(positions, skip_ids={removed_id})
        if relayout:
            sequence.addAnimation(relayout)

        self._track_animation(
            sequence,
            finalizer=lambda: self._finalize_with_colors(snapshot, positions, restore_colors),
        )

    def animate_find(self, snapshot, positions, found_id, path_ids):
        duration_scale = 1.0 / 0.8

        restore_colors: List[tuple] = []
        traversal_ids = list(path_ids or [])
        if found_id is not None and traversal_ids and traversal_ids[-1] == found_id:
            traversal_ids = traversal_ids[:-1]

        sequence = self.anim.sequential()
        traversal = self._build_path_flash(traversal_ids, restore_colors, duration_scale)
        if traversal:
            sequence.addAnimation(traversal)

        target = self.node_items.get(found_id) if found_id is not None else None
        if target is not None:
            original_color = QColor(target.fillColor)
            restore_colors.append((target, original_color))
            sequence.addAnimation(
                self.anim.flash_brush(
                    target.setFillColor,
                    original_color,
                    QColor(FOUND_COLOR),
                    duration=int(420 * duration_scale),
                    loops=2,
                )
            )

        self._track_animation(
            sequence,
            finalizer=lambda: self._finalize_with_colors(snapshot, positions, restore_colors),
        )

    def animate_traversal(self, node_ids, values):
        """
        依次高亮遍历序列中的节点，每一步发出 traversalProgress(已访问的值)。
        可通过 stop_traversal 中途取消。
        """
        self.stop_traversal()
        sequence = self.anim.sequential()
        self._traversal_restore = []

        for idx, node_id in enumerate(node_ids):
            item = self.node_items.get(node_id)
            if item is None:
                continue
            original = QColor(item.fillColor)
            self._traversal_restore.append((item, original))

            light = self.anim.recolor(item.setFillColor, original, TRAVERSAL_COLOR, duration=250)
            visited = list(values[: idx + 1])
            light.finished.connect(lambda visited=visited: self.traversalProgress.emit(visited))
            sequence.addAnimation(light)
            sequence.addAnimation(self.anim.pause(TRAVERSAL_STEP_MS - 450))
            sequence.addAnimation(
                self.anim.recolor(item.setFillColor, TRAVERSAL_COLOR, original, duration=200)
            )

        self._traversal = sequence

        def _finish():
            self._traversal = None
            self._restore_colors(self._traversal_restore)
            self._traversal_restore = []
            self.traversalFinished.emit(True)

        self._track_animation(sequence, finalizer=_finish)

    def stop_traversal(self) -> bool:
        if self._traversal is None:
            return False
        self.cancel_animation(self._traversal)
        self._traversal = None
        self._restore_colors(self._traversal_restore)
        self._traversal_restore = []
        self.traversalFinished.emit(False)
        return True

    @property
    def traversal_running(self) -> bool:
        return self._traversal is not None

    # ---------- Internal helpers ----------

    def _create_node_item(self, node_id, value):
        node_item = BSTNodeItem(node_id, value)
        node_item.contextDelete.connect(self.deleteRequested.emit)
        node_item.contextFind.connect(self.findRequested.emit)
        self.scene.addItem(node_item)
        self.node_items[node_id] = node_item
        return node_item

    @staticmethod
    def _node_info(snapshot, node_id):
        for node in snapshot["nodes"]:
            if node["id"] == node_id:
                return node
        raise KeyError(node_id)

    def _build_path_flash(self, path_ids, restore_store=None, duration_scale=1.0):
        if not path_ids:
            return None
        duration = int(240 * duration_scale)
        seq = self.anim.sequential()
        for node_id in path_ids:
            item = self.node_items.get(node_id)
            if not item:
                continue
            original_color = QColor(item.fillColor)
            if restore_store is not None:
                restore_store.append((item, original_color))
            seq.addAnimation(
                self.anim.flash_brush(
                    item.setFillColor,
                    original_color,
                    QColor(PATH_COLOR),
                    duration=duration,
                )
            )
        return seq

    def _animate_relayout(self, positions, skip_ids=None):
        if not positions:
            return None
        skip_ids = skip_ids or set()
        motions = [
            self.anim.move_item(item, _point(positions[node_id]), duration=480)
            for node_id, item in self.node_items.items()
            if node_id not in skip_ids and node_id in positions
        ]
        if not motions:
            return None
        return self.anim.parallel(*motions)

    @staticmethod
    def _restore_colors(restore_colors):
        for item, color in restore_colors:
            if item and item.scene():
                item.setFillColor(color)

    def _finalize_with_colors(self, snapshot, positions, restore_colors):
        self._restore_colors(restore_colors)
        self._finalize_snapshot(snapshot, positions)

    def _finalize_snapshot(self, snapshot, positions):
        keep_ids = {node["id"] for node in snapshot["nodes"]}
        for node_id in list(self.node_items.keys()):
            if node_id not in keep_ids:
                item = self.node_items.pop(node_id)
                if item.scene():
                    self.scene.removeItem(item)

        for info in snapshot["nodes"]:
            node_item = self.node_items.get(info["id"])
            if not node_item:
                node_item = self._create_node_item(info["id"], info["value"])
            node_item.setOpacity(1.0)
            node_item.set_value(info["value"])
            if info["id"] in positions:
                node_item.setPos(_point(positions[info["id"]]))

        self._rebuild_edges(snapshot)
        self.auto_fit_view()

    def _rebuild_edges(self, snapshot):
        for edge in list(self.edge_items.values()):
            self.scene.removeItem(edge)
        self.edge_items.clear()

        for info in snapshot["nodes"]:
            parent_item = self.node_items.get(info["id"])
            for child_key in ("left", "right"):
                child_item = self.node_items.get(info[child_key])
                if not parent_item or not child_item:
                    continue
                edge = BSTEdgeItem(parent_item, child_item)
                self.scene.addItem(edge)
                self.edge_items[(info["id"], info[child_key])] = edge

    @staticmethod
    def _stage_position(base_pos: QPointF):
        return QPointF(base_pos.x() + NODE_WIDTH + 26, base_pos.y())

    @staticmethod
    def _item_center(node_item: "BSTNodeItem"):
        pos = node_item.pos()
        return QPointF(pos.x() + NODE_WIDTH / 2, pos.y() + NODE_HEIGHT / 2)

    def _edge_flash_animation(self, parent_item, end_center, storage):
        start = self._item_center(parent_item)
        path = _inset_line(start, end_center, NODE_WIDTH / 2)
        if path is None:
            return None
        highlight = EdgeFlashItem(path)
        self.scene.addItem(highlight)
        storage.append(highlight)
        return self.anim.sequential(
            self.anim.fade_item(highlight, 0.0, 1.0, duration=240),
            self.anim.fade_item(highlight, 1.0, 0.0, duration=240),
        )

    def _show_background_menu(self, screen_pos):
        if isinstance(screen_pos, QPointF):
            screen_pos = screen_pos.toPoint()
        menu = QMenu()
        clear_action = menu.addAction("Clear Tree")
        if menu.exec_(screen_pos) == clear_action:
            self.clearRequested.emit()

    def eventFilter(self, watched, event):
        if watched is self.scene and event.type() == QEvent.GraphicsSceneContextMenu:
            item = self.scene.itemAt(
                event.scenePos(),
                self._canvas.transform() if self._canvas else None,
            )
            if item is None and not self.is_animating:
                self._show_background_menu(event.screenPos())
                event.accept()
                return True
        return super().eventFilter(watched, event)


def _point(position) -> QPointF:
    return QPointF(position[0], position[1])


def _inset_line(start: QPointF, end: QPointF, inset: float) -> Optional[QPainterPath]:
    direction = end - start
    length = math.hypot(direction.x(), direction.y())
    if length < 1e-3:
        return None
    ux = direction.x() / length
    uy = direction.y() / length
    path = QPainterPath(start + QPointF(ux * inset, uy * inset))
    path.lineTo(end - QPointF(ux * inset, uy * inset))
    return path


class BSTNodeItem(QGraphicsObject):
    contextDelete = pyqtSignal(int)
    contextFind = pyqtSignal(int)
    positionChanged = pyqtSignal()

    width = NODE_WIDTH
    height = NODE_HEIGHT

    def __init__(self, node_id, value):
        super().__init__()
        self.node_id = node_id
        self._value = str(value)
        self.fillColor = QColor("#e9e9ef")
        self.strokeColor = QColor("#4a4a52")
        self.textColor = QColor("#1f1f24")
        self.setZValue(2)
        self.setFlag(QGraphicsItem.ItemIsSelectable, True)
        self.setFlag(QGraphicsItem.ItemSendsGeometryChanges, True)

    def boundingRect(self):
        return QRectF(0, 0, self.width, self.height)

    def paint(self, painter, option, widget=None):
        painter.setRenderHint(painter.Antialiasing)
        painter.setPen(QPen(self.strokeColor, 2))
        painter.setBrush(QBrush(self.fillColor))
        painter.drawEllipse(self.boundingRect())

        painter.setPen(self.textColor)
        painter.drawText(self.boundingRect(), Qt.AlignCenter, self._value)

    def set_value(self, value):
        self._value = str(value)
        self.update()

    def setFillColor(self, color: QColor):
        self.fillColor = QColor(color)
        self.update()

    def contextMenuEvent(self, event):
        menu = QMenu()
        delete_action = menu.addAction("Delete Node")
        find_action = menu.addAction("Find Node")
        chosen = menu.exec_(event.screenPos())
        if chosen == delete_action:
            self.contextDelete.emit(self.node_id)
        elif chosen == find_action:
            self.contextFind.emit(self.node_id)

    def itemChange(self, change, value):
        if change == QGraphicsItem.ItemPositionHasChanged:
            self.positionChanged.emit()
        return super().itemChange(change, value)


class BSTEdgeItem(QGraphicsPathItem):
    def __init__(self, parent_item: BSTNodeItem, child_item: BSTNodeItem):
        super().__init__()
        self.parent_item = parent_item
        self.child_item = child_item

        pen = QPen(QColor("#9e9e9e"), 2)
        pen.setCapStyle(Qt.RoundCap)
        self.setPen(pen)
        self.setZValue(1)

        self.parent_item.positionChanged.connect(self.update_geometry)
        self.child_item.positionChanged.connect(self.update_geometry)
        self.update_geometry()

    def update_geometry(self):
        start = BSTView._item_center(self.parent_item)
        end = BSTView._item_center(self.child_item)
        self.setPath(_inset_line(start, end, NODE_WIDTH / 2) or QPainterPath(start))


class EdgeFlashItem(QGraphicsObject):
    def __init__(self, path: QPainterPath):
        super().__init__()
        self._path = QPainterPath(path)
        self._pen = QPen(QColor("#ff4d4d"), 5)
        self._pen.setCapStyle(Qt.RoundCap)
        self.setOpacity(0.0)
        self.setZValue(1.5)
        self.setAcceptedMouseButtons(Qt.NoButton)

    def boundingRect(self):
        pad = self._pen.widthF()
        return self._path.boundingRect().adjusted(-pad, -pad, pad, pad)

    def paint(self, painter, option, widget=None):
        painter.setRenderHint(painter.Antialiasing)
        painter.setPen(self._pen)
        painter.drawPath(self._path)
