import logging
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QPushButton,
    QShortcut,
    QVBoxLayout,
    QWidget,
)
from PyQt5.QtGui import QKeySequence

from core.global_ctrl import GlobalController
from bst.bst_input import (
    InvalidValueError,
    parse_int,
    parse_insert_value,
    parse_sequence,
    random_values,
)
from bst.bst_layout import compute_layout
from bst.bst_model import TRAVERSALS, BSTModel
from bst.bst_view import BSTView

logger = logging.getLogger(__name__)

MESSAGE_COLORS = {
    "success": "rgba(34, 197, 94, 0.9)",
    "warning": "rgba(245, 158, 11, 0.9)",
    "error": "rgba(239, 68, 68, 0.9)",
    "info": "rgba(59, 130, 246, 0.9)",
}

TRAVERSAL_TITLES = {
    "inorder": "In-order",
    "preorder": "Pre-order",
    "postorder": "Post-order",
}


class BSTController(QWidget):
    """
    构建 BST 操作面板，并负责模型与视图之间的桥接。
    """

    def __init__(self, global_ctrl: GlobalController):
        super().__init__()
        self.model = BSTModel()
        self.view = BSTView(global_ctrl)
        self._panel_locked = False

        self._build_inputs()
        self.panel = self._create_panel()
        self._install_shortcuts()

        self.view.interactionLocked.connect(self._on_lock_state)
        self.view.deleteRequested.connect(self._handle_delete_from_view)
        self.view.findRequested.connect(self._handle_find_from_view)
        self.view.clearRequested.connect(self._on_clear)
        self.view.traversalProgress.connect(self._on_traversal_progress)
        self.view.traversalFinished.connect(self._on_traversal_finished)

        self._refresh_inputs()
        self._refresh_stats()

    # ---------- UI 构建 ----------

    def _build_inputs(self):
        self.value_edit = QLineEdit()
        self.value_edit.setPlaceholderText("Value (1-999)")
        self.value_edit.returnPressed.connect(self._on_insert)

        self.count_label = QLabel("0")
        self.height_label = QLabel("0")
        self.balance_label = QLabel("0")
        self.traversal_label = QLabel("[]")
        self.traversal_label.setWordWrap(True)
        self.message_label = QLabel("")
        self.message_label.setWordWrap(True)
        self.message_label.setVisible(False)

    def _create_panel(self):
        container = QWidget()
        layout = QGridLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setHorizontalSpacing(12)
        layout.setVerticalSpacing(12)
        layout.setColumnStretch(0, 1)
        layout.setColumnStretch(1, 1)

        # Node operations
        node_group = self._group("Node")
        node_layout = QFormLayout()
        node_layout.setContentsMargins(12, 8, 12, 12)
        node_layout.setSpacing(6)
        node_layout.addRow("Value:", self.value_edit)
        self.insert_btn = QPushButton("Insert")
        self.insert_btn.clicked.connect(self._on_insert)
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(self._on_delete)
        self.find_btn = QPushButton("Find")
        self.find_btn.clicked.connect(self._on_find)
        buttons = QHBoxLayout()
        for btn in (self.insert_btn, self.delete_btn, self.find_btn):
            buttons.addWidget(btn)
        node_layout.addRow(buttons)
        node_group.setLayout(node_layout)
        layout.addWidget(node_group, 0, 0)

        # Tree operations
        tree_group = self._group("Tree")
        tree_layout = QHBoxLayout(tree_group)
        tree_layout.setContentsMargins(12, 10, 12, 12)
        self.create_btn = QPushButton("Create From List")
        self.create_btn.clicked.connect(self._on_create)
        self.random_btn = QPushButton("Random Tree")
        self.random_btn.clicked.connect(self._on_random)
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self._on_clear)
        for btn in (self.create_btn, self.random_btn, self.clear_btn):
            tree_layout.addWidget(btn)
        layout.addWidget(tree_group, 1, 0)

        # Traversals
        traversal_group = self._group("Traversal")
        traversal_layout = QVBoxLayout(traversal_group)
        traversal_layout.setContentsMargins(12, 10, 12, 12)
        traversal_buttons = QHBoxLayout()
        self.traversal_btns = {}
        for kind in TRAVERSALS:
            btn = QPushButton(TRAVERSAL_TITLES[kind])
            btn.clicked.connect(lambda _checked=False, kind=kind: self._on_traversal(kind))
            traversal_buttons.addWidget(btn)
            self.traversal_btns[kind] = btn
        self.stop_btn = QPushButton("Stop")
        self.stop_btn.clicked.connect(self._on_stop_traversal)
        traversal_buttons.addWidget(self.stop_btn)
        traversal_layout.addLayout(traversal_buttons)
        traversal_layout.addWidget(self.traversal_label)
        layout.addWidget(traversal_group, 0, 1)

        # Stats
        stats_group = self._group("Statistics")
        stats_layout = QFormLayout(stats_group)
        stats_layout.setContentsMargins(12, 8, 12, 12)
        stats_layout.addRow("Nodes:", self.count_label)
        stats_layout.addRow("Height:", self.height_label)
        stats_layout.addRow("Balance Factor:", self.balance_label)
        layout.addWidget(stats_group, 1, 1)

        layout.addWidget(self.message_label, 2, 0, 1, 2)
        layout.setRowStretch(3, 1)
        return container

    @staticmethod
    def _group(title):
        group = QGroupBox(title)
        group.setStyleSheet("QGroupBox { color: white; }")
        return group

    def _install_shortcuts(self):
        bindings = {
            "C": self._on_clear,
            "R": self._on_random,
            "I": lambda: self._on_traversal("inorder"),
            "P": lambda: self._on_traversal("preorder"),
            "T": lambda: self._on_traversal("postorder"),
            "S": self._on_stop_traversal,
            "Esc": self._on_stop_traversal,
        }
        self._shortcuts = []
        for key, slot in bindings.items():
            shortcut = QShortcut(QKeySequence(key), self.panel)
            shortcut.setContext(Qt.WindowShortcut)
            shortcut.activated.connect(self._unless_typing(slot))
            self._shortcuts.append(shortcut)

    def _unless_typing(self, slot):
        def _fire():
            if self.value_edit.hasFocus():
                return
            slot()

        return _fire

    def build_panel(self):
        return self.panel

    # ---------- 生命周期 ----------

    def on_activate(self, graphics_view):
        self.view.bind_canvas(graphics_view)

    # ---------- 操作回调 ----------

    def _on_create(self):
        if self._panel_locked:
            return
        text, ok = QInputDialog.getText(
            self,
            "Create BST",
            "Enter values (comma-separated):",
        )
        if ok:
            self.create_from_text(text)

    def create_from_text(self, text):
        try:
            values = parse_sequence(text)
        except InvalidValueError as exc:
            self._reject(str(exc))
            return

        inserted = self.model.create_from_iterable(values)
        logger.info("created tree from %d values (%d unique)", len(values), len(inserted))
        self._build_tree()
        self.show_message(f"Created tree with {self.model.node_count} nodes", "success")

    def _on_random(self):
        if self._panel_locked:
            return
        values = random_values()
        self.model.create_from_iterable(values)
        logger.info("generated random tree %s", values)
        self._build_tree()
        self.show_message(f"Generated random tree with {len(values)} nodes", "success")

    def _on_insert(self):
        if self._panel_locked:
            return
        try:
            value = parse_insert_value(self.value_edit.text())
        except InvalidValueError as exc:
            self._reject(str(exc))
            self.value_edit.clear()
            return

        path = self.model.search(value).path
        node = self.model.insert(value)
        if node is None:
            self.show_message(f"Value {value} already exists!", "warning")
            self.value_edit.clear()
            self.view.animate_find(*self._frame(), path[-1].id, _ids(path))
            return

        logger.info("inserted %s", value)
        self.view.animate_insert(*self._frame(), node.id, _ids(path))
        self.show_message(f"Inserted {value}", "success")
        self._after_mutation()

    def _on_delete(self):
        if self._panel_locked:
            return
        value = self._read_lookup_value()
        if value is None:
            return

        result = self.model.search(value)
        if not result.found:
            self.show_message(f"Value {value} not found!", "warning")
            self.view.animate_find(*self._frame(), None, _ids(result.path))
            return

        target_id = result.node.id
        removed = self.model.remove(value)
        logger.info("deleted %s (detached node %d)", value, removed.id)
        self.view.animate_delete(
            *self._frame(), target_id, removed.id, _ids(result.path)
        )
        self.show_message(f"Deleted {value}", "success")
        self._after_mutation()

    def _on_find(self):
        if self._panel_locked:
            return
        value = self._read_lookup_value()
        if value is None:
            return
        result = self.model.search(value)
        found_id = result.node.id if result.found else None
        self.view.animate_find(*self._frame(), found_id, _ids(result.path))
        if result.found:
            self.show_message(f"Found {value}!", "success")
        else:
            self.show_message(f"{value} not found in tree", "warning")

    def _on_clear(self):
        self.view.stop_traversal()
        if self._panel_locked:
            return
        self.model.clear()
        self.view.reset()
        logger.info("tree cleared")
        self.traversal_label.setText("[]")
        self.show_message("Tree cleared", "info")
        self._after_mutation()

    def _on_traversal(self, kind):
        if self._panel_locked:
            return
        if self.model.node_count == 0:
            self.show_message("Tree is empty! Add some nodes first.", "warning")
            return
        nodes = self.model.traverse(kind)
        logger.info("%s traversal of %d nodes", kind, len(nodes))
        self.traversal_label.setText("[]")
        self.view.animate_traversal([node.id for node in nodes], [node.value for node in nodes])

    def _on_stop_traversal(self):
        if self.view.stop_traversal():
            self.traversal_label.setText("[]")

    def _on_traversal_progress(self, values):
        self.traversal_label.setText("[" + ", ".join(str(v) for v in values) + "]")

    def _on_traversal_finished(self, completed):
        logger.debug("traversal %s", "completed" if completed else "stopped")
        self._refresh_inputs()

    def _handle_delete_from_view(self, node_id):
        value = self.model.value_of(node_id)
        if value is None:
            return
        self.value_edit.setText(str(value))
        self._on_delete()

    def _handle_find_from_view(self, node_id):
        value = self.model.value_of(node_id)
        if value is None:
            return
        self.value_edit.setText(str(value))
        self._on_find()

    # ---------- 状态管理 ----------

    def show_message(self, message, kind="info"):
        color = MESSAGE_COLORS.get(kind, MESSAGE_COLORS["info"])
        self.message_label.setStyleSheet(
            f"QLabel {{ background: {color}; color: white; padding: 8px 14px;"
            " border-radius: 8px; font-weight: 500; }"
        )
        self.message_label.setText(message)
        self.message_label.setVisible(True)

    def _reject(self, message):
        logger.warning("rejected input: %s", message)
        self.show_message(message, "warning")

    def _read_lookup_value(self) -> Optional[int]:
        try:
            return parse_int(self.value_edit.text())
        except InvalidValueError as exc:
            self._reject(str(exc))
            return None

    def _frame(self):
        """Lays out the current tree, writes positions back, returns (snapshot, positions)."""
        positions = compute_layout(self.model.snapshot())
        self.model.apply_layout(positions)
        return self.model.snapshot(), positions

    def _build_tree(self):
        self.traversal_label.setText("[]")
        if self.model.node_count:
            self.view.animate_build(*self._frame())
        else:
            self.view.reset()
        self._after_mutation()

    def _after_mutation(self):
        self.value_edit.clear()
        self.value_edit.setFocus()
        self._refresh_stats()
        self._refresh_inputs()

    def _refresh_stats(self):
        self.count_label.setText(str(self.model.node_count))
        self.height_label.setText(str(self.model.get_height()))
        self.balance_label.setText(str(self.model.get_balance_factor()))

    def _refresh_inputs(self):
        has_nodes = self.model.node_count > 0
        state = self._panel_locked
        for widget in (
            self.create_btn,
            self.random_btn,
            self.clear_btn,
            self.insert_btn,
            self.value_edit,
        ):
            widget.setDisabled(state)

        for widget in (self.delete_btn, self.find_btn, *self.traversal_btns.values()):
            widget.setDisabled(state or not has_nodes)

        self.stop_btn.setEnabled(self.view.traversal_running)

    def _on_lock_state(self, locked):
        self._panel_locked = locked
        self._refresh_inputs()


def _ids(nodes):
    return [node.id for node in nodes]
