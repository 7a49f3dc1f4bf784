import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PyQt5.QtWidgets", exc_type=ImportError)

from bst.bst_ctrl import BSTController  # noqa: E402
from core.global_ctrl import GlobalController  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def ctrl(qapp, monkeypatch):
    controller = BSTController(GlobalController())
    # a modal dialog would block the test run
    monkeypatch.setattr(
        QtWidgets.QMessageBox,
        "warning",
        lambda *args: pytest.fail("modal warning shown"),
    )
    return controller


class TestLookupOnEmptyTree:

    def test_delete_reports_not_found(self, ctrl):
        ctrl.value_edit.setText("7")
        ctrl._on_delete()
        assert ctrl.message_label.text() == "Value 7 not found!"
        assert ctrl.model.node_count == 0

    def test_find_reports_not_found(self, ctrl):
        ctrl.value_edit.setText("7")
        ctrl._on_find()
        assert ctrl.message_label.text() == "7 not found in tree"


class TestInsertInput:

    def test_rejected_value_clears_input(self, ctrl):
        ctrl.value_edit.setText("1000")
        ctrl._on_insert()
        assert ctrl.message_label.text() == "Please enter a valid number (1-999)"
        assert ctrl.value_edit.text() == ""
        assert ctrl.model.node_count == 0

    def test_duplicate_clears_input(self, ctrl):
        ctrl.model.insert(5)
        ctrl.value_edit.setText("5")
        ctrl._on_insert()
        assert ctrl.message_label.text() == "Value 5 already exists!"
        assert ctrl.value_edit.text() == ""
        assert ctrl.model.node_count == 1

    def test_insert_updates_stats(self, ctrl):
        ctrl.value_edit.setText("42")
        ctrl._on_insert()
        assert ctrl.message_label.text() == "Inserted 42"
        assert ctrl.count_label.text() == "1"
        assert ctrl.height_label.text() == "1"


class TestCreateFromText:

    def test_invalid_token_shows_inline_message(self, ctrl):
        ctrl.create_from_text("5, abc")
        assert ctrl.message_label.isVisibleTo(ctrl.panel)
        assert "1-999" in ctrl.message_label.text()
        assert ctrl.model.node_count == 0

    def test_builds_tree(self, ctrl):
        ctrl.create_from_text("5, 3 8，1,4")
        assert [node.value for node in ctrl.model.inorder()] == [1, 3, 4, 5, 8]
        assert ctrl.message_label.text() == "Created tree with 5 nodes"
        assert ctrl.balance_label.text() == "1"
