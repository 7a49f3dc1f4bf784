import pytest
from hypothesis import given, strategies as st

from bst.bst_model import BSTModel, BSTNode


def values_of(nodes):
    return [node.value for node in nodes]


def reachable(model):
    count = 0
    stack = [model.root] if model.root else []
    while stack:
        node = stack.pop()
        count += 1
        stack.extend(child for child in (node.left, node.right) if child)
    return count


def assert_ordered(node, low=None, high=None):
    if node is None:
        return
    assert low is None or node.value > low
    assert high is None or node.value < high
    assert_ordered(node.left, low, node.value)
    assert_ordered(node.right, node.value, high)


@pytest.fixture
def sample():
    model = BSTModel()
    for value in (5, 3, 8, 1, 4):
        model.insert(value)
    return model


class TestInsert:

    def test_first_insert_becomes_root(self):
        model = BSTModel()
        node = model.insert(42)
        assert model.root is node
        assert node.left is None and node.right is None
        assert model.node_count == 1

    def test_insert_returns_attached_node(self, sample):
        node = sample.insert(9)
        assert isinstance(node, BSTNode)
        assert sample.root.right.right is node
        assert sample.node_count == 6

    def test_duplicate_is_noop(self, sample):
        before = sample.snapshot()
        assert sample.insert(4) is None
        assert sample.node_count == 5
        assert sample.snapshot() == before

    def test_ids_are_unique_and_monotonic(self, sample):
        ids = [node.id for node in sample.preorder()]
        assert sorted(ids) == list(range(5))

    def test_create_from_iterable_skips_duplicates(self):
        model = BSTModel()
        inserted = model.create_from_iterable([7, 2, 7, 9, 2])
        assert values_of(inserted) == [7, 2, 9]
        assert model.node_count == 3


class TestDelete:

    def test_missing_value(self, sample):
        before = sample.snapshot()
        assert sample.delete(99) is False
        assert sample.node_count == 5
        assert sample.snapshot() == before

    def test_leaf(self, sample):
        assert sample.delete(1) is True
        assert sample.root.left.left is None
        assert values_of(sample.inorder()) == [3, 4, 5, 8]
        assert sample.node_count == 4

    def test_single_child_is_spliced(self, sample):
        sample.delete(4)
        assert sample.delete(3) is True
        assert sample.root.left.value == 1
        assert values_of(sample.inorder()) == [1, 5, 8]

    def test_two_children_copies_successor(self, sample):
        holder = sample.root.left
        successor = holder.right
        removed = sample.remove(3)

        assert removed is successor
        assert holder.value == 4
        assert sample.root.left is holder
        assert holder.right is None
        assert values_of(sample.inorder()) == [1, 4, 5, 8]
        assert sample.node_count == 4

    def test_two_children_keeps_identity_fields(self, sample):
        holder = sample.root.left
        holder.x, holder.y = 12.0, 34.0
        node_id = holder.id
        sample.delete(3)
        assert (holder.id, holder.x, holder.y) == (node_id, 12.0, 34.0)

    def test_successor_deep_in_right_subtree(self):
        model = BSTModel()
        model.create_from_iterable([10, 5, 20, 15, 25, 17])
        successor = model.root.right.left
        assert model.remove(10) is successor
        assert model.root.value == 15
        assert model.root.right.left.value == 17
        assert values_of(model.inorder()) == [5, 15, 17, 20, 25]

    def test_delete_root_until_empty(self, sample):
        while sample.root is not None:
            assert sample.delete(sample.root.value)
        assert sample.node_count == 0
        assert sample.inorder() == []


class TestSearch:

    def test_found_path(self, sample):
        result = sample.search(8)
        assert result.found
        assert values_of(result.path) == [5, 8]
        assert result.node.value == 8

    def test_missing_path(self, sample):
        result = sample.search(2)
        assert not result.found
        assert values_of(result.path) == [5, 3, 1]
        assert result.node is None

    def test_empty_tree(self):
        result = BSTModel().search(1)
        assert result == (False, [])

    def test_contains(self, sample):
        assert 4 in sample
        assert 6 not in sample


class TestMetrics:

    def test_empty_tree(self):
        model = BSTModel()
        assert model.get_height() == 0
        assert model.get_balance_factor() == 0

    def test_single_node(self):
        model = BSTModel()
        model.insert(1)
        assert model.get_height() == 1
        assert model.get_balance_factor() == 0

    def test_sample(self, sample):
        assert sample.get_height() == 3
        assert sample.get_balance_factor() == 1

    def test_subtree_arguments(self, sample):
        assert sample.get_height(sample.root.right) == 1
        assert sample.get_height(None) == 0
        assert sample.get_balance_factor(sample.root.left) == 0

    def test_degenerate_tree(self):
        model = BSTModel()
        model.create_from_iterable(range(1, 2001))
        assert model.get_height() == 2000
        assert model.get_balance_factor() == -1999
        assert len(model.postorder()) == 2000
        assert model.delete(1000)


class TestTraversals:

    def test_orders(self, sample):
        assert values_of(sample.inorder()) == [1, 3, 4, 5, 8]
        assert values_of(sample.preorder()) == [5, 3, 1, 4, 8]
        assert values_of(sample.postorder()) == [1, 4, 3, 8, 5]

    def test_traverse_dispatch(self, sample):
        assert sample.traverse("postorder") == sample.postorder()
        with pytest.raises(ValueError):
            sample.traverse("levelorder")

    def test_restartable(self, sample):
        assert sample.inorder() == sample.inorder()
        assert list(sample) == [1, 3, 4, 5, 8]

    def test_clear(self, sample):
        sample.clear()
        assert sample.root is None
        assert sample.node_count == 0
        assert len(sample) == 0
        for kind in ("inorder", "preorder", "postorder"):
            assert sample.traverse(kind) == []


class TestPresentation:

    def test_snapshot(self, sample):
        snap = sample.snapshot()
        assert snap["root"] == sample.root.id
        root_info = next(n for n in snap["nodes"] if n["id"] == sample.root.id)
        assert root_info["left"] == sample.root.left.id
        assert root_info["right"] == sample.root.right.id

    def test_positions_written_back(self, sample):
        node = sample.root.right
        assert sample.set_position(node.id, 3.0, 4.0)
        assert (node.x, node.y) == (3.0, 4.0)
        assert not sample.set_position(999, 0, 0)

        sample.apply_layout({sample.root.id: (1.0, 2.0)})
        assert (sample.root.x, sample.root.y) == (1.0, 2.0)

    def test_value_of(self, sample):
        assert sample.value_of(sample.root.left.id) == 3
        assert sample.value_of(999) is None


class TestIsValid:

    def test_sample_is_valid(self, sample):
        assert sample.is_valid()

    def test_detects_out_of_order_value(self, sample):
        sample.root.left.value = 9
        assert sample.is_valid() is False

    def test_detects_stale_count(self, sample):
        sample.node_count += 1
        assert sample.is_valid() is False


@given(st.lists(st.integers(min_value=1, max_value=999)))
def test_inorder_is_strictly_ascending(values):
    model = BSTModel()
    model.create_from_iterable(values)
    assert values_of(model.inorder()) == sorted(set(values))
    assert model.node_count == reachable(model) == len(set(values))


@given(
    st.lists(st.integers(min_value=1, max_value=50)),
    st.lists(st.integers(min_value=1, max_value=50)),
)
def test_deletes_keep_invariants(inserts, deletes):
    model = BSTModel()
    model.create_from_iterable(inserts)
    present = set(inserts)
    for value in deletes:
        count = model.node_count
        deleted = model.delete(value)
        assert deleted == (value in present)
        assert model.node_count == count - (1 if deleted else 0)
        present.discard(value)
        assert value not in values_of(model.preorder())
        assert_ordered(model.root)
        assert model.node_count == reachable(model)
        assert model.is_valid()
    assert values_of(model.inorder()) == sorted(present)
