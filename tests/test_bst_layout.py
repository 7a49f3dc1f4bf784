from bst.bst_layout import (
    H_GAP,
    MIN_HORIZONTAL_OFFSET,
    NODE_WIDTH,
    TOP_MARGIN,
    V_GAP,
    compute_layout,
    level_order,
    node_center,
)
from bst.bst_model import BSTModel


def build(*values):
    model = BSTModel()
    model.create_from_iterable(values)
    return model


def center_x(positions, node):
    return positions[node.id][0] + NODE_WIDTH / 2


class TestComputeLayout:

    def test_empty(self):
        assert compute_layout(BSTModel().snapshot()) == {}

    def test_root_is_centered_at_origin(self):
        model = build(5)
        positions = compute_layout(model.snapshot())
        assert positions == {model.root.id: (-NODE_WIDTH / 2, TOP_MARGIN)}

    def test_depth_sets_y(self):
        model = build(5, 3, 8, 1, 4)
        positions = compute_layout(model.snapshot())
        for depth, node in enumerate((model.root, model.root.left, model.root.left.left)):
            assert positions[node.id][1] == depth * V_GAP + TOP_MARGIN

    def test_single_child_offset(self):
        model = build(5, 8)
        positions = compute_layout(model.snapshot())
        assert center_x(positions, model.root.right) == max(
            MIN_HORIZONTAL_OFFSET, H_GAP / 2 + NODE_WIDTH / 2
        )

    def test_subtrees_do_not_cross_parent(self):
        model = build(50, 25, 75, 12, 37, 62, 87, 30, 40, 60, 65)
        positions = compute_layout(model.snapshot())
        stack = [model.root]
        while stack:
            node = stack.pop()
            x = center_x(positions, node)
            if node.left:
                left_nodes = _subtree(node.left).inorder()
                assert all(center_x(positions, n) < x for n in left_nodes)
                stack.append(node.left)
            if node.right:
                right_nodes = _subtree(node.right).inorder()
                assert all(center_x(positions, n) > x for n in right_nodes)
                stack.append(node.right)

    def test_siblings_are_separated(self):
        model = build(5, 3, 8)
        positions = compute_layout(model.snapshot())
        gap = center_x(positions, model.root.right) - center_x(positions, model.root.left)
        assert gap >= NODE_WIDTH + H_GAP

    def test_deep_tree(self):
        model = build(*range(1, 1501))
        positions = compute_layout(model.snapshot())
        assert len(positions) == 1500


def _subtree(node):
    view = BSTModel()
    view.root = node
    return view


def test_level_order():
    model = build(5, 3, 8, 1, 4)
    values = [model.value_of(node_id) for node_id in level_order(model.snapshot())]
    assert values == [5, 3, 8, 1, 4]
    assert level_order(BSTModel().snapshot()) == []


def test_node_center():
    assert node_center((0.0, 0.0)) == (NODE_WIDTH / 2, NODE_WIDTH / 2)
    assert node_center(None) == (0.0, 0.0)
