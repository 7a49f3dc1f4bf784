from typing import Dict, List, Optional, Tuple

NODE_WIDTH = 70
NODE_HEIGHT = 70

H_GAP = 90  # 相邻子树之间的最小水平间距
V_GAP = 130  # 层级间距
MIN_HORIZONTAL_OFFSET = 60  # 单子节点时的水平偏移量
TOP_MARGIN = 40


def compute_layout(snapshot) -> Dict[int, Tuple[float, float]]:
    """
    基于子树左右延伸量的布局：
    1. 左子树完全在父节点中心左侧 H_GAP / 2 以外，右子树同理
    2. 因而兄弟子树之间至少相隔 H_GAP，不会交叉

    返回 {node_id: (x, y)}，坐标是节点外接矩形的左上角。
    """
    root_id = snapshot.get("root")
    if root_id is None:
        return {}

    tree = {node["id"]: node for node in snapshot["nodes"]}

    # 每个子树相对其根中心的 (左延伸, 右延伸)；后序计算，使用显式栈以支持退化树
    extents: Dict[int, Tuple[float, float]] = {}
    offsets: Dict[int, float] = {}
    for node_id in reversed(_preorder_ids(tree, root_id)):
        node = tree[node_id]
        left_id = node["left"]
        right_id = node["right"]
        reach_left = reach_right = NODE_WIDTH / 2

        if left_id is not None:
            child_left, child_right = extents[left_id]
            offset = H_GAP / 2 + child_right
            if right_id is None:
                offset = max(MIN_HORIZONTAL_OFFSET, offset)
            offsets[left_id] = -offset
            reach_left = max(reach_left, offset + child_left)
        if right_id is not None:
            child_left, child_right = extents[right_id]
            offset = H_GAP / 2 + child_left
            if left_id is None:
                offset = max(MIN_HORIZONTAL_OFFSET, offset)
            offsets[right_id] = offset
            reach_right = max(reach_right, offset + child_right)

        extents[node_id] = (reach_left, reach_right)

    positions: Dict[int, Tuple[float, float]] = {}
    stack: List[Tuple[int, float, int]] = [(root_id, 0.0, 0)]
    while stack:
        node_id, x_center, depth = stack.pop()
        node = tree[node_id]
        positions[node_id] = (x_center - NODE_WIDTH / 2, depth * V_GAP + TOP_MARGIN)

        for child in (node["left"], node["right"]):
            if child is not None:
                stack.append((child, x_center + offsets[child], depth + 1))

    return positions


def level_order(snapshot) -> List[int]:
    root_id = snapshot.get("root")
    if root_id is None:
        return []
    tree = {node["id"]: node for node in snapshot["nodes"]}
    queue = [root_id]
    order = []
    while queue:
        node_id = queue.pop(0)
        order.append(node_id)
        node = tree[node_id]
        if node["left"] is not None:
            queue.append(node["left"])
        if node["right"] is not None:
            queue.append(node["right"])
    return order


def node_center(position: Optional[Tuple[float, float]]) -> Tuple[float, float]:
    if position is None:
        return 0.0, 0.0
    return position[0] + NODE_WIDTH / 2, position[1] + NODE_HEIGHT / 2


def _preorder_ids(tree, root_id) -> List[int]:
    order = []
    stack = [root_id]
    while stack:
        node_id = stack.pop()
        order.append(node_id)
        node = tree[node_id]
        for child in (node["right"], node["left"]):
            if child is not None:
                stack.append(child)
    return order
