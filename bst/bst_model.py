import itertools
import logging
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

TRAVERSALS = ("inorder", "preorder", "postorder")

_TREE_ROOT = object()


class BSTNode:
    """
    树节点。x / y / id 只给视图使用，模型不解读，但在变更中保持不变。
    """

    def __init__(self, node_id: int, value):
        self.id = node_id
        self.value = value
        self.left: Optional["BSTNode"] = None
        self.right: Optional["BSTNode"] = None
        self.x = 0.0
        self.y = 0.0

    def __repr__(self):
        return f"BSTNode(id={self.id}, value={self.value!r})"


class SearchResult(NamedTuple):
    found: bool
    path: List[BSTNode]

    @property
    def node(self) -> Optional[BSTNode]:
        return self.path[-1] if self.found else None


class BSTModel:
    """
    二叉搜索树数据模型。

    节点使用唯一 id，方便视图做增量动画。不支持重复值：重复插入返回 None，
    删除不存在的值返回 False，都不会抛出异常。
    """

    def __init__(self):
        self._id_iter = itertools.count()
        self.root: Optional[BSTNode] = None
        self.node_count = 0

    @property
    def length(self) -> int:
        return self.node_count

    def __len__(self):
        return self.node_count

    def __contains__(self, value):
        return self.search(value).found

    def __iter__(self) -> Iterator[Any]:
        return iter([node.value for node in self.inorder()])

    def clear(self):
        self.root = None
        self.node_count = 0
        self._id_iter = itertools.count()

    def create_from_iterable(self, values: Iterable) -> List[BSTNode]:
        self.clear()
        inserted = []
        for value in values:
            node = self.insert(value)
            if node is not None:
                inserted.append(node)
        return inserted

    # ---------- Mutation ----------

    def insert(self, value) -> Optional[BSTNode]:
        """
        插入新值并返回新节点；若值已存在则不做任何修改，返回 None。
        """
        if self.root is None:
            self.root = self._make_node(value)
            self.node_count += 1
            logger.debug("inserted %r as root", value)
            return self.root

        current = self.root
        while True:
            if value < current.value:
                if current.left is None:
                    current.left = self._make_node(value)
                    self.node_count += 1
                    logger.debug("inserted %r left of %r", value, current.value)
                    return current.left
                current = current.left
            elif value > current.value:
                if current.right is None:
                    current.right = self._make_node(value)
                    self.node_count += 1
                    logger.debug("inserted %r right of %r", value, current.value)
                    return current.right
                current = current.right
            else:
                logger.debug("duplicate %r ignored", value)
                return None

    def delete(self, value) -> bool:
        return self.remove(value) is not None

    def remove(self, value) -> Optional[BSTNode]:
        """
        删除 value，返回真正从树上摘下的节点对象；未找到则返回 None。

        目标有两个子节点时，把右子树最左节点（中序后继）的值拷贝到目标节点，
        再摘下后继节点本身。因此返回的是后继节点，而目标节点保留 id、改了值。
        """
        parent = None
        direction = None
        current = self.root
        while current is not None and value != current.value:
            parent = current
            if value < current.value:
                direction = "left"
                current = current.left
            else:
                direction = "right"
                current = current.right

        if current is None:
            logger.debug("delete %r: not found", value)
            return None

        if current.left is not None and current.right is not None:
            succ_parent = current
            successor = current.right
            while successor.left is not None:
                succ_parent = successor
                successor = successor.left

            logger.debug(
                "delete %r: copying successor %r into node %d",
                value,
                successor.value,
                current.id,
            )
            current.value = successor.value
            # 后继节点没有左子，属于 0/1 子节点的情况
            if succ_parent is current:
                succ_parent.right = successor.right
            else:
                succ_parent.left = successor.right
            removed = successor
        else:
            replacement = current.left if current.left is not None else current.right
            self._replace_child(parent, direction, replacement)
            removed = current

        removed.left = None
        removed.right = None
        self.node_count -= 1
        return removed

    # ---------- Queries ----------

    def search(self, value) -> SearchResult:
        path: List[BSTNode] = []
        current = self.root
        while current is not None:
            path.append(current)
            if value == current.value:
                return SearchResult(True, path)
            if value < current.value:
                current = current.left
            else:
                current = current.right
        return SearchResult(False, path)

    def get_height(self, node=_TREE_ROOT) -> int:
        if node is _TREE_ROOT:
            node = self.root
        if node is None:
            return 0

        # 按层统计，避免退化树上的递归深度问题
        height = 0
        level = [node]
        while level:
            height += 1
            level = [
                child
                for current in level
                for child in (current.left, current.right)
                if child is not None
            ]
        return height

    def get_balance_factor(self, node=_TREE_ROOT) -> int:
        if node is _TREE_ROOT:
            node = self.root
        if node is None:
            return 0
        return self.get_height(node.left) - self.get_height(node.right)

    def inorder(self) -> List[BSTNode]:
        result: List[BSTNode] = []
        stack: List[BSTNode] = []
        current = self.root
        while stack or current is not None:
            while current is not None:
                stack.append(current)
                current = current.left
            current = stack.pop()
            result.append(current)
            current = current.right
        return result

    def preorder(self) -> List[BSTNode]:
        result: List[BSTNode] = []
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            result.append(node)
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)
        return result

    def postorder(self) -> List[BSTNode]:
        # root-right-left 的逆序即 left-right-root
        result: List[BSTNode] = []
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            result.append(node)
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
        result.reverse()
        return result

    def traverse(self, kind: str) -> List[BSTNode]:
        if kind not in TRAVERSALS:
            raise ValueError(f"unknown traversal: {kind!r}")
        return getattr(self, kind)()

    def is_valid(self) -> bool:
        """检查 BST 有序性，以及 node_count 是否等于可达节点数。"""
        values = [node.value for node in self.inorder()]
        if len(values) != self.node_count:
            return False
        return all(a < b for a, b in zip(values, values[1:]))

    # ---------- Presentation support ----------

    def find_node(self, node_id: int) -> Optional[BSTNode]:
        for node in self.preorder():
            if node.id == node_id:
                return node
        return None

    def value_of(self, node_id: int):
        node = self.find_node(node_id)
        return node.value if node else None

    def set_position(self, node_id: int, x: float, y: float) -> bool:
        node = self.find_node(node_id)
        if node is None:
            return False
        node.x = x
        node.y = y
        return True

    def apply_layout(self, positions: Dict[int, Tuple[float, float]]):
        for node in self.preorder():
            if node.id in positions:
                node.x, node.y = positions[node.id]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "root": self.root.id if self.root else None,
            "nodes": [
                {
                    "id": node.id,
                    "value": node.value,
                    "left": node.left.id if node.left else None,
                    "right": node.right.id if node.right else None,
                    "x": node.x,
                    "y": node.y,
                }
                for node in self.preorder()
            ],
        }

    # ---------- Internal helpers ----------

    def _make_node(self, value) -> BSTNode:
        return BSTNode(next(self._id_iter), value)

    def _replace_child(self, parent, direction, new_child):
        if parent is None:
            self.root = new_child
        else:
            setattr(parent, direction, new_child)
