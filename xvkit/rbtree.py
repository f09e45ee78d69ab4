"""A red-black tree ordered by a key, used as a run queue."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class Color(IntEnum):
    RED = 0
    BLACK = 1


class _Node:
    __slots__ = ("item", "parent", "left", "right", "color")

    def __init__(self, item: Any, color: Color) -> None:
        self.item = item
        self.color = color
        self.parent: _Node = self
        self.left: _Node = self
        self.right: _Node = self


class RBTree(Generic[T]):
    """Items ordered by key; equal keys keep insertion order."""

    def __init__(self, key: Callable[[T], Any] | None = None) -> None:
        self._key = key
        self._nil = _Node(None, Color.BLACK)
        self._root = self._nil
        self._len = 0

    def _key_of(self, item: T) -> Any:
        return item if self._key is None else self._key(item)

    def _left_rotate(self, x: _Node) -> None:
        nil = self._nil
        y = x.right
        x.right = y.left
        if y.left is not nil:
            y.left.parent = x
        y.parent = x.parent
        if x.parent is nil:
            self._root = y
        elif x is x.parent.left:
            x.parent.left = y
        else:
            x.parent.right = y
        y.left = x
        x.parent = y

    def _right_rotate(self, x: _Node) -> None:
        nil = self._nil
        y = x.left
        x.left = y.right
        if y.right is not nil:
            y.right.parent = x
        y.parent = x.parent
        if x.parent is nil:
            self._root = y
        elif x is x.parent.right:
            x.parent.right = y
        else:
            x.parent.left = y
        y.right = x
        x.parent = y

    def insert(self, item: T) -> None:
        """Add item; it goes after any items with an equal key."""
        nil = self._nil
        z = _Node(item, Color.RED)
        z.left = z.right = nil
        key = self._key_of(item)
        y = nil
        x = self._root
        while x is not nil:
            y = x
            x = x.left if key < self._key_of(x.item) else x.right
        z.parent = y
        if y is nil:
            self._root = z
        elif key < self._key_of(y.item):
            y.left = z
        else:
            y.right = z
        self._len += 1
        self._insert_fixup(z)

    def _insert_fixup(self, z: _Node) -> None:
        while z.parent.color == Color.RED:
            grand = z.parent.parent
            if z.parent is grand.left:
                uncle = grand.right
                if uncle.color == Color.RED:
                    z.parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grand.color = Color.RED
                    z = grand
                else:
                    if z is z.parent.right:
                        z = z.parent
                        self._left_rotate(z)
                    z.parent.color = Color.BLACK
                    z.parent.parent.color = Color.RED
                    self._right_rotate(z.parent.parent)
            else:
                uncle = grand.left
                if uncle.color == Color.RED:
                    z.parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grand.color = Color.RED
                    z = grand
                else:
                    if z is z.parent.left:
                        z = z.parent
                        self._right_rotate(z)
                    z.parent.color = Color.BLACK
                    z.parent.parent.color = Color.RED
                    self._left_rotate(z.parent.parent)
        self._root.color = Color.BLACK

    def get_min(self) -> T | None:
        """The item with the smallest key, or None when empty."""
        node = self._root
        if node is self._nil:
            return None
        while node.left is not self._nil:
            node = node.left
        return node.item

    def _find(self, item: T) -> _Node | None:
        key = self._key_of(item)
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node is self._nil:
                continue
            if node.item is item:
                return node
            node_key = self._key_of(node.item)
            if key < node_key:
                stack.append(node.left)
            elif node_key < key:
                stack.append(node.right)
            else:
                stack.extend((node.left, node.right))
        return None

    def _transplant(self, u: _Node, v: _Node) -> None:
        if u.parent is self._nil:
            self._root = v
        elif u is u.parent.left:
            u.parent.left = v
        else:
            u.parent.right = v
        v.parent = u.parent

    def delete(self, item: T) -> bool:
        """Remove this very item; return whether it was present."""
        z = self._find(item)
        if z is None:
            return False
        nil = self._nil
        y = z
        original = y.color
        if z.left is nil:
            x = z.right
            self._transplant(z, z.right)
        elif z.right is nil:
            x = z.left
            self._transplant(z, z.left)
        else:
            y = z.right
            while y.left is not nil:
                y = y.left
            original = y.color
            x = y.right
            if y.parent is z:
                x.parent = y
            else:
                self._transplant(y, y.right)
                y.right = z.right
                y.right.parent = y
            self._transplant(z, y)
            y.left = z.left
            y.left.parent = y
            y.color = z.color
        self._len -= 1
        if original == Color.BLACK:
            self._delete_fixup(x)
        return True

    def _delete_fixup(self, x: _Node) -> None:
        while x is not self._root and x.color == Color.BLACK:
            if x is x.parent.left:
                w = x.parent.right
                if w.color == Color.RED:
                    w.color = Color.BLACK
                    x.parent.color = Color.RED
                    self._left_rotate(x.parent)
                    w = x.parent.right
                if w.left.color == Color.BLACK and w.right.color == Color.BLACK:
                    w.color = Color.RED
                    x = x.parent
                else:
                    if w.right.color == Color.BLACK:
                        w.left.color = Color.BLACK
                        w.color = Color.RED
                        self._right_rotate(w)
                        w = x.parent.right
                    w.color = x.parent.color
                    x.parent.color = Color.BLACK
                    w.right.color = Color.BLACK
                    self._left_rotate(x.parent)
                    x = self._root
            else:
                w = x.parent.left
                if w.color == Color.RED:
                    w.color = Color.BLACK
                    x.parent.color = Color.RED
                    self._right_rotate(x.parent)
                    w = x.parent.left
                if w.right.color == Color.BLACK and w.left.color == Color.BLACK:
                    w.color = Color.RED
                    x = x.parent
                else:
                    if w.left.color == Color.BLACK:
                        w.right.color = Color.BLACK
                        w.color = Color.RED
                        self._left_rotate(w)
                        w = x.parent.left
                    w.color = x.parent.color
                    x.parent.color = Color.BLACK
                    w.left.color = Color.BLACK
                    self._right_rotate(x.parent)
                    x = self._root
        x.color = Color.BLACK

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[T]:
        stack: list[_Node] = []
        node = self._root
        while stack or node is not self._nil:
            while node is not self._nil:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.item
            node = node.right

    def check(self) -> int:
        """Verify the red-black invariants; return the black height."""
        nil = self._nil
        if self._root.color != Color.BLACK:
            raise ValueError("root is not black")
        if self._root is not nil and self._root.parent is not nil:
            raise ValueError("root has a parent")

        def walk(node: _Node) -> tuple[int, int]:
            if node is nil:
                return 1, 0
            for child in (node.left, node.right):
                if child is not nil and child.parent is not node:
                    raise ValueError("broken parent link")
            if node.color == Color.RED and Color.RED in (
                node.left.color, node.right.color
            ):
                raise ValueError("red node has a red child")
            key = self._key_of(node.item)
            if node.left is not nil and key < self._key_of(node.left.item):
                raise ValueError("left child key is larger")
            if node.right is not nil and self._key_of(node.right.item) < key:
                raise ValueError("right child key is smaller")
            left_height, left_count = walk(node.left)
            right_height, right_count = walk(node.right)
            if left_height != right_height:
                raise ValueError("unequal black heights")
            black = 1 if node.color == Color.BLACK else 0
            return left_height + black, left_count + right_count + 1

        height, total = walk(self._root)
        if total != self._len:
            raise ValueError("node count does not match length")
        keys = [self._key_of(item) for item in self]
        if any(b < a for a, b in zip(keys, keys[1:])):
            raise ValueError("in-order keys are not sorted")
        return height