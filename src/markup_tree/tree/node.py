"""Mutable live tree of nodes with weak parent links.

``LiveTree`` is an arena that hands out ``Node`` objects addressed by stable
integer indices. A node holds strong references to its children and only the
index of its parent, resolved through a weak registry, so a parent is never
kept alive by its children. All structural mutation goes through the arena,
which keeps parent and child links consistent and notifies observers.
"""

import hashlib
import itertools
import logging
import weakref
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from markup_tree.shared import (
    ForeignNodeError,
    TreeConfig,
    TreeMutationError,
    UnresolvableParentError,
    get_logger,
)

from .model import Tree

# Bytes used to encode one sibling index when hashing a path
PATH_INDEX_BYTES = 4


class MutationKind(Enum):
    """Kinds of structural mutation reported to observers."""

    PUSH = auto()       # Child appended to node
    REMOVE = auto()     # Child removed from node
    DRAIN = auto()      # Node detached itself from its parent
    REPLACE = auto()    # Node content swapped in place


@dataclass
class MutationEvent:
    """Structural change notification.

    Attributes:
        kind: What happened
        node: Node the update hook runs for (the parent for PUSH, REMOVE and
            DRAIN; the holder of the previous content for REPLACE)
        related: The child pushed, removed or drained, or the node whose
            content was replaced
    """

    kind: MutationKind
    node: "Node"
    related: Optional["Node"] = None


Observer = Callable[[MutationEvent], None]


class Node:
    """A node in a live tree.

    Nodes are created through ``LiveTree.create`` and compare structurally:
    two nodes are equal when their tags, attributes and children are equal.
    Use ``is`` or ``index`` for identity.
    """

    __slots__ = ("tag", "attrs", "_children", "_parent_index", "_index", "_owner", "__weakref__")

    def __init__(
        self,
        owner: "LiveTree",
        index: int,
        tag: str,
        attrs: Optional[Dict[str, str]] = None
    ) -> None:
        self.tag = tag
        self.attrs: Dict[str, str] = attrs if attrs is not None else {}
        self._children: List["Node"] = []
        self._parent_index: Optional[int] = None
        self._index = index
        self._owner = owner

    def __repr__(self) -> str:
        return (
            f"Node(#{self._index} {self.tag!r}, attrs={self.attrs!r}, "
            f"children={len(self._children)})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        if self.tag != other.tag or self.attrs != other.attrs:
            return False
        if len(self._children) != len(other._children):
            return False
        return all(a == b for a, b in zip(self._children, other._children))

    __hash__ = None  # type: ignore[assignment]

    @property
    def index(self) -> int:
        """Stable arena index of this node."""
        return self._index

    @property
    def owner(self) -> "LiveTree":
        """Live tree this node belongs to."""
        return self._owner

    @property
    def children(self) -> Tuple["Node", ...]:
        """Children in order (mutate through ``push``/``remove``)."""
        return tuple(self._children)

    @property
    def pre(self) -> Optional[int]:
        """Arena index of the parent, ``None`` for a root."""
        return self._parent_index

    @property
    def parent(self) -> Optional["Node"]:
        """Resolved parent node.

        Raises:
            UnresolvableParentError: If the parent has been reclaimed
        """
        return self._owner.resolve_parent(self)

    @property
    def is_root(self) -> bool:
        """True if this node has no parent link."""
        return self._parent_index is None

    def push(self, child: "Node") -> None:
        """Append ``child`` to this node."""
        self._owner.push(self, child)

    def remove(self, child: "Node") -> bool:
        """Remove ``child`` from this node."""
        return self._owner.remove(self, child)

    def drain(self) -> bool:
        """Detach this node from its parent."""
        return self._owner.drain(self)

    def replace(self, new_content: "Node") -> None:
        """Swap this node's content with ``new_content`` in place."""
        self._owner.replace(self, new_content)

    def idx(self, path: Optional[Sequence[int]] = None) -> None:
        """Assign path-hash ids to this subtree."""
        self._owner.idx(self, path)

    def locate(self) -> List[int]:
        """Sibling-index path from the root to this node."""
        return self._owner.locate(self)

    def iter(self) -> Iterator["Node"]:
        """Iterate over this node and all descendants in pre-order."""
        yield self
        for child in self._children:
            yield from child.iter()

    def to_tree(self) -> Tree:
        """Snapshot this subtree as an immutable ``Tree``."""
        return Tree(
            tag=self.tag,
            attrs=dict(self.attrs),
            children=tuple(child.to_tree() for child in self._children)
        )


class LiveTree:
    """Arena owning the identity and mutation API of live nodes.

    Only weak references to nodes are kept here, so a detached subtree that
    nobody holds is reclaimed by the garbage collector. Mutation is not
    thread-safe; one owner must serialize all operations on a tree.

    Examples:
        >>> live = LiveTree()
        >>> root = live.create("column")
        >>> child = live.create("text", {"size": "12"})
        >>> root.push(child)
        >>> child.locate()
        [0]
        >>> child.parent is root
        True
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize an empty live tree.

        Args:
            config: Tree configuration for id assignment
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "live_tree")
        self._nodes: "weakref.WeakValueDictionary[int, Node]" = weakref.WeakValueDictionary()
        self._counter = itertools.count()
        self._observers: List[Observer] = []

    def __len__(self) -> int:
        """Number of live nodes."""
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        if not isinstance(node, Node):
            return False
        return self._nodes.get(node.index) is node

    # Construction

    def create(
        self,
        tag: str,
        attrs: Optional[Dict[str, str]] = None,
        children: Optional[Iterable[Node]] = None,
        parent: Optional[Node] = None
    ) -> Node:
        """Allocate a node with a fresh stable index.

        Args:
            tag: Node tag
            attrs: Attribute mapping (copied)
            children: Nodes attached under the new node in order
            parent: Node the new node is pushed onto

        Returns:
            The new node
        """
        node = Node(self, next(self._counter), tag, dict(attrs or {}))
        self._nodes[node.index] = node
        for child in children or ():
            self.push(node, child)
        if parent is not None:
            self.push(parent, node)
        return node

    def from_tree(self, tree: Tree, parent: Optional[Node] = None) -> Node:
        """Build live nodes from a parsed ``Tree``.

        Args:
            tree: Parsed tree
            parent: Optional node to attach the built subtree to

        Returns:
            Root node of the built subtree
        """
        node = self.create(tree.tag, tree.attrs, parent=parent)
        for child in tree.children:
            self.from_tree(child, node)
        return node

    def get(self, index: int) -> Optional[Node]:
        """Resolve an arena index, ``None`` if the node was reclaimed."""
        return self._nodes.get(index)

    # Update hook

    def subscribe(self, observer: Observer) -> Observer:
        """Register a callback invoked on every structural mutation."""
        self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: Observer) -> None:
        """Remove a previously registered callback."""
        self._observers.remove(observer)

    def update(
        self,
        node: Node,
        kind: MutationKind,
        related: Optional[Node] = None
    ) -> None:
        """Run the update hook for ``node``.

        Without observers this is a no-op.
        """
        if not self._observers:
            return
        event = MutationEvent(kind=kind, node=node, related=related)
        for observer in list(self._observers):
            observer(event)

    # Structural mutation

    def resolve_parent(self, node: Node) -> Optional[Node]:
        """Resolve the parent of ``node``.

        Returns:
            Parent node, or ``None`` for a root

        Raises:
            UnresolvableParentError: If the parent has been reclaimed
        """
        if node._parent_index is None:
            return None
        parent = self._nodes.get(node._parent_index)
        if parent is None:
            raise UnresolvableParentError(node._parent_index)
        return parent

    def push(self, parent: Node, child: Node) -> None:
        """Append ``child`` to ``parent``'s children.

        A child that is attached elsewhere is removed from its old parent
        first.

        Raises:
            TreeMutationError: If ``child`` is ``parent`` or one of its ancestors
            ForeignNodeError: If either node belongs to another live tree
        """
        self._check_owned(parent, child)
        if child is parent or self._is_ancestor(child, parent):
            raise TreeMutationError(
                f"Cannot push {child!r} under its own descendant {parent!r}"
            )

        if child._parent_index is not None:
            previous = self._nodes.get(child._parent_index)
            if previous is not None:
                self.remove(previous, child)

        child._parent_index = parent.index
        parent._children.append(child)
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Pushed child",
                extra={"parent": parent.index, "child": child.index, "tag": child.tag}
            )
        self.update(parent, MutationKind.PUSH, child)

    def remove(self, parent: Node, child: Node) -> bool:
        """Remove ``child`` from ``parent`` by identity.

        Returns:
            True if ``child`` was a child of ``parent``
        """
        self._check_owned(parent, child)
        for position, candidate in enumerate(parent._children):
            if candidate is child:
                del parent._children[position]
                child._parent_index = None
                if self.logger.is_enabled_for(logging.DEBUG):
                    self.logger.debug(
                        "Removed child",
                        extra={"parent": parent.index, "child": child.index, "position": position}
                    )
                self.update(parent, MutationKind.REMOVE, child)
                return True
        return False

    def drain(self, node: Node) -> bool:
        """Detach ``node`` from its parent.

        A root, or a node whose parent has been reclaimed, is left untouched.

        Returns:
            True if the node was detached
        """
        self._check_owned(node)
        if node._parent_index is None:
            return False

        parent = self._nodes.get(node._parent_index)
        if parent is None:
            self.logger.debug(
                "Drain skipped, parent reclaimed",
                extra={"node": node.index, "parent": node._parent_index}
            )
            return False

        removed = self.remove(parent, node)
        self.update(parent, MutationKind.DRAIN, node)
        return removed

    def replace(self, node: Node, new_content: Node) -> None:
        """Swap the content of ``node`` with ``new_content`` in place.

        ``node`` keeps its identity and parent link, so every holder of it
        observes the new tag, attributes and children. ``new_content`` is
        detached first if needed and ends up holding the previous content.

        Raises:
            TreeMutationError: If ``new_content`` is ``node`` or one of its ancestors
        """
        self._check_owned(node, new_content)
        if new_content is node or self._is_ancestor(new_content, node):
            raise TreeMutationError(
                f"Cannot replace {node!r} with itself or an ancestor"
            )

        self.drain(new_content)
        new_content._parent_index = None

        node.tag, new_content.tag = new_content.tag, node.tag
        node.attrs, new_content.attrs = new_content.attrs, node.attrs
        node._children, new_content._children = new_content._children, node._children
        for child in node._children:
            child._parent_index = node.index
        for child in new_content._children:
            child._parent_index = new_content.index

        self.logger.debug(
            "Replaced node content",
            extra={"node": node.index, "previous_holder": new_content.index}
        )
        self.update(new_content, MutationKind.REPLACE, node)

    # Identity and position

    def make_id(self, tag: str, path: Sequence[int]) -> str:
        """Derive the path-hash identifier for ``tag`` at ``path``."""
        digest = hashlib.new(self.config.id_hash_algorithm)
        digest.update(tag.encode("utf-8"))
        digest.update(b"\x00")
        for position in path:
            digest.update(position.to_bytes(PATH_INDEX_BYTES, "big"))
        return f"{tag}-{digest.hexdigest()[-self.config.id_digest_length:]}"

    def idx(self, node: Node, path: Optional[Sequence[int]] = None) -> None:
        """Assign path-hash ids to ``node`` and its descendants.

        Ids are written in pre-order and only where the id attribute is
        absent, so indexing twice leaves existing ids unchanged.

        Args:
            node: Subtree root
            path: Root-to-node sibling-index path of ``node`` (defaults to
                ``locate(node)``)

        Raises:
            ValueError: If a path index does not fit the path encoding
        """
        self._check_owned(node)
        start = list(path) if path is not None else self.locate(node)
        limit = 1 << (8 * PATH_INDEX_BYTES)
        for position in start:
            if not 0 <= position < limit:
                raise ValueError(f"Path index {position} outside 0..{limit - 1}")
        self._assign_ids(node, start)

    def _assign_ids(self, node: Node, path: List[int]) -> None:
        node.attrs.setdefault(self.config.id_attribute, self.make_id(node.tag, path))
        path.append(0)
        for child in node._children:
            self._assign_ids(child, path)
            path[-1] += 1
        path.pop()

    def locate(self, node: Node) -> List[int]:
        """Resolve the sibling-index path from the root down to ``node``.

        Returns:
            Indices in root-to-node order, ``[]`` for a root

        Raises:
            UnresolvableParentError: If an ancestor has been reclaimed
        """
        self._check_owned(node)
        path: List[int] = []
        current = node
        while current._parent_index is not None:
            parent = self.resolve_parent(current)
            for position, candidate in enumerate(parent._children):
                if candidate is current:
                    path.append(position)
                    break
            else:
                raise TreeMutationError(
                    f"{current!r} is missing from the children of its parent {parent!r}"
                )
            current = parent
        path.reverse()
        return path

    def iter_nodes(self, root: Node) -> Iterator[Node]:
        """Iterate over ``root`` and its descendants in pre-order."""
        return root.iter()

    def find_by_id(self, root: Node, id_value: str) -> Optional[Node]:
        """Find the first node under ``root`` whose id attribute equals ``id_value``."""
        id_attribute = self.config.id_attribute
        return next(
            (node for node in root.iter() if node.attrs.get(id_attribute) == id_value),
            None
        )

    def _is_ancestor(self, candidate: Node, node: Node) -> bool:
        index = node._parent_index
        while index is not None:
            ancestor = self._nodes.get(index)
            if ancestor is None:
                return False
            if ancestor is candidate:
                return True
            index = ancestor._parent_index
        return False

    def _check_owned(self, *nodes: Node) -> None:
        for node in nodes:
            if node._owner is not self:
                raise ForeignNodeError(f"{node!r} belongs to another live tree")
