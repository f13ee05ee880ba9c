"""Parsed trees and live node trees.

Key Components:
    Tree: Immutable parse result with structural equality
    LiveTree: Arena owning mutable nodes and their update hook
    Node: Mutable node with weak parent links
"""

from .model import PLAIN_TAG, TEXT_ATTRIBUTE, Tree, plain
from .node import LiveTree, MutationEvent, MutationKind, Node, Observer
from .serializer import from_dict, from_json, to_dict, to_json, to_markup

__all__ = [
    "PLAIN_TAG",
    "TEXT_ATTRIBUTE",
    "Tree",
    "plain",
    "LiveTree",
    "MutationEvent",
    "MutationKind",
    "Node",
    "Observer",
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
    "to_markup",
]
