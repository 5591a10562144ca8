from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Protocol


class TreeNode(Protocol):
    tipo_evento_id: int
    padre_id: int | None
    deleted_at: object


def descendant_ids(types: Iterable[TreeNode], root_id: int) -> set[int]:
    children: dict[int, list[int]] = defaultdict(list)
    for t in types:
        if t.padre_id is not None:
            children[t.padre_id].append(t.tipo_evento_id)
    found: set[int] = set()
    stack = list(children.get(root_id, []))
    while stack:
        node = stack.pop()
        if node in found or node == root_id:
            continue
        found.add(node)
        stack.extend(children.get(node, []))
    return found


def parent_type_candidates(types: Iterable[TreeNode], editing_id: int | None = None) -> list:
    """Types that may be chosen as parent; excludes the edited type and its subtree."""
    types = list(types)
    excluded: set[int] = set()
    if editing_id is not None:
        excluded = descendant_ids(types, editing_id) | {editing_id}
    return [t for t in types if t.deleted_at is None and t.tipo_evento_id not in excluded]
