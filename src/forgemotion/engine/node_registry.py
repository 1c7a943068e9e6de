"""Lookup of registered nodes and stagger groups"""

from typing import Dict, Iterator, List, Optional

from forgemotion.models.enums import LogCategory
from forgemotion.models.errors import UnknownNodeError
from forgemotion.models.node import AnimatableNode
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.DISPATCH)


class NodeRegistry:
    """
    Nodes known to the engine, keyed by node_id.

    Stagger groups are derived from params.group_id and ordered by
    params.group_index (registration order breaks ties).
    """

    def __init__(self):
        self._nodes: Dict[str, AnimatableNode] = {}
        self._groups: Dict[str, List[str]] = {}

    def add(self, node: AnimatableNode) -> None:
        if node.node_id in self._nodes:
            log.warn("Node already registered, replacing", node=node.node_id)
            self.remove(node.node_id)
        self._nodes[node.node_id] = node

        group_id = node.params.group_id
        if group_id is not None:
            members = self._groups.setdefault(group_id, [])
            members.append(node.node_id)
            order = {nid: i for i, nid in enumerate(members)}
            members.sort(key=lambda nid: (self._nodes[nid].params.group_index, order[nid]))

    def remove(self, node_id: str) -> Optional[AnimatableNode]:
        node = self._nodes.pop(node_id, None)
        if node is None:
            return None
        group_id = node.params.group_id
        if group_id is not None and group_id in self._groups:
            members = self._groups[group_id]
            if node_id in members:
                members.remove(node_id)
            if not members:
                del self._groups[group_id]
        return node

    def get(self, node_id: str) -> Optional[AnimatableNode]:
        return self._nodes.get(node_id)

    def require(self, node_id: str) -> AnimatableNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def group(self, group_id: Optional[str]) -> List[AnimatableNode]:
        if group_id is None:
            return []
        return [self._nodes[nid] for nid in self._groups.get(group_id, [])]

    def group_of(self, node: AnimatableNode) -> List[AnimatableNode]:
        """Members of the node's stagger group, or just the node if ungrouped"""
        members = self.group(node.params.group_id)
        return members or [node]

    def with_marker(self, *markers: str) -> List[AnimatableNode]:
        return [n for n in self._nodes.values() if n.has_marker(*markers)]

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[AnimatableNode]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)
