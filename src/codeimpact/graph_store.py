"""
Dependency graph store: class vertices, one labeled edge per ordered
(source, target) pair, and an append-only log of method-call facts.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .node_types import DependencyEdge, EdgeLabel, MethodCallFact


class DependencyGraph:
    """Directed labeled graph over fully-qualified class names.

    Iteration order of vertices and edges is insertion order.
    """

    def __init__(self) -> None:
        # dict used as an ordered set
        self._vertices: Dict[str, None] = {}
        self._edges: Dict[Tuple[str, str], DependencyEdge] = {}
        self._outgoing: Dict[str, Dict[str, DependencyEdge]] = {}
        self._incoming: Dict[str, Dict[str, DependencyEdge]] = {}
        self._method_calls: List[MethodCallFact] = []

    # --- mutation ---
    def add_class(self, class_name: str) -> None:
        if class_name in self._vertices:
            return
        self._vertices[class_name] = None
        self._outgoing[class_name] = {}
        self._incoming[class_name] = {}

    def add_dependency(self, source: str, target: str, label: EdgeLabel) -> None:
        """Create the (source, target) edge or overwrite its label."""
        if source == target:
            return
        self.add_class(source)
        self.add_class(target)
        edge = self._edges.get((source, target))
        if edge is not None:
            edge.label = EdgeLabel(label)
            return
        edge = DependencyEdge(source=source, target=target, label=EdgeLabel(label))
        self._edges[(source, target)] = edge
        self._outgoing[source][target] = edge
        self._incoming[target][source] = edge

    def update_label(self, source: str, target: str, label: EdgeLabel) -> bool:
        """Relabel an existing edge. Returns False when there is no such edge."""
        edge = self._edges.get((source, target))
        if edge is None:
            return False
        edge.label = EdgeLabel(label)
        return True

    def add_method_call(
        self, caller_class: str, caller_method: str, callee_class: str, callee_method: str
    ) -> None:
        self._method_calls.append(
            MethodCallFact(caller_class, caller_method, callee_class, callee_method)
        )

    # --- reads ---
    def contains_class(self, class_name: str) -> bool:
        return class_name in self._vertices

    def get_all_classes(self) -> List[str]:
        return list(self._vertices)

    def get_edge(self, source: str, target: str) -> Optional[DependencyEdge]:
        return self._edges.get((source, target))

    def label_of(self, source: str, target: str) -> Optional[EdgeLabel]:
        edge = self._edges.get((source, target))
        return edge.label if edge is not None else None

    def get_dependencies(self, class_name: str) -> List[DependencyEdge]:
        """Outgoing edges of ``class_name``."""
        return list(self._outgoing.get(class_name, {}).values())

    def incoming_edges_of(self, class_name: str) -> List[DependencyEdge]:
        return list(self._incoming.get(class_name, {}).values())

    def dependents_of(self, class_name: str) -> List[str]:
        """Sources of incoming edges, sorted by name."""
        return sorted(self._incoming.get(class_name, {}))

    def get_all_edges(self) -> List[DependencyEdge]:
        return list(self._edges.values())

    def get_all_method_calls(self) -> List[MethodCallFact]:
        return list(self._method_calls)

    def __len__(self) -> int:
        return len(self._vertices)
