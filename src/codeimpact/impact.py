"""
Impact-radius analysis: who is affected if a class or method changes.

Both walks go backwards (dependents of dependents, callers of callers) with
an explicit stack and one visited set per query, seeded with the root so a
cycle never reports the root as its own dependent. Each affected entity keeps
the first path on which it was discovered ("first path wins", not shortest):
``[affected, ..., root]``. Neighbours are visited in name order so results do
not depend on ingestion order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .graph_store import DependencyGraph


class Severity(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def class_severity(total: int) -> Severity:
    if total > 10:
        return Severity.HIGH
    if total > 5:
        return Severity.MEDIUM
    if total > 0:
        return Severity.LOW
    return Severity.NONE


def method_severity(total: int) -> Severity:
    if total > 15:
        return Severity.CRITICAL
    return class_severity(total)


@dataclass
class ImpactReport:
    root: str
    kind: str  # class|method
    paths: Dict[str, List[str]] = field(default_factory=dict)
    directly_affected: List[str] = field(default_factory=list)
    indirectly_affected: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.paths)

    @property
    def severity(self) -> Severity:
        if self.kind == "method":
            return method_severity(self.total)
        return class_severity(self.total)

    def to_dict(self) -> Dict[str, object]:
        return {
            self.kind: self.root,
            "type": self.kind,
            "impactRadius": {
                "directlyAffected": list(self.directly_affected),
                "indirectlyAffected": list(self.indirectly_affected),
                "totalImpact": self.total,
                "severityLevel": self.severity.value,
            },
        }


def walk_backwards(root: str, predecessors: Callable[[str], List[str]]) -> Dict[str, List[str]]:
    """Depth-first walk over ``predecessors`` from ``root``.

    Visits nodes in the same order a recursive walk would and maps every
    reached node to the path on which it was first discovered.
    """
    impact: Dict[str, List[str]] = {}
    visited = {root}
    stack: List[Tuple[str, List[str]]] = [
        (dep, [root]) for dep in reversed(predecessors(root))
    ]
    while stack:
        node, tail = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        path = [node, *tail]
        impact[node] = path
        for dep in reversed(predecessors(node)):
            if dep not in visited:
                stack.append((dep, path))
    return impact


class ImpactAnalyzer:
    def __init__(self, graph: DependencyGraph, call_hierarchy: Callable[[], Dict[str, List[str]]]):
        self.graph = graph
        self._call_hierarchy = call_hierarchy

    # --- classes ---
    def impact_radius(self, class_name: str) -> Dict[str, List[str]]:
        if not self.graph.contains_class(class_name):
            return {}
        return walk_backwards(class_name, self.graph.dependents_of)

    def class_impact(self, class_name: str) -> ImpactReport:
        paths = self.impact_radius(class_name)
        direct = self.graph.dependents_of(class_name)
        direct_set = set(direct)
        return ImpactReport(
            root=class_name,
            kind="class",
            paths=paths,
            directly_affected=direct,
            indirectly_affected=[k for k in paths if k not in direct_set],
        )

    # --- methods ---
    def callers_index(self) -> Dict[str, List[str]]:
        """Callee -> callers in name order, built from the current call log."""
        index: Dict[str, List[str]] = {}
        for caller, callees in sorted(self._call_hierarchy().items()):
            for callee in callees:
                index.setdefault(callee, []).append(caller)
        return index

    def direct_callers_of(self, method_full_name: str) -> List[str]:
        return list(self.callers_index().get(method_full_name, []))

    def method_impact_radius(
        self, method_full_name: str, callers: Optional[Dict[str, List[str]]] = None
    ) -> Dict[str, List[str]]:
        index = self.callers_index() if callers is None else callers
        return walk_backwards(method_full_name, lambda m: index.get(m, []))

    def method_impact(
        self, method_full_name: str, callers: Optional[Dict[str, List[str]]] = None
    ) -> ImpactReport:
        """Impact report for one method; pass a prebuilt ``callers`` index when querying many."""
        index = self.callers_index() if callers is None else callers
        paths = walk_backwards(method_full_name, lambda m: index.get(m, []))
        direct = list(index.get(method_full_name, []))
        direct_set = set(direct)
        return ImpactReport(
            root=method_full_name,
            kind="method",
            paths=paths,
            directly_affected=direct,
            indirectly_affected=[k for k in paths if k not in direct_set],
        )
