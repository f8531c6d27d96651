"""
Unused-code detection over a finished dependency graph and usage ledger.

A class is unused when nothing proves it is used:
 - no incoming strong edge (REFERENCE, ANNOTATION_REFERENCE, STATIC_IMPORT),
 - no incoming weak edge (IMPORT, UNRESOLVED_REFERENCE) whose source has the
   import recorded as used,
 - not framework-used and not test-used.
A method is unused when its usage record carries no tag at all.

With ``report_test_only`` the detector also reports code whose only evidence
comes from tests; those entries get the "only used in Test" reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .graph_store import DependencyGraph
from .node_types import STRONG_LABELS, WEAK_LABELS, UsageTag, split_method_key
from .usage_ledger import UsageLedger

REASON_TEST_ONLY = "only used in Test"
REASON_NO_DEPENDENTS = "No other classes depends on this class"


@dataclass
class UnusedEntry:
    name: str
    reason: str
    kind: str  # class|method

    def to_dict(self) -> Dict[str, str]:
        if self.kind == "class":
            return {"id": self.name, "fullName": self.name, "reason": self.reason}
        cls, meth = split_method_key(self.name)
        return {"id": self.name, "className": cls, "methodName": meth, "reason": self.reason}


class UnusedCodeDetector:
    def __init__(self, graph: DependencyGraph, ledger: UsageLedger, report_test_only: bool = False):
        self.graph = graph
        self.ledger = ledger
        self.report_test_only = report_test_only

    def is_referenced(self, class_name: str) -> bool:
        for edge in self.graph.incoming_edges_of(class_name):
            if edge.label in STRONG_LABELS:
                return True
            if edge.label in WEAK_LABELS and self.ledger.is_import_used(edge.source, class_name):
                return True
        return False

    def _class_is_unused(self, class_name: str) -> bool:
        if self.is_referenced(class_name) or self.ledger.is_class_used_by_framework(class_name):
            return False
        if self.ledger.is_class_used_by_test(class_name):
            return self.report_test_only
        return True

    def unused_classes(self) -> List[str]:
        return sorted(c for c in self.graph.get_all_classes() if self._class_is_unused(c))

    def unused_methods(self) -> List[str]:
        out: List[str] = []
        for usage in self.ledger.all_method_usages():
            if usage.is_unused or (self.report_test_only and usage.is_test_only):
                out.append(usage.full_name)
        return sorted(out)

    # --- reasons ---
    def class_reason(self, class_name: str) -> str:
        if self.ledger.is_class_used_by_test(class_name):
            return REASON_TEST_ONLY
        return REASON_NO_DEPENDENTS

    def method_reason(self, full_name: str) -> str:
        usage = self.ledger.get_method_usage(full_name)
        if usage is not None and usage.has_usage(UsageTag.TEST):
            return REASON_TEST_ONLY
        return REASON_NO_DEPENDENTS

    def unused_entries(self) -> List[UnusedEntry]:
        entries = [UnusedEntry(c, self.class_reason(c), "class") for c in self.unused_classes()]
        entries.extend(
            UnusedEntry(m, self.method_reason(m), "method") for m in self.unused_methods()
        )
        return entries
