"""
Analysis session - one run's graph, ledger and classification engine plus the
read-only query surface used by the exporter, renderer and CLI.

Everything is ingested first (``ingest``), then read. Queries on unknown names
return empty results.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from .annotations import AnnotationVocabulary
from .classification import ClassificationEngine
from .evidence import Evidence
from .graph_store import DependencyGraph
from .impact import ImpactAnalyzer, ImpactReport
from .node_types import EdgeLabel, MethodUsage
from .unused_code import UnusedCodeDetector, UnusedEntry
from .usage_ledger import UsageLedger

logger = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(
        self,
        vocabulary: Optional[AnnotationVocabulary] = None,
        report_test_only: bool = False,
    ) -> None:
        self.graph = DependencyGraph()
        self.ledger = UsageLedger(self.graph)
        self.engine = ClassificationEngine(self.graph, self.ledger, vocabulary)
        self.detector = UnusedCodeDetector(self.graph, self.ledger, report_test_only)
        self.analyzer = ImpactAnalyzer(self.graph, self.method_call_hierarchy)

    def ingest(self, events: Iterable[Evidence]) -> int:
        count = self.engine.apply_all(events)
        logger.debug("applied %d evidence events (%d classes)", count, len(self.graph))
        return count

    # --- graph ---
    def all_classes(self) -> List[str]:
        return self.graph.get_all_classes()

    def dependencies_of(self, class_name: str) -> Dict[str, EdgeLabel]:
        return {e.target: e.label for e in self.graph.get_dependencies(class_name)}

    def referenced_types(self, class_name: str) -> Set[str]:
        return self.engine.referenced_types(class_name)

    # --- ledger ---
    def used_imports(self, class_name: str) -> Set[str]:
        return self.ledger.used_imports(class_name)

    def unused_imports(self, class_name: str) -> Set[str]:
        return self.ledger.unused_imports(class_name)

    def is_class_used_by_framework(self, class_name: str) -> bool:
        return self.ledger.is_class_used_by_framework(class_name)

    def is_class_used_by_test(self, class_name: str) -> bool:
        return self.ledger.is_class_used_by_test(class_name)

    def all_method_usages(self) -> List[MethodUsage]:
        return self.ledger.all_method_usages()

    def method_usage_types(self) -> Dict[str, List[str]]:
        """``class.method`` -> sorted tag names."""
        return {
            u.full_name: sorted(t.value for t in u.usages)
            for u in sorted(self.ledger.all_method_usages(), key=lambda u: u.full_name)
        }

    def method_call_hierarchy(self) -> Dict[str, List[str]]:
        """Caller ``class.method`` -> deduplicated, sorted callees; keys sorted."""
        calls: Dict[str, Set[str]] = {}
        for fact in self.graph.get_all_method_calls():
            calls.setdefault(fact.caller, set()).add(fact.callee)
        return {caller: sorted(calls[caller]) for caller in sorted(calls)}

    # --- unused code ---
    def unused_classes(self) -> List[str]:
        return self.detector.unused_classes()

    def unused_methods(self) -> List[str]:
        return self.detector.unused_methods()

    def unused_entries(self) -> List[UnusedEntry]:
        return self.detector.unused_entries()

    # --- impact ---
    def impact_radius(self, class_name: str) -> Dict[str, List[str]]:
        return self.analyzer.impact_radius(class_name)

    def method_impact_radius(self, method_full_name: str) -> Dict[str, List[str]]:
        return self.analyzer.method_impact_radius(method_full_name)

    def callers_index(self) -> Dict[str, List[str]]:
        return self.analyzer.callers_index()

    def direct_callers_of(self, method_full_name: str) -> List[str]:
        return self.analyzer.direct_callers_of(method_full_name)

    def class_impact(self, class_name: str) -> ImpactReport:
        return self.analyzer.class_impact(class_name)

    def method_impact(
        self, method_full_name: str, callers: Optional[Dict[str, List[str]]] = None
    ) -> ImpactReport:
        return self.analyzer.method_impact(method_full_name, callers)
