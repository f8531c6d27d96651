"""
Usage ledger - framework/test usage sets, per-method usage tags and
per-class used/unused import bookkeeping. Every mark is idempotent.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from .graph_store import DependencyGraph
from .node_types import EdgeLabel, MethodUsage, UsageTag, WEAK_LABELS, method_key


class UsageLedger:
    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph
        self.classes_used_by_framework: Set[str] = set()
        self.methods_used_by_framework: Set[str] = set()
        self.classes_used_by_test: Set[str] = set()
        self.methods_used_by_test: Set[str] = set()
        self._used_imports: Dict[str, Set[str]] = {}
        self._unused_imports: Dict[str, Set[str]] = {}
        self._method_usages: Dict[str, MethodUsage] = {}

    # --- class / method marks ---
    def mark_class_used_by_framework(self, class_name: str) -> None:
        self.classes_used_by_framework.add(class_name)

    def mark_class_used_by_test(self, class_name: str) -> None:
        self.classes_used_by_test.add(class_name)

    def mark_method_used_by_framework(self, class_name: str, method_name: str) -> None:
        self.methods_used_by_framework.add(method_key(class_name, method_name))

    def mark_method_used_by_test(self, class_name: str, method_name: str) -> None:
        self.methods_used_by_test.add(method_key(class_name, method_name))

    def register_method(self, class_name: str, method_name: str) -> MethodUsage:
        key = method_key(class_name, method_name)
        usage = self._method_usages.get(key)
        if usage is None:
            usage = MethodUsage(class_name, method_name)
            self._method_usages[key] = usage
        return usage

    def mark_method_usage(self, class_name: str, method_name: str, tag: UsageTag) -> None:
        self.register_method(class_name, method_name).add_usage(tag)

    # --- imports ---
    def note_import_seen(self, class_name: str, import_name: str) -> None:
        """Record an import as unused until some evidence proves otherwise."""
        if self.is_import_used(class_name, import_name):
            return
        self._unused_imports.setdefault(class_name, set()).add(import_name)

    def mark_import_as_used(self, class_name: str, import_name: str) -> None:
        self._used_imports.setdefault(class_name, set()).add(import_name)
        unused = self._unused_imports.get(class_name)
        if unused is not None:
            unused.discard(import_name)
        # Upgrade only weak labels; strong ones already prove use
        if self.graph.label_of(class_name, import_name) in WEAK_LABELS:
            self.graph.update_label(class_name, import_name, EdgeLabel.REFERENCE)

    def is_import_used(self, class_name: str, import_name: str) -> bool:
        return import_name in self._used_imports.get(class_name, ())

    def used_imports(self, class_name: str) -> Set[str]:
        return set(self._used_imports.get(class_name, ()))

    def unused_imports(self, class_name: str) -> Set[str]:
        return set(self._unused_imports.get(class_name, ()))

    # --- reads ---
    def is_class_used_by_framework(self, class_name: str) -> bool:
        return class_name in self.classes_used_by_framework

    def is_class_used_by_test(self, class_name: str) -> bool:
        return class_name in self.classes_used_by_test

    def is_method_used_by_framework(self, class_name: str, method_name: str) -> bool:
        return method_key(class_name, method_name) in self.methods_used_by_framework

    def is_method_used_by_test(self, class_name: str, method_name: str) -> bool:
        return method_key(class_name, method_name) in self.methods_used_by_test

    def get_method_usage(self, full_name: str) -> Optional[MethodUsage]:
        return self._method_usages.get(full_name)

    def all_method_usages(self) -> List[MethodUsage]:
        return list(self._method_usages.values())

    def methods_named(self, method_name: str) -> List[MethodUsage]:
        return [u for u in self._method_usages.values() if u.method_name == method_name]
