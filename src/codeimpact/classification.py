"""
Classification engine - turns evidence events into graph edges, call facts
and usage marks.

Rules, in short:
 - Edges only ever move from a weak label (IMPORT, UNRESOLVED_REFERENCE) to a
   strong one (REFERENCE, ANNOTATION_REFERENCE, STATIC_IMPORT); an existing
   strong label is never overwritten.
 - Resolved references/calls add REFERENCE edges and mark the matching import
   used; unresolved ones fall back to a deterministic name heuristic.
 - Calls made from test code mark their callee as test-used.
 - Unresolved calls from test code tag every known method with the same bare
   name as TEST. Name-only over-approximation: no type check.
 - Markup bean tokens match classes by default bean name; all matches count.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from . import evidence as ev
from .annotations import AnnotationVocabulary
from .evidence import FallbackName, ImportRecord, ResolvedName, TypeName, fallback_name
from .graph_store import DependencyGraph
from .node_types import (
    STRONG_LABELS,
    UNRESOLVED_CLASS,
    WEAK_LABELS,
    EdgeLabel,
    UsageTag,
    default_bean_name,
)
from .usage_ledger import UsageLedger

logger = logging.getLogger(__name__)


class ClassificationEngine:
    def __init__(
        self,
        graph: DependencyGraph,
        ledger: UsageLedger,
        vocabulary: Optional[AnnotationVocabulary] = None,
    ) -> None:
        self.graph = graph
        self.ledger = ledger
        self.vocabulary = vocabulary or AnnotationVocabulary()
        self._imports: Dict[str, List[ImportRecord]] = {}
        self._referenced: Dict[str, Set[str]] = {}
        self._handlers = {
            ev.ClassDeclared: self._on_class_declared,
            ev.ClassAnnotated: self._on_class_annotated,
            ev.TestFileMarker: self._on_test_file,
            ev.ImportSeen: self._on_import,
            ev.TypeReferenceResolved: self._on_type_resolved,
            ev.TypeReferenceUnresolved: self._on_type_unresolved,
            ev.AnnotationReferenceResolved: self._on_annotation_reference,
            ev.MethodDeclared: self._on_method_declared,
            ev.MethodAnnotated: self._on_method_annotated,
            ev.MethodCallResolved: self._on_call_resolved,
            ev.MethodCallUnresolved: self._on_call_unresolved,
            ev.MarkupBeanReferenced: self._on_markup_bean,
            ev.MarkupMethodReferenced: self._on_markup_method,
        }

    # --- entry points ---
    def apply(self, event: ev.Evidence) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported evidence type: {type(event).__name__}")
        handler(event)

    def apply_all(self, events: Iterable[ev.Evidence]) -> int:
        count = 0
        for event in events:
            self.apply(event)
            count += 1
        return count

    # --- helpers ---
    def imports_of(self, class_name: str) -> List[ImportRecord]:
        return list(self._imports.get(class_name, ()))

    def referenced_types(self, class_name: str) -> Set[str]:
        return set(self._referenced.get(class_name, ()))

    def resolve_fallback(self, class_name: str, name: str) -> FallbackName:
        return fallback_name(name, self._imports.get(class_name, ()), class_name)

    def link(self, source: str, target: str, label: EdgeLabel) -> None:
        """Add an edge, or upgrade a weak one to a strong label. Never downgrades."""
        current = self.graph.label_of(source, target)
        if current is None or (current in WEAK_LABELS and label in STRONG_LABELS):
            self.graph.add_dependency(source, target, label)

    def has_import(self, class_name: str, name: str) -> bool:
        return any(imp.name == name for imp in self._imports.get(class_name, ()))

    def _record_use(self, class_name: str, name: TypeName, label: EdgeLabel) -> None:
        target = name.qualified_name
        if target == class_name:
            return
        self.link(class_name, target, label)
        self._referenced.setdefault(class_name, set()).add(target)
        if self.has_import(class_name, target):
            self.ledger.mark_import_as_used(class_name, target)

    # --- class-level evidence ---
    def _on_class_declared(self, e: ev.ClassDeclared) -> None:
        self.graph.add_class(e.class_name)

    def _on_class_annotated(self, e: ev.ClassAnnotated) -> None:
        self.graph.add_class(e.class_name)
        if self.vocabulary.is_framework(e.annotation):
            self.ledger.mark_class_used_by_framework(e.class_name)
        if self.vocabulary.is_test(e.annotation):
            self.ledger.mark_class_used_by_test(e.class_name)

    def _on_test_file(self, e: ev.TestFileMarker) -> None:
        self.graph.add_class(e.class_name)
        self.ledger.mark_class_used_by_test(e.class_name)

    def _on_import(self, e: ev.ImportSeen) -> None:
        record = ImportRecord(e.import_name, e.is_static, e.is_wildcard)
        known = self._imports.setdefault(e.class_name, [])
        if record not in known:
            known.append(record)
        self.graph.add_class(e.class_name)
        label = EdgeLabel.STATIC_IMPORT if e.is_static else EdgeLabel.IMPORT
        self.link(e.class_name, e.import_name, label)
        if e.is_wildcard:
            return
        if e.is_static:
            self.ledger.mark_import_as_used(e.class_name, e.import_name)
        else:
            self.ledger.note_import_seen(e.class_name, e.import_name)

    # --- type references ---
    def _on_type_resolved(self, e: ev.TypeReferenceResolved) -> None:
        self._record_use(e.class_name, ResolvedName(e.referenced), EdgeLabel.REFERENCE)

    def _on_type_unresolved(self, e: ev.TypeReferenceUnresolved) -> None:
        guess = self.resolve_fallback(e.class_name, e.name)
        if guess.qualified_name == e.class_name:
            return
        self.link(e.class_name, guess.qualified_name, EdgeLabel.UNRESOLVED_REFERENCE)
        if guess.rule == "import":
            self.ledger.mark_import_as_used(e.class_name, guess.qualified_name)
        logger.debug(
            "unresolved %s in %s -> %s (%s)", e.name, e.class_name, guess.qualified_name, guess.rule
        )

    def _on_annotation_reference(self, e: ev.AnnotationReferenceResolved) -> None:
        self._record_use(
            e.class_name, ResolvedName(e.annotation), EdgeLabel.ANNOTATION_REFERENCE
        )

    # --- methods ---
    def _on_method_declared(self, e: ev.MethodDeclared) -> None:
        self.graph.add_class(e.class_name)
        self.ledger.register_method(e.class_name, e.method_name)

    def _on_method_annotated(self, e: ev.MethodAnnotated) -> None:
        self.ledger.register_method(e.class_name, e.method_name)
        if self.vocabulary.is_framework(e.annotation):
            self.ledger.mark_method_used_by_framework(e.class_name, e.method_name)
            self.ledger.mark_method_usage(e.class_name, e.method_name, UsageTag.FRAMEWORK)
        if self.vocabulary.is_test(e.annotation):
            self.ledger.mark_method_used_by_test(e.class_name, e.method_name)
            self.ledger.mark_method_usage(e.class_name, e.method_name, UsageTag.TEST)

    def _on_call_resolved(self, e: ev.MethodCallResolved) -> None:
        self.graph.add_method_call(e.caller_class, e.caller_method, e.callee_class, e.callee_method)
        self.graph.add_class(e.callee_class)
        self._record_use(e.caller_class, ResolvedName(e.callee_class), EdgeLabel.REFERENCE)
        self.ledger.mark_method_usage(e.callee_class, e.callee_method, UsageTag.CALLED)
        if e.is_test_code:
            self.ledger.mark_class_used_by_test(e.callee_class)
            self.ledger.mark_method_used_by_test(e.callee_class, e.callee_method)
            self.ledger.mark_method_usage(e.callee_class, e.callee_method, UsageTag.TEST)

    def _on_call_unresolved(self, e: ev.MethodCallUnresolved) -> None:
        self.graph.add_method_call(e.caller_class, e.caller_method, UNRESOLVED_CLASS, e.callee_method)
        owner = self._match_unresolved_owner(e)
        if owner is not None:
            self._record_use(e.caller_class, FallbackName(owner, "import"), EdgeLabel.REFERENCE)
        if e.is_test_code:
            for usage in self.ledger.methods_named(e.callee_method):
                usage.add_usage(UsageTag.TEST)

    def _match_unresolved_owner(self, e: ev.MethodCallUnresolved) -> Optional[str]:
        imports = self._imports.get(e.caller_class, ())
        if not e.scope:
            # foo() may come from ``import static a.b.C.foo``
            for imp in imports:
                if imp.is_static and imp.name.endswith("." + e.callee_method):
                    return imp.name.rsplit(".", 1)[0]
            return None
        for imp in imports:
            if imp.name == e.scope or imp.name.endswith("." + e.scope):
                return imp.name
        return None

    # --- markup ---
    def classes_for_bean(self, bean: str) -> List[str]:
        return [c for c in self.graph.get_all_classes() if default_bean_name(c) == bean]

    def _on_markup_bean(self, e: ev.MarkupBeanReferenced) -> None:
        matches = self.classes_for_bean(e.bean)
        if not matches:
            logger.info("No matching class for bean '%s' (%s)", e.bean, e.file_name or "?")
            return
        for cls in matches:
            logger.debug("EL binding %s -> %s", e.bean, cls)
            self.ledger.mark_class_used_by_framework(cls)

    def _on_markup_method(self, e: ev.MarkupMethodReferenced) -> None:
        for cls in self.classes_for_bean(e.bean):
            logger.debug("EL method %s.%s -> %s", e.bean, e.method_name, cls)
            self.ledger.mark_class_used_by_framework(cls)
            self.ledger.mark_method_used_by_framework(cls, e.method_name)
            self.ledger.mark_method_usage(cls, e.method_name, UsageTag.FRAMEWORK)
