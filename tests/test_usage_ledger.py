from __future__ import annotations

from codeimpact.graph_store import DependencyGraph
from codeimpact.node_types import EdgeLabel, UsageTag
from codeimpact.usage_ledger import UsageLedger


def _ledger() -> UsageLedger:
    return UsageLedger(DependencyGraph())


def test_marks_are_idempotent() -> None:
    led = _ledger()
    led.mark_class_used_by_framework("a.A")
    led.mark_class_used_by_framework("a.A")
    led.mark_method_usage("a.A", "run", UsageTag.CALLED)
    led.mark_method_usage("a.A", "run", UsageTag.CALLED)
    assert led.classes_used_by_framework == {"a.A"}
    assert led.get_method_usage("a.A.run").usages == {UsageTag.CALLED}
    assert len(led.all_method_usages()) == 1


def test_register_method_creates_empty_usage_once() -> None:
    led = _ledger()
    first = led.register_method("a.A", "run")
    again = led.register_method("a.A", "run")
    assert first is again
    assert first.is_unused


def test_import_moves_from_unused_to_used_and_upgrades_weak_edge() -> None:
    led = _ledger()
    led.graph.add_dependency("a.A", "b.B", EdgeLabel.IMPORT)
    led.note_import_seen("a.A", "b.B")
    assert led.unused_imports("a.A") == {"b.B"}

    led.mark_import_as_used("a.A", "b.B")
    assert led.unused_imports("a.A") == set()
    assert led.used_imports("a.A") == {"b.B"}
    assert led.graph.label_of("a.A", "b.B") == EdgeLabel.REFERENCE

    # once used, seeing the import again does not demote it
    led.note_import_seen("a.A", "b.B")
    assert led.unused_imports("a.A") == set()


def test_import_upgrade_keeps_strong_labels_and_missing_edges() -> None:
    led = _ledger()
    led.graph.add_dependency("a.A", "b.B", EdgeLabel.STATIC_IMPORT)
    led.mark_import_as_used("a.A", "b.B")
    assert led.graph.label_of("a.A", "b.B") == EdgeLabel.STATIC_IMPORT

    led.mark_import_as_used("a.A", "c.C")
    assert led.graph.get_edge("a.A", "c.C") is None
    assert led.is_import_used("a.A", "c.C")


def test_methods_named_matches_bare_name_across_classes() -> None:
    led = _ledger()
    led.register_method("a.A", "save")
    led.register_method("b.B", "save")
    led.register_method("b.B", "load")
    names = sorted(u.full_name for u in led.methods_named("save"))
    assert names == ["a.A.save", "b.B.save"]


def test_returned_import_sets_are_copies() -> None:
    led = _ledger()
    led.note_import_seen("a.A", "b.B")
    led.unused_imports("a.A").add("x.X")
    assert led.unused_imports("a.A") == {"b.B"}
