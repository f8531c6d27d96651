from __future__ import annotations

import pytest

from codeimpact.impact import Severity, class_severity, method_severity, walk_backwards
from codeimpact.node_types import EdgeLabel
from codeimpact.session import AnalysisSession


def _session(*edges: tuple) -> AnalysisSession:
    s = AnalysisSession()
    for src, dst in edges:
        s.graph.add_dependency(src, dst, EdgeLabel.REFERENCE)
    return s


def test_cycle_terminates_and_excludes_root() -> None:
    s = _session(("A", "B"), ("B", "C"), ("C", "A"))
    radius = s.impact_radius("A")
    assert set(radius) == {"B", "C"}
    for dependent, path in radius.items():
        assert path[0] == dependent
        assert path[-1] == "A"


def test_direct_and_indirect_split() -> None:
    # B depends on A, C depends on B only
    s = _session(("B", "A"), ("C", "B"))
    report = s.class_impact("A")
    assert report.directly_affected == ["B"]
    assert report.indirectly_affected == ["C"]
    assert report.paths["C"] == ["C", "B", "A"]
    assert report.total == 2
    assert report.severity == Severity.LOW


def test_first_discovered_path_wins() -> None:
    # B reaches R directly and through A; A is visited first (name order)
    s = _session(("A", "R"), ("B", "R"), ("B", "A"))
    radius = s.impact_radius("R")
    assert radius["A"] == ["A", "R"]
    assert radius["B"] == ["B", "A", "R"]


def test_unknown_root_is_empty() -> None:
    s = _session(("A", "B"))
    assert s.impact_radius("nope.Missing") == {}
    report = s.class_impact("nope.Missing")
    assert report.total == 0
    assert report.severity == Severity.NONE


@pytest.mark.parametrize(
    "size,expected",
    [(0, "NONE"), (1, "LOW"), (5, "LOW"), (6, "MEDIUM"), (10, "MEDIUM"), (11, "HIGH")],
)
def test_class_severity_boundaries(size: int, expected: str) -> None:
    assert class_severity(size).value == expected


@pytest.mark.parametrize(
    "size,expected",
    [(0, "NONE"), (5, "LOW"), (10, "MEDIUM"), (11, "HIGH"), (15, "HIGH"), (16, "CRITICAL")],
)
def test_method_severity_boundaries(size: int, expected: str) -> None:
    assert method_severity(size).value == expected


def test_class_impact_severity_from_star_graph() -> None:
    s = _session(*[(f"D{i:02d}", "Core") for i in range(11)])
    assert s.class_impact("Core").severity == Severity.HIGH


def test_method_impact_walks_callers_of_callers() -> None:
    s = AnalysisSession()
    s.graph.add_method_call("a.A", "x", "b.B", "y")
    s.graph.add_method_call("a.A", "x", "b.B", "y")
    s.graph.add_method_call("c.C", "z", "a.A", "x")
    s.graph.add_method_call("b.B", "y", "c.C", "z")  # cycle back

    assert s.method_call_hierarchy() == {
        "a.A.x": ["b.B.y"],
        "b.B.y": ["c.C.z"],
        "c.C.z": ["a.A.x"],
    }
    assert s.direct_callers_of("b.B.y") == ["a.A.x"]
    radius = s.method_impact_radius("b.B.y")
    assert radius == {"a.A.x": ["a.A.x", "b.B.y"], "c.C.z": ["c.C.z", "a.A.x", "b.B.y"]}

    report = s.method_impact("b.B.y")
    assert report.directly_affected == ["a.A.x"]
    assert report.indirectly_affected == ["c.C.z"]
    assert report.to_dict() == {
        "method": "b.B.y",
        "type": "method",
        "impactRadius": {
            "directlyAffected": ["a.A.x"],
            "indirectlyAffected": ["c.C.z"],
            "totalImpact": 2,
            "severityLevel": "LOW",
        },
    }


def test_method_impact_of_uncalled_method_is_empty() -> None:
    s = AnalysisSession()
    s.graph.add_method_call("a.A", "x", "b.B", "y")
    assert s.method_impact_radius("a.A.x") == {}
    assert s.direct_callers_of("a.A.x") == []


def test_walk_backwards_is_iterative_on_long_chains() -> None:
    n = 1500
    preds = {str(i): [str(i + 1)] for i in range(n)}
    radius = walk_backwards("0", lambda node: preds.get(node, []))
    assert len(radius) == n
    assert radius[str(n)][0] == str(n)


def test_method_impact_reuses_a_prebuilt_callers_index() -> None:
    s = AnalysisSession()
    s.graph.add_method_call("a.A", "x", "b.B", "y")
    s.graph.add_method_call("c.C", "z", "a.A", "x")
    callers = s.callers_index()
    assert callers == {"b.B.y": ["a.A.x"], "a.A.x": ["c.C.z"]}
    assert s.method_impact("b.B.y", callers).paths == s.method_impact("b.B.y").paths
    assert s.method_impact("a.A.x", callers).directly_affected == ["c.C.z"]
