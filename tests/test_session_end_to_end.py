from __future__ import annotations

from codeimpact import evidence as ev
from codeimpact.node_types import EdgeLabel
from codeimpact.session import AnalysisSession


def test_import_used_by_call_becomes_reference() -> None:
    s = AnalysisSession()
    s.graph.add_class("com.x.A")
    s.graph.add_class("com.x.B")
    s.graph.add_dependency("com.x.A", "com.x.B", EdgeLabel.IMPORT)
    s.graph.add_method_call("com.x.A", "m", "com.x.B", "n")
    s.ledger.mark_import_as_used("com.x.A", "com.x.B")

    assert s.dependencies_of("com.x.A") == {"com.x.B": EdgeLabel.REFERENCE}
    assert s.used_imports("com.x.A") == {"com.x.B"}
    assert s.unused_imports("com.x.A") == set()
    assert s.method_call_hierarchy() == {"com.x.A.m": ["com.x.B.n"]}


def test_small_application_through_evidence() -> None:
    s = AnalysisSession()
    count = s.ingest(
        [
            ev.ClassDeclared("com.app.MemberController"),
            ev.ClassAnnotated("com.app.MemberController", "Named"),
            ev.ImportSeen("com.app.MemberController", "com.app.data.MemberRepository"),
            ev.ImportSeen("com.app.MemberController", "java.util.logging.Logger"),
            ev.TypeReferenceResolved("com.app.MemberController", "com.app.data.MemberRepository"),
            ev.MethodCallResolved(
                "com.app.MemberController", "register", "com.app.data.MemberRepository", "save"
            ),
            ev.MethodDeclared("com.app.MemberController", "register"),
            ev.ClassDeclared("com.app.data.MemberRepository"),
            ev.MethodDeclared("com.app.data.MemberRepository", "save"),
            ev.MethodDeclared("com.app.data.MemberRepository", "purge"),
            ev.ClassDeclared("com.app.Legacy"),
            ev.MarkupMethodReferenced("memberController", "register", "index.xhtml"),
        ]
    )
    assert count == 12
    assert s.all_classes()[0] == "com.app.MemberController"
    # an import nobody uses leaves its target unreferenced
    assert s.unused_classes() == ["com.app.Legacy", "java.util.logging.Logger"]
    assert s.unused_methods() == ["com.app.data.MemberRepository.purge"]
    assert s.unused_imports("com.app.MemberController") == {"java.util.logging.Logger"}
    assert s.referenced_types("com.app.MemberController") == {"com.app.data.MemberRepository"}
    assert s.is_class_used_by_framework("com.app.MemberController")
    assert not s.is_class_used_by_test("com.app.MemberController")
    assert s.method_usage_types()["com.app.MemberController.register"] == ["FRAMEWORK"]
    assert s.method_usage_types()["com.app.data.MemberRepository.save"] == ["CALLED"]

    impact = s.class_impact("com.app.data.MemberRepository")
    assert impact.directly_affected == ["com.app.MemberController"]
    assert impact.to_dict()["impactRadius"]["severityLevel"] == "LOW"
    assert s.direct_callers_of("com.app.data.MemberRepository.save") == [
        "com.app.MemberController.register"
    ]
