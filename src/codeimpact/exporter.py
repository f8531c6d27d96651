"""
Report exporter - the ``code-data.json`` structure read by the frontend:
classes, methods, call graph, unused code and impact analysis.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .node_types import UsageTag, package_name, simple_name
from .session import AnalysisSession

REPORT_FILE = "code-data.json"


def _class_entries(session: AnalysisSession) -> List[Dict[str, Any]]:
    unused = set(session.unused_classes())
    entries = []
    for cls in session.all_classes():
        deps = sorted(session.dependencies_of(cls).items(), key=lambda kv: (kv[1].value, kv[0]))
        entries.append(
            {
                "id": cls,
                "fullName": cls,
                "simpleName": simple_name(cls),
                "packageName": package_name(cls),
                "unused": cls in unused,
                "framework": session.is_class_used_by_framework(cls),
                "test": session.is_class_used_by_test(cls),
                "dependsOn": [{"target": t, "type": label.value} for t, label in deps],
                "usedImports": [
                    {"name": n, "type": "IMPORT"} for n in sorted(session.used_imports(cls))
                ],
                "unusedImports": [
                    {"name": n, "type": "IMPORT"} for n in sorted(session.unused_imports(cls))
                ],
            }
        )
    return entries


def _method_entries(session: AnalysisSession, hierarchy: Dict[str, List[str]]) -> List[Dict[str, Any]]:
    entries = []
    for usage in sorted(session.all_method_usages(), key=lambda u: u.full_name):
        entries.append(
            {
                "declaringClass": usage.class_name,
                "name": usage.method_name,
                "fullName": usage.full_name,
                "called": usage.has_usage(UsageTag.CALLED),
                "framework": usage.has_usage(UsageTag.FRAMEWORK),
                "test": usage.has_usage(UsageTag.TEST),
                "unused": usage.is_unused,
                "calls": list(hierarchy.get(usage.full_name, [])),
            }
        )
    return entries


def _call_graph(session: AnalysisSession, hierarchy: Dict[str, List[str]]) -> Dict[str, Any]:
    # dict used as an ordered set
    node_ids: Dict[str, None] = {}
    for usage in sorted(session.all_method_usages(), key=lambda u: u.full_name):
        node_ids[usage.full_name] = None
    edges = []
    for caller, callees in hierarchy.items():
        node_ids.setdefault(caller, None)
        for callee in callees:
            node_ids.setdefault(callee, None)
            edges.append({"from": caller, "to": callee})
    return {
        "nodes": [{"id": n, "type": "method"} for n in node_ids],
        "edges": edges,
    }


def _impact_entries(session: AnalysisSession) -> List[Dict[str, Any]]:
    entries = []
    for cls in sorted(session.all_classes()):
        report = session.class_impact(cls)
        if report.total:
            entries.append(report.to_dict())
    callers = session.callers_index()
    for usage in sorted(session.all_method_usages(), key=lambda u: u.full_name):
        report = session.method_impact(usage.full_name, callers)
        if report.total:
            entries.append(report.to_dict())
    return entries


def build_report(session: AnalysisSession) -> Dict[str, Any]:
    hierarchy = session.method_call_hierarchy()
    unused = session.unused_entries()
    return {
        "classes": _class_entries(session),
        "methods": _method_entries(session, hierarchy),
        "callGraph": _call_graph(session, hierarchy),
        "unusedCode": {
            "classes": [e.to_dict() for e in unused if e.kind == "class"],
            "methods": [e.to_dict() for e in unused if e.kind == "method"],
        },
        "impactAnalysis": _impact_entries(session),
    }


def save_report(session: AnalysisSession, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / REPORT_FILE
    path.write_text(
        json.dumps(build_report(session), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return path
