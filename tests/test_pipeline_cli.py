from __future__ import annotations

import json
from pathlib import Path

import pytest

from codeimpact.cli import main
from codeimpact.config_loader import ExtendedConfig
from codeimpact.pipeline import analyze_project, run


def _w(p: Path, rel: str, content: str) -> None:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def _project(root: Path) -> Path:
    _w(
        root,
        "src/main/java/com/app/MemberController.java",
        "package com.app;\n\npublic class MemberController {\n"
        "    public void register() {\n        audit();\n    }\n\n"
        "    void audit() {\n    }\n\n"
        "    public void unusedAction() {\n    }\n}\n",
    )
    _w(root, "src/main/java/com/app/Orphan.java", "package com.app;\n\npublic class Orphan {\n}\n")
    _w(root, "src/main/webapp/index.xhtml", '<h:commandButton action="#{memberController.register}"/>\n')
    return root


def test_markup_evidence_applies_after_java(tmp_path: Path) -> None:
    session = analyze_project(_project(tmp_path))
    assert session.is_class_used_by_framework("com.app.MemberController")
    assert session.unused_classes() == ["com.app.Orphan"]
    assert session.unused_methods() == ["com.app.MemberController.unusedAction"]


def test_run_without_graph_writes_report(tmp_path: Path) -> None:
    root = _project(tmp_path)
    cfg = ExtendedConfig(render_graph=False)
    result = run(root, cfg)
    assert result.report_path == root / "codeimpact_results" / "code-data.json"
    assert result.dot_path == ""
    data = json.loads(result.report_path.read_text(encoding="utf-8"))
    assert [c["id"] for c in data["unusedCode"]["classes"]] == ["com.app.Orphan"]


def test_cli_summary_and_impact(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(tmp_path)
    main([str(root), "--no-graph", "-o", str(tmp_path / "out"), "--impact", "com.app.MemberController.audit"])
    out = capsys.readouterr().out
    assert "Unused classes: 1" in out
    assert "  - com.app.Orphan" in out
    assert "Impact of method com.app.MemberController.audit: 1 affected (LOW)" in out
    assert (tmp_path / "out" / "code-data.json").exists()


def test_cli_init_writes_config_once(tmp_path: Path) -> None:
    main([str(tmp_path), "--init"])
    assert (tmp_path / "codeimpact.yaml").exists()
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "--init"])
    assert exc.value.code == 1


def test_cli_reports_config_errors(tmp_path: Path) -> None:
    (tmp_path / "codeimpact.yaml").write_text("unknown_key: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "--no-graph"])
    assert exc.value.code == 2
