"""Orchestration: config -> producers -> session -> report and graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config_loader import ExtendedConfig
from .exporter import save_report
from .graphviz_render import render_dependency_graph
from .java_extractor import extract_project
from .markup_scanner import scan_webapp
from .session import AnalysisSession

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    session: AnalysisSession
    report_path: Path
    dot_path: str = ""
    graph_path: str = ""


def analyze_project(project_root: Path, config: Optional[ExtendedConfig] = None) -> AnalysisSession:
    """Build a session from the Java sources and markup pages of ``project_root``.

    Java evidence is applied before markup so bean tokens can match every
    declared class.
    """
    config = config or ExtendedConfig()
    project_root = Path(project_root)
    session = AnalysisSession(
        vocabulary=config.rules.vocabulary(),
        report_test_only=config.rules.report_test_only,
    )
    session.ingest(
        extract_project(project_root, config.source_roots, config.test_dirs, config.exclude)
    )
    session.ingest(scan_webapp(project_root / config.webapp_dir, config.markup_include))
    logger.info(
        "Analyzed %s: %d classes, %d methods",
        project_root, len(session.all_classes()), len(session.all_method_usages()),
    )
    return session


def run(
    project_root: Path,
    config: Optional[ExtendedConfig] = None,
    output: Optional[Path] = None,
) -> RunResult:
    """Analyze, write ``code-data.json`` and optionally render the class graph."""
    config = config or ExtendedConfig()
    session = analyze_project(project_root, config)
    output_dir = Path(output) if output is not None else Path(project_root) / config.output
    result = RunResult(session=session, report_path=save_report(session, output_dir))

    if config.render_graph:
        result.dot_path, result.graph_path = render_dependency_graph(
            session,
            str(output_dir / "class_dependencies"),
            fmt=config.format,
            project_packages=config.rules.project_packages,
        )
        if not result.graph_path:
            logger.warning("graphviz 'dot' not found; wrote %s only", result.dot_path)
    return result
