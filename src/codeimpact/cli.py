"""Command-line interface for codeimpact."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config_loader import load_config, save_example_config
from .impact import ImpactReport
from .pipeline import run
from .session import AnalysisSession


def _print_summary(session: AnalysisSession) -> None:
    unused_classes = session.unused_classes()
    unused_methods = session.unused_methods()
    print(f"Classes: {len(session.all_classes())}")
    print(f"Methods: {len(session.all_method_usages())}")
    print(f"Unused classes: {len(unused_classes)}")
    for name in unused_classes:
        print(f"  - {name}")
    print(f"Unused methods: {len(unused_methods)}")
    for name in unused_methods:
        print(f"  - {name}")


def _print_impact(report: ImpactReport) -> None:
    print(f"Impact of {report.kind} {report.root}: {report.total} affected ({report.severity.value})")
    for name in report.directly_affected:
        print(f"  direct:   {name}")
    for name in report.indirectly_affected:
        print(f"  indirect: {' <- '.join(report.paths[name])}")


def impact_for(session: AnalysisSession, target: str) -> ImpactReport:
    """Class report when ``target`` is a known class, method report otherwise."""
    if target in session.all_classes():
        return session.class_impact(target)
    return session.method_impact(target)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="codeimpact",
        description="Dependency, unused-code and change-impact analysis for Java/JSF projects.",
    )
    parser.add_argument("project_dir", type=Path, nargs="?", default=Path("."), help="Project root")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output directory (default from config)")
    parser.add_argument("--config", type=Path, default=None, help="Config file (default: auto-discover)")
    parser.add_argument("--format", choices=["svg", "png", "pdf"], default=None, help="Graph format")
    parser.add_argument("--no-graph", action="store_true", help="Skip graph rendering")
    parser.add_argument("--impact", default=None, help="Print the impact of a class or class.method")
    parser.add_argument("--init", action="store_true", help="Write an example codeimpact.yaml and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose (debug) output")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("codeimpact").setLevel(logging.DEBUG)

    if args.init:
        target = args.project_dir / "codeimpact.yaml"
        if target.exists():
            print(f"{target} already exists")
            sys.exit(1)
        print(f"Wrote {save_example_config(target)}")
        return

    try:
        config = load_config(args.config, base_dir=args.project_dir)
    except (FileNotFoundError, ValueError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(2)
    if args.format:
        config.format = args.format
    if args.no_graph:
        config.render_graph = False

    result = run(args.project_dir, config, output=args.output)
    _print_summary(result.session)
    print(f"Report: {result.report_path}")
    if result.graph_path:
        print(f"Graph: {result.graph_path}")
    elif result.dot_path:
        print(f"Graph (DOT only): {result.dot_path}")

    if args.impact:
        _print_impact(impact_for(result.session, args.impact))


if __name__ == "__main__":
    main()
