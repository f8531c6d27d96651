from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .node_types import simple_name
from .session import AnalysisSession

# node fill by usage status
STATUS_COLORS = {
    "unused": "#F44336",  # red
    "framework": "#2196F3",  # blue
    "test": "#FFC107",  # amber
    "normal": "#4CAF50",  # green
}


def _in_packages(class_name: str, packages: Sequence[str]) -> bool:
    if not packages:
        return True
    return any(class_name == p or class_name.startswith(p + ".") for p in packages)


def class_status(session: AnalysisSession, class_name: str, unused: Iterable[str]) -> str:
    if class_name in unused:
        return "unused"
    if session.is_class_used_by_framework(class_name):
        return "framework"
    if session.is_class_used_by_test(class_name):
        return "test"
    return "normal"


def render_dependency_graph(
    session: AnalysisSession,
    output_base: str,
    fmt: str = "svg",
    project_packages: Sequence[str] = (),
) -> Tuple[str, str]:
    """
    Class dependency graph: strong edges solid, weak edges dashed.

    Returns (dot_path, rendered_path); rendered_path is "" when the graphviz
    ``dot`` binary is missing and only the .dot file was written.
    """
    dot = Digraph(
        "codeimpact",
        graph_attr={"rankdir": "LR", "splines": "spline"},
        node_attr={"shape": "box", "style": "rounded,filled", "fontname": "Helvetica"},
        edge_attr={"arrowhead": "vee"},
    )

    unused = set(session.unused_classes())
    shown = [c for c in session.all_classes() if _in_packages(c, project_packages)]
    shown_set = set(shown)
    for name in shown:
        status = class_status(session, name, unused)
        dot.node(name, label=f"{simple_name(name)}\n{status}", fillcolor=STATUS_COLORS[status], tooltip=name)

    for cls in shown:
        for edge in sorted(session.graph.get_dependencies(cls), key=lambda e: e.target):
            if edge.target not in shown_set:
                continue
            style = "solid" if edge.is_strong else "dashed"
            dot.edge(edge.source, edge.target, color="black", style=style, tooltip=edge.label.value)

    dot_path = f"{output_base}.dot"
    out_path = f"{output_base}.{fmt}"
    dot.save(dot_path)

    try:
        dot.render(output_base, format=fmt, cleanup=True)
    except ExecutableNotFound:
        # Only DOT written; caller should inform user
        out_path = ""
    return dot_path, out_path
