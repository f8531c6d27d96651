"""
codeimpact - dependency, unused-code and change-impact analysis for Java/JSF projects

    from codeimpact import analyze_project

    session = analyze_project("my-java-app")
    print(session.unused_classes())
    print(session.class_impact("com.example.Repo").severity)
"""


def analyze_project(*args, **kwargs):
    """Lazy import wrapper for analyze_project to avoid heavy imports at package import time."""
    from .pipeline import analyze_project as _analyze_project

    return _analyze_project(*args, **kwargs)


from .session import AnalysisSession

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("codeimpact")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = ["analyze_project", "AnalysisSession", "__version__"]
