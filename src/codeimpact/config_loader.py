"""
Config loader - YAML files or ``[tool.codeimpact]`` in pyproject.toml.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

from .annotations import AnnotationVocabulary
from .config_schema import validate_config_data

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = (
    "codeimpact.yaml",
    "codeimpact.yml",
    ".codeimpact.yaml",
    ".codeimpact.yml",
    "pyproject.toml",  # only with [tool.codeimpact]
)


@dataclass
class RulesConfig:
    """Classification rules"""
    framework_annotations: List[str] = field(default_factory=list)
    test_annotations: List[str] = field(default_factory=list)
    # also report code that only tests use
    report_test_only: bool = False
    # package prefixes kept in the rendered graph; empty = everything
    project_packages: List[str] = field(default_factory=list)

    def vocabulary(self) -> AnnotationVocabulary:
        return AnnotationVocabulary.extended(self.framework_annotations, self.test_annotations)


@dataclass
class ExtendedConfig:
    source_roots: List[str] = field(default_factory=lambda: ["src/main/java", "src/test/java"])
    # a file is test code when one of its directories has one of these names
    test_dirs: List[str] = field(default_factory=lambda: ["test"])
    webapp_dir: str = "src/main/webapp"
    markup_include: List[str] = field(default_factory=lambda: ["**/*.xhtml"])
    exclude: List[str] = field(default_factory=lambda: [
        "**/target/**", "**/build/**", "**/.git/**", "**/node_modules/**"
    ])
    output: str = "codeimpact_results"
    format: str = "svg"
    render_graph: bool = True

    rules: RulesConfig = field(default_factory=RulesConfig)


def load_config(config_path: Optional[Path] = None, base_dir: Optional[Path] = None) -> ExtendedConfig:
    """
    Load a config file.

    Args:
        config_path: explicit file; when None the file is discovered in ``base_dir``
        base_dir: directory searched for config files (default: cwd)

    Returns:
        ExtendedConfig: loaded config, or the defaults when nothing was found
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found = find_config_file(base_dir)
    if found:
        logger.info("Using config file %s", found)
        return _load_config_file(found)

    logger.info("No config file found, using defaults")
    return ExtendedConfig()


def find_config_file(base_dir: Optional[Path] = None) -> Optional[Path]:
    """First config candidate that exists in ``base_dir``."""
    base = Path(base_dir) if base_dir is not None else Path(".")
    for name in CONFIG_CANDIDATES:
        candidate = base / name
        if not candidate.exists():
            continue
        if candidate.name == "pyproject.toml":
            if _has_codeimpact_config(candidate):
                return candidate
            continue
        return candidate
    return None


def _load_config_file(config_path: Path) -> ExtendedConfig:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix in [".yaml", ".yml"]:
        return _load_yaml_config(config_path)
    elif suffix == ".toml":
        return _load_toml_config(config_path)
    else:
        raise ValueError(f"Unsupported config file format: {suffix}")


def _load_yaml_config(config_path: Path) -> ExtendedConfig:
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        return ExtendedConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")
    return _parse_config_data(data)


def _load_toml_config(config_path: Path) -> ExtendedConfig:
    with config_path.open("rb") as f:
        data = tomli.load(f)

    # pyproject.toml layout
    if "tool" in data and "codeimpact" in data["tool"]:
        config_data = data["tool"]["codeimpact"]
    else:
        config_data = data

    return _parse_config_data(config_data)


def _has_codeimpact_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        logger.warning("Cannot read %s: %s", pyproject_path, e)
        return False
    return "tool" in data and "codeimpact" in data["tool"]


def _parse_config_data(data: Dict[str, Any]) -> ExtendedConfig:
    model = validate_config_data(data)
    config = ExtendedConfig()

    if model.source_roots is not None:
        config.source_roots = model.source_roots
    if model.test_dirs is not None:
        config.test_dirs = model.test_dirs
    if model.webapp_dir is not None:
        config.webapp_dir = model.webapp_dir
    if model.markup_include is not None:
        config.markup_include = model.markup_include
    if model.exclude is not None:
        config.exclude = model.exclude
    if model.output is not None:
        config.output = model.output
    if model.format is not None:
        config.format = model.format
    if model.render_graph is not None:
        config.render_graph = model.render_graph

    config.rules = RulesConfig(
        framework_annotations=list(model.rules.framework_annotations),
        test_annotations=list(model.rules.test_annotations),
        report_test_only=model.rules.report_test_only,
        project_packages=list(model.rules.project_packages),
    )
    return config


def create_example_config() -> str:
    """Commented example config."""
    return """# codeimpact configuration
version: "1.0"

# Java source roots, relative to the project root
source_roots:
  - "src/main/java"
  - "src/test/java"
# directory names that mark test code
test_dirs:
  - "test"

# JSF/XHTML pages scanned for EL bean references
webapp_dir: "src/main/webapp"
markup_include:
  - "**/*.xhtml"

exclude:
  - "**/target/**"
  - "**/build/**"
  - "**/.git/**"
  - "**/node_modules/**"

output: "codeimpact_results"
format: "svg"        # svg|png|pdf
render_graph: true

rules:
  # extra annotations (simple or qualified names)
  framework_annotations: []
  #  - "Scheduled"
  test_annotations: []
  # also report code whose only usage comes from tests
  report_test_only: false
  # restrict the rendered graph to these package prefixes
  project_packages: []
  #  - "com.example"
"""


def save_example_config(output_path: Optional[Path] = None) -> Path:
    if output_path is None:
        output_path = Path("codeimpact.yaml")

    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path
