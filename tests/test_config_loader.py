from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from codeimpact.config_loader import (
    ExtendedConfig,
    create_example_config,
    find_config_file,
    load_config,
    save_example_config,
)


def test_defaults_when_nothing_found(tmp_path: Path) -> None:
    cfg = load_config(base_dir=tmp_path)
    assert cfg == ExtendedConfig()
    assert cfg.source_roots == ["src/main/java", "src/test/java"]
    assert cfg.rules.report_test_only is False


def test_yaml_overrides_and_rules(tmp_path: Path) -> None:
    (tmp_path / "codeimpact.yaml").write_text(
        "webapp_dir: web\n"
        "format: png\n"
        "rules:\n"
        "  framework_annotations: ['org.example.Job']\n"
        "  report_test_only: true\n",
        encoding="utf-8",
    )
    cfg = load_config(base_dir=tmp_path)
    assert cfg.webapp_dir == "web"
    assert cfg.format == "png"
    assert cfg.source_roots == ["src/main/java", "src/test/java"]
    assert cfg.rules.report_test_only is True
    vocab = cfg.rules.vocabulary()
    assert vocab.is_framework("Job")
    assert vocab.is_framework("Inject")


def test_yaml_wins_over_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.codeimpact]\noutput = 'toml_out'\n", encoding="utf-8")
    assert find_config_file(tmp_path) == tmp_path / "pyproject.toml"
    (tmp_path / ".codeimpact.yml").write_text("output: yaml_out\n", encoding="utf-8")
    assert find_config_file(tmp_path) == tmp_path / ".codeimpact.yml"
    assert load_config(base_dir=tmp_path).output == "yaml_out"


def test_pyproject_without_section_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
    assert find_config_file(tmp_path) is None


def test_toml_file_is_loaded(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[tool.codeimpact]\nrender_graph = false\n\n[tool.codeimpact.rules]\nproject_packages = ['com.app']\n",
        encoding="utf-8",
    )
    cfg = load_config(tmp_path / "pyproject.toml")
    assert cfg.render_graph is False
    assert cfg.rules.project_packages == ["com.app"]


def test_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
    bad_suffix = tmp_path / "cfg.json"
    bad_suffix.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(bad_suffix)
    typo = tmp_path / "typo.yaml"
    typo.write_text("source_root: [src]\n", encoding="utf-8")
    with pytest.raises(ValueError, match="source_root"):
        load_config(typo)
    bad_format = tmp_path / "fmt.yaml"
    bad_format.write_text("format: bmp\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(bad_format)


def test_example_config_round_trips(tmp_path: Path) -> None:
    data = yaml.safe_load(create_example_config())
    assert data["webapp_dir"] == "src/main/webapp"
    path = save_example_config(tmp_path / "codeimpact.yaml")
    assert load_config(path) == ExtendedConfig()
