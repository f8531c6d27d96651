"""
Pydantic schema for codeimpact configuration files.

Catches unknown or misspelled keys and wrong value types before the loader
turns the raw mapping into dataclasses.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class RulesModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    framework_annotations: List[str] = Field(default_factory=list)
    test_annotations: List[str] = Field(default_factory=list)
    report_test_only: bool = False
    project_packages: List[str] = Field(default_factory=list)


class ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    version: Optional[str] = None
    source_roots: Optional[List[str]] = None
    test_dirs: Optional[List[str]] = None
    webapp_dir: Optional[str] = None
    markup_include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    output: Optional[str] = None
    format: Optional[Literal["svg", "png", "pdf"]] = None
    render_graph: Optional[bool] = None
    rules: RulesModel = RulesModel()


def validate_config_data(data: Dict[str, Any]) -> ConfigModel:
    """Validate a raw config mapping.

    Raises:
        ValueError: with pydantic's message when validation fails.
    """
    try:
        return ConfigModel.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid codeimpact configuration:\n{e}") from e
