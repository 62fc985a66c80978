"""Analysis configuration: relevance rules and role classification tables.

Defaults describe the free-run API of the original capture target. Every
table can be replaced from a YAML file, e.g.::

    relevance:
      keywords: [checkout, cart]
      field_signatures:
        - name: order
          fields: [sku, quantity]
    discovery_rules:
      submit_keywords: [submit, create]
"""

from pathlib import Path
from typing import List, Union

import yaml
from pydantic import BaseModel, Field


class SignatureConfig(BaseModel):
    """A named list of keys whose joint presence marks a relevant payload."""

    name: str
    fields: List[str]


def default_url_patterns() -> List[str]:
    return [
        r"/api/.*freerun",
        r"/totoro/.*freerun",
        r"/platform/recreord/freeRun",
        r"/run/.*free",
        r"/exercise.*free",
    ]


def default_keywords() -> List[str]:
    return [
        "freerun", "free-run", "free_run",
        "platform/recreord/freeRun",
        "recreord", "record", "exercise",
    ]


def default_field_signatures() -> List[SignatureConfig]:
    return [
        SignatureConfig(name="run_metrics", fields=["distance", "duration", "avgSpeed"]),
        SignatureConfig(name="run_type", fields=["runType", "freeRun"]),
        SignatureConfig(name="custom_target", fields=["customDistance", "customTime"]),
        SignatureConfig(name="exercise_mode", fields=["exerciseType", "freeMode"]),
    ]


class RelevanceConfig(BaseModel):
    """Rules deciding whether a transaction belongs to the target API."""

    url_patterns: List[str] = Field(default_factory=default_url_patterns)
    keywords: List[str] = Field(default_factory=default_keywords)
    field_signatures: List[SignatureConfig] = Field(default_factory=default_field_signatures)


class ClassificationRules(BaseModel):
    """Keyword and path-shape table for one role classifier."""

    submit_method: str = "POST"
    submit_keywords: List[str] = Field(default_factory=lambda: ["submit", "create", "add"])
    query_method: str = "GET"
    query_keywords: List[str] = Field(default_factory=lambda: ["list", "query", "records"])
    detail_method: str = "GET"
    detail_keywords: List[str] = Field(default_factory=lambda: ["detail", "info"])
    detail_numeric_suffix: bool = True


def default_discovery_rules() -> ClassificationRules:
    return ClassificationRules()


def default_assembler_rules() -> ClassificationRules:
    # Tuned separately from the discovery table; keep the two independent.
    return ClassificationRules(
        submit_keywords=["submit", "create", "add", "freerun", "recreord"],
        query_keywords=["list", "query", "search", "records", "history"],
        detail_keywords=["detail", "info", "get"],
    )


class AnalysisConfig(BaseModel):
    """Top-level analysis configuration."""

    relevance: RelevanceConfig = Field(default_factory=RelevanceConfig)
    discovery_rules: ClassificationRules = Field(default_factory=default_discovery_rules)
    assembler_rules: ClassificationRules = Field(default_factory=default_assembler_rules)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AnalysisConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
