"""Spec rendering: Markdown, TypeScript interfaces, JSON and YAML."""

from trafficspec.report.markdown import render_markdown
from trafficspec.report.structured import render_json, render_yaml
from trafficspec.report.typescript import (
    TYPESCRIPT_TYPES,
    interface_members,
    property_name,
    render_typescript,
    to_typescript_type,
)

__all__ = [
    "render_markdown",
    "render_json",
    "render_yaml",
    "TYPESCRIPT_TYPES",
    "interface_members",
    "property_name",
    "render_typescript",
    "to_typescript_type",
]
