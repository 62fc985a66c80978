"""Markdown documentation for an assembled API spec."""

from trafficspec.config import ApiSpec
from trafficspec.report.env import env

DEFAULT_TITLE = "API Specification"


def render_markdown(spec: ApiSpec, title: str = DEFAULT_TITLE) -> str:
    """Render the spec as Markdown.

    Sections always appear in the same order: Endpoints, Request Format,
    Response Format, Encryption. Rendering is a pure function of the spec.
    """
    template = env.get_template("spec.md.j2")
    return template.render(
        title=title,
        spec=spec,
        sections=[
            ("Request Format", spec.request_format),
            ("Response Format", spec.response_format),
        ],
    )
