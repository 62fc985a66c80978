"""TypeScript interface generation for an assembled API spec."""

import json
import re
from typing import Dict, List

from trafficspec.config import ApiSpec, FieldType, RequestSchema
from trafficspec.report.env import env

TYPESCRIPT_TYPES = {
    FieldType.STRING.value: "string",
    FieldType.NUMBER.value: "number",
    FieldType.BOOLEAN.value: "boolean",
    FieldType.OBJECT.value: "Record<string, any>",
    FieldType.ARRAY.value: "any[]",
    FieldType.NULL.value: "null",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def to_typescript_type(field_type: str) -> str:
    return TYPESCRIPT_TYPES.get(field_type, "any")


def property_name(name: str) -> str:
    """Quote member names that are not plain identifiers (``a.b``, ``x[0]``)."""
    if _IDENTIFIER.match(name):
        return name
    return json.dumps(name)


def interface_members(schema: RequestSchema) -> List[Dict[str, object]]:
    """Required members first, then optional ones, in schema order."""
    members = []
    for name in schema.required_fields:
        members.append({
            "name": property_name(name),
            "type": to_typescript_type(schema.field_types.get(name, "")),
            "optional": False,
        })
    for name in schema.optional_fields:
        members.append({
            "name": property_name(name),
            "type": to_typescript_type(schema.field_types.get(name, "")),
            "optional": True,
        })
    return members


def render_typescript(spec: ApiSpec) -> str:
    """Render request, response, endpoints, encryption and spec interfaces."""
    template = env.get_template("interfaces.ts.j2")
    return template.render(
        payload_interfaces=[
            ("ApiRequest", interface_members(spec.request_format)),
            ("ApiResponse", interface_members(spec.response_format)),
        ],
        encryption=spec.encryption,
    )
