"""JSON and YAML serialization of an assembled API spec."""

import json

import yaml

from trafficspec.config import ApiSpec


def render_json(spec: ApiSpec) -> str:
    return json.dumps(spec.to_wire(), indent=2, ensure_ascii=False)


def render_yaml(spec: ApiSpec) -> str:
    return yaml.safe_dump(spec.to_wire(), sort_keys=False, allow_unicode=True)
