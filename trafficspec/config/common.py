"""Common enumerations and shared model settings for trafficspec models."""

from enum import Enum

from pydantic.alias_generators import to_camel

# Shared model_config for models serialized with camelCase wire names
CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class FieldType(str, Enum):
    """JSON value kinds observed in captured payloads."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


class EndpointRole(str, Enum):
    """Role buckets an endpoint can be classified into."""

    SUBMIT = "submit"
    QUERY = "query"
    DETAIL = "detail"
    OTHER = "other"


class ExportFormat(str, Enum):
    """Documentation formats supported by the spec assembler."""

    MARKDOWN = "markdown"
    JSON = "json"
    TYPESCRIPT = "typescript"
    YAML = "yaml"


class GenerationType(str, Enum):
    """Kind of change recorded in the generation history."""

    GENERATE = "generate"
    UPDATE = "update"


class PaddingScheme(str, Enum):
    """RSA padding schemes accepted in an encryption descriptor."""

    PKCS1 = "PKCS1"
    OAEP = "OAEP"
