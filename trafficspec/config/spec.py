"""Models for discovered endpoints, schemas and the assembled API spec."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from trafficspec.config.common import CAMEL_CONFIG, GenerationType


class ApiEndpoint(BaseModel):
    """An endpoint discovered from traffic, identified by ``METHOD:path``."""

    path: str
    method: str
    description: str = ""
    frequency: int = 1
    sample_request: Any = None
    sample_response: Any = None

    model_config = CAMEL_CONFIG

    @property
    def signature(self) -> str:
        return f"{self.method}:{self.path}"


class EndpointValidation(BaseModel):
    """Confidence assessment for a single endpoint."""

    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    confidence: int = 100

    model_config = CAMEL_CONFIG


class ValidationRule(BaseModel):
    """Per-field constraint inferred from samples."""

    type: str
    required: bool
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    pattern: Optional[str] = None


class RequestSchema(BaseModel):
    """Inferred payload schema (used for both requests and responses)."""

    required_fields: List[str] = Field(default_factory=list)
    optional_fields: List[str] = Field(default_factory=list)
    field_types: Dict[str, str] = Field(default_factory=dict)
    validation_rules: Dict[str, ValidationRule] = Field(default_factory=dict)

    model_config = CAMEL_CONFIG


class EncryptionInfo(BaseModel):
    """Encryption parameters of the target API."""

    algorithm: str = ""
    key_size: int = 0
    padding: str = ""
    public_key: Optional[str] = None
    private_key: Optional[str] = None

    model_config = CAMEL_CONFIG


class SpecEndpoints(BaseModel):
    """Resolved URLs for the three endpoint roles; empty when unresolved."""

    submit: str = ""
    query: str = ""
    detail: str = ""


class ApiSpec(BaseModel):
    """Canonical API specification."""

    endpoints: SpecEndpoints = Field(default_factory=SpecEndpoints)
    request_format: RequestSchema = Field(default_factory=RequestSchema)
    response_format: RequestSchema = Field(default_factory=RequestSchema)
    encryption: EncryptionInfo = Field(default_factory=EncryptionInfo)
    # Placeholder encryption stays unverified until reconciled with a verifier result
    encryption_verified: bool = False

    model_config = CAMEL_CONFIG

    def to_wire(self) -> Dict[str, Any]:
        """Return the camelCase dict used for JSON/YAML output."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SpecValidationResult(BaseModel):
    """Result of validating an assembled spec."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    score: int = 0

    model_config = CAMEL_CONFIG


class EncryptionValidationResult(BaseModel):
    """Result of structurally validating an encryption descriptor."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class GenerationRecord(BaseModel):
    """Immutable snapshot appended to the generation history."""

    timestamp: float
    type: GenerationType
    spec: ApiSpec
    endpoint_count: int
    validation: SpecValidationResult

    model_config = {**CAMEL_CONFIG, "frozen": True}
