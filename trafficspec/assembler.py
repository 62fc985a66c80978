"""Assemble, validate, export and track API specifications."""

import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Union

from trafficspec.analyzer.classifier import ASSEMBLER_RULES, RoleClassifier, pick_most_frequent
from trafficspec.analyzer.schema import schema_from_samples
from trafficspec.config import (
    ApiEndpoint,
    ApiSpec,
    EncryptionInfo,
    EndpointRole,
    ExportFormat,
    GenerationRecord,
    GenerationType,
    SpecEndpoints,
    SpecValidationResult,
)
from trafficspec.crypto.verifier import VerificationResult
from trafficspec.errors import NoSpecAvailableError, UnsupportedDiscriminatorError
from trafficspec.report import render_json, render_markdown, render_typescript, render_yaml
from trafficspec.utils import logger

MAX_HISTORY = 10
REQUEST_REQUIRED_THRESHOLD = 0.8
RESPONSE_REQUIRED_THRESHOLD = 0.6

_RENDERERS = {
    ExportFormat.MARKDOWN: render_markdown,
    ExportFormat.JSON: render_json,
    ExportFormat.TYPESCRIPT: render_typescript,
    ExportFormat.YAML: render_yaml,
}


def validate_spec(spec: ApiSpec) -> SpecValidationResult:
    """Check an assembled spec for missing parts and score its completeness.

    The score is informational; use ``is_valid`` to decide whether the spec
    is usable.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not spec.endpoints.submit:
        errors.append("Submit endpoint is required")
    if not spec.endpoints.query:
        warnings.append("Query endpoint is recommended")
    if not spec.endpoints.detail:
        warnings.append("Detail endpoint is recommended")

    if not spec.request_format.required_fields:
        warnings.append("No required fields in request format")
    if not spec.response_format.required_fields:
        warnings.append("No required fields in response format")

    if not spec.encryption.algorithm:
        errors.append("Encryption algorithm is required")

    score = 100 - 20 * len(errors) - 5 * len(warnings)
    if spec.endpoints.submit and spec.endpoints.query and spec.endpoints.detail:
        score += 10
    if spec.request_format.required_fields:
        score += 5
    if spec.response_format.required_fields:
        score += 5

    return SpecValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        score=max(0, min(100, score)),
    )


def _normalize_update_keys(partial: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase or snake_case top-level keys onto ``ApiSpec`` field names."""
    aliases = {field.alias or name: name for name, field in ApiSpec.model_fields.items()}
    normalized = {}
    for key, value in partial.items():
        name = aliases.get(key, key)
        if name not in ApiSpec.model_fields:
            raise ValueError(f"Unknown spec field: {key}")
        normalized[name] = value
    return normalized


class SpecAssembler:
    """Holds the current spec and a bounded history of how it was produced."""

    def __init__(self, classifier: Optional[RoleClassifier] = None):
        self.classifier = classifier or ASSEMBLER_RULES
        self._spec: Optional[ApiSpec] = None
        self._history: Deque[GenerationRecord] = deque(maxlen=MAX_HISTORY)

    def assemble(
        self,
        endpoints: List[ApiEndpoint],
        base_url: str,
        encryption_info: EncryptionInfo,
    ) -> ApiSpec:
        """Build the spec from discovered endpoints and hold it as current.

        Each role resolves to the most frequent endpoint of its own bucket;
        empty buckets resolve to an empty URL.

        Args:
            endpoints: Discovered endpoints
            base_url: Prefix for resolved endpoint URLs
            encryption_info: Encryption descriptor to attach

        Returns:
            The assembled spec
        """
        classified = self.classifier.classify(endpoints)

        def resolve(role: EndpointRole) -> str:
            endpoint = pick_most_frequent(classified[role.value])
            return f"{base_url}{endpoint.path}" if endpoint else ""

        spec = ApiSpec(
            endpoints=SpecEndpoints(
                submit=resolve(EndpointRole.SUBMIT),
                query=resolve(EndpointRole.QUERY),
                detail=resolve(EndpointRole.DETAIL),
            ),
            request_format=schema_from_samples(
                (e.sample_request for e in endpoints), REQUEST_REQUIRED_THRESHOLD
            ),
            response_format=schema_from_samples(
                (e.sample_response for e in endpoints), RESPONSE_REQUIRED_THRESHOLD, response_mode=True
            ),
            encryption=encryption_info.model_copy(deep=True),
        )

        self._spec = spec
        self._record(GenerationType.GENERATE, len(endpoints))
        logger.info(f"Assembled spec from {len(endpoints)} endpoints")
        return spec.model_copy(deep=True)

    def validate(self, spec: ApiSpec) -> SpecValidationResult:
        return validate_spec(spec)

    def export(self, format: Union[ExportFormat, str] = ExportFormat.MARKDOWN) -> str:
        """Render the current spec.

        Args:
            format: markdown, json, typescript or yaml

        Raises:
            UnsupportedDiscriminatorError: Unknown format
            NoSpecAvailableError: No spec has been assembled yet
        """
        try:
            export_format = ExportFormat(format)
        except ValueError:
            raise UnsupportedDiscriminatorError(f"Unsupported format: {format}")

        spec = self._require_spec()
        return _RENDERERS[export_format](spec)

    def update(self, partial: Dict[str, Any]) -> ApiSpec:
        """Shallow-merge top-level fields into the current spec.

        Keys may use either camelCase or snake_case. Values replace the
        corresponding top-level field wholesale.
        """
        spec = self._require_spec()
        merged = spec.model_dump()
        merged.update(_normalize_update_keys(partial))

        self._spec = ApiSpec.model_validate(merged)
        self._record(GenerationType.UPDATE, 0)
        logger.info(f"Updated spec fields: {', '.join(partial)}")
        return self._spec.model_copy(deep=True)

    def reconcile_encryption(self, result: VerificationResult) -> ApiSpec:
        """Replace the placeholder encryption with verified parameters.

        Private key material is never copied into the spec. The spec is only
        marked verified when the verification was compatible.
        """
        spec = self._require_spec()
        recommended = result.recommended_config

        self._spec = spec.model_copy(
            update={
                "encryption": EncryptionInfo(
                    algorithm=recommended.algorithm,
                    key_size=recommended.key_size,
                    padding=recommended.padding,
                    public_key=recommended.public_key,
                ),
                "encryption_verified": result.compatible,
            }
        )
        self._record(GenerationType.UPDATE, 0)
        logger.info(f"Reconciled encryption with {result.test_id}: verified={result.compatible}")
        return self._spec.model_copy(deep=True)

    def get_current_spec(self) -> Optional[ApiSpec]:
        return self._spec.model_copy(deep=True) if self._spec else None

    def get_generation_history(self) -> List[GenerationRecord]:
        return list(self._history)

    def _require_spec(self) -> ApiSpec:
        if self._spec is None:
            raise NoSpecAvailableError("No API specification available. Assemble a spec first.")
        return self._spec

    def _record(self, generation_type: GenerationType, endpoint_count: int) -> None:
        self._history.append(
            GenerationRecord(
                timestamp=time.time() * 1000,
                type=generation_type,
                spec=self._spec.model_copy(deep=True),
                endpoint_count=endpoint_count,
                validation=validate_spec(self._spec),
            )
        )
