"""Schema synthesis from field statistics.

Required/optional classification is recomputed on every call from the
observed frequency ratio; nothing is cached between calls.
"""

from typing import Any, Dict, Iterable, List, Optional

from trafficspec.analyzer.field_stats import FieldStatistics, FieldStatisticsEngine
from trafficspec.config import (
    FieldType,
    NetworkRequest,
    NetworkResponse,
    RequestSchema,
    ValidationRule,
)

SUCCESS_STATUS_CODES = [200, 201, 202]
ERROR_STATUS_CODES = [400, 401, 403, 404, 500, 502, 503]


def build_rule(stats: FieldStatistics, primary_type: str, required: bool) -> ValidationRule:
    """Create the validation rule for one field."""
    constraints: Dict[str, Any] = {}

    if primary_type == FieldType.STRING.value:
        if stats.min_length is not None and stats.max_length:
            constraints["min"] = stats.min_length
            constraints["max"] = stats.max_length
        if stats.patterns:
            constraints["pattern"] = stats.patterns[0]
    elif primary_type == FieldType.NUMBER.value:
        if stats.min_value is not None and stats.max_value is not None:
            constraints["min"] = stats.min_value
            constraints["max"] = stats.max_value

    return ValidationRule(type=primary_type, required=required, **constraints)


class SchemaSynthesizer:
    """Turns an engine's field statistics into a ``RequestSchema``."""

    def __init__(self, engine: FieldStatisticsEngine):
        self.engine = engine

    def generate_schema(self, required_threshold: float) -> RequestSchema:
        """Classify every tracked field as required or optional.

        Args:
            required_threshold: Minimum ``occurrences / samples`` ratio for a
                field to be required

        Returns:
            RequestSchema with field lists, primary types and rules
        """
        total = self.engine.total_samples
        counts = {path: stats.count for path, stats in self.engine.fields.items()}
        return self._build(counts, total, required_threshold)

    def schema_for_status_range(self, status_codes: Iterable[int]) -> RequestSchema:
        """Schema restricted to samples whose status is in ``status_codes``.

        Uses a fixed 0.7 threshold. Fields never observed in the range are
        left out entirely.
        """
        codes = set(status_codes)
        total = self.engine.samples_with_status(codes)

        counts = {}
        for path, stats in self.engine.fields.items():
            in_range = sum(stats.status_counts.get(code, 0) for code in codes)
            if in_range:
                counts[path] = in_range

        return self._build(counts, total, 0.7)

    def _build(self, counts: Dict[str, int], total: int, threshold: float) -> RequestSchema:
        schema = RequestSchema()

        for path, count in counts.items():
            stats = self.engine.fields[path]
            frequency = count / total if total else 0.0
            required = frequency >= threshold

            if required:
                schema.required_fields.append(path)
            else:
                schema.optional_fields.append(path)

            primary_type = stats.primary_type
            schema.field_types[path] = primary_type
            schema.validation_rules[path] = build_rule(stats, primary_type, required)

        return schema


def schema_from_samples(
    samples: Iterable[Any],
    required_threshold: float,
    response_mode: bool = False,
) -> RequestSchema:
    """Build a schema directly from decoded sample payloads."""
    engine = FieldStatisticsEngine(response_mode=response_mode)
    for sample in samples:
        # Samples that failed JSON decoding were kept as raw text
        engine.add_sample(sample)
    return SchemaSynthesizer(engine).generate_schema(required_threshold)


class _FormatAnalyzer:
    """Shared plumbing for the request and response analyzers."""

    response_mode = False

    def __init__(self):
        self.engine = FieldStatisticsEngine(response_mode=self.response_mode)
        self.synthesizer = SchemaSynthesizer(self.engine)

    def get_field_statistics(self, path: str) -> Optional[FieldStatistics]:
        return self.engine.get_field_statistics(path)

    def get_all_fields(self) -> List[str]:
        return self.engine.get_all_fields()

    def get_summary(self) -> Dict[str, Any]:
        return self.engine.get_summary()

    def clear(self) -> None:
        self.engine.clear()


class RequestFormatAnalyzer(_FormatAnalyzer):
    """Infers the request payload format from captured requests."""

    def add_request(self, request: NetworkRequest) -> None:
        self.engine.add_sample(request.body)

    def add_requests(self, requests: Iterable[NetworkRequest]) -> None:
        for request in requests:
            self.add_request(request)

    def generate_schema(self, required_threshold: float = 0.8) -> RequestSchema:
        return self.synthesizer.generate_schema(required_threshold)


class ResponseFormatAnalyzer(_FormatAnalyzer):
    """Infers the response payload format from captured responses."""

    response_mode = True

    def add_response(self, response: NetworkResponse) -> None:
        self.engine.add_sample(response.body, response.status)

    def add_responses(self, responses: Iterable[NetworkResponse]) -> None:
        for response in responses:
            self.add_response(response)

    def generate_schema(self, required_threshold: float = 0.7) -> RequestSchema:
        return self.synthesizer.generate_schema(required_threshold)

    def schema_for_status_range(self, status_codes: Iterable[int]) -> RequestSchema:
        return self.synthesizer.schema_for_status_range(status_codes)

    def success_schema(self) -> RequestSchema:
        return self.schema_for_status_range(SUCCESS_STATUS_CODES)

    def error_schema(self) -> RequestSchema:
        return self.schema_for_status_range(ERROR_STATUS_CODES)

    def get_status_code_statistics(self) -> Dict[int, int]:
        return self.engine.get_status_code_statistics()

    def get_error_patterns(self) -> Dict[str, int]:
        return self.engine.get_error_patterns()
