"""Field-level statistics over JSON payload samples.

One engine instance collects statistics for one payload direction. Requests
and responses use separate engines. Response engines additionally:

- record non-JSON bodies under ``RAW_RESPONSE_FIELD``
- run the success/error indicator detectors
- tally ``key:value`` error patterns for samples with status >= 400
"""

import json
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Pattern, Set

from trafficspec.config import FieldType
from trafficspec.utils import logger

RAW_RESPONSE_FIELD = "_raw_response"
MAX_VALUE_SAMPLES = 10


def classify_value(value: Any) -> FieldType:
    """Map a decoded JSON value onto its ``FieldType``."""
    if value is None:
        return FieldType.NULL
    if isinstance(value, list):
        return FieldType.ARRAY
    # bool is an int subclass, so it has to be checked first
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldType.NUMBER
    if isinstance(value, str):
        return FieldType.STRING
    return FieldType.OBJECT


@dataclass
class PatternDetector:
    """Named regex check applied to string values."""

    name: str
    regex: Pattern
    response_only: bool = False

    def detect(self, value: str) -> bool:
        return self.regex.search(value) is not None


PATTERN_DETECTORS: List[PatternDetector] = [
    PatternDetector("numeric_string", re.compile(r"^\d+\Z", re.ASCII)),
    PatternDetector("email", re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\Z")),
    PatternDetector("date", re.compile(r"^\d{4}-\d{2}-\d{2}", re.ASCII)),
    PatternDetector(
        "uuid",
        re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\Z"),
    ),
    PatternDetector("mac_address", re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})\Z")),
    PatternDetector("success_indicator", re.compile(r"^(success|ok|true)\Z", re.IGNORECASE), response_only=True),
    PatternDetector("error_indicator", re.compile(r"^(error|fail|false)\Z", re.IGNORECASE), response_only=True),
]


@dataclass
class FieldStatistics:
    """Statistics for one fully-qualified field path."""

    count: int = 0
    types: Dict[str, int] = field(default_factory=dict)
    values: Deque[Any] = field(default_factory=lambda: deque(maxlen=MAX_VALUE_SAMPLES))
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    patterns: List[str] = field(default_factory=list)
    status_codes: Set[int] = field(default_factory=set)
    status_counts: Dict[int, int] = field(default_factory=dict)

    @property
    def primary_type(self) -> str:
        """Type with the strictly highest count; the first one seen wins ties."""
        primary = FieldType.STRING.value
        best = 0
        for type_name, count in self.types.items():
            if count > best:
                best = count
                primary = type_name
        return primary

    def add_pattern(self, name: str) -> None:
        if name not in self.patterns:
            self.patterns.append(name)

    def record_length(self, length: int) -> None:
        self.min_length = length if self.min_length is None else min(self.min_length, length)
        self.max_length = length if self.max_length is None else max(self.max_length, length)

    def record_number(self, value: float) -> None:
        self.min_value = value if self.min_value is None else min(self.min_value, value)
        self.max_value = value if self.max_value is None else max(self.max_value, value)


class FieldStatisticsEngine:
    """Accumulates per-field statistics from payload samples.

    All maps only grow until ``clear()`` re-initialises them.
    """

    def __init__(self, response_mode: bool = False):
        self.response_mode = response_mode
        self.detectors = [d for d in PATTERN_DETECTORS if response_mode or not d.response_only]
        self.clear()

    def clear(self) -> None:
        self._fields: Dict[str, FieldStatistics] = {}
        self._sample_statuses: List[Optional[int]] = []
        self._status_code_stats: Dict[int, int] = {}
        self._error_patterns: Dict[str, int] = {}

    @property
    def total_samples(self) -> int:
        return len(self._sample_statuses)

    @property
    def fields(self) -> Dict[str, FieldStatistics]:
        return self._fields

    def samples_with_status(self, status_codes: Set[int]) -> int:
        return sum(1 for status in self._sample_statuses if status in status_codes)

    def add_sample(self, body: Any, status_code: Optional[int] = None) -> None:
        """Add one payload sample.

        Args:
            body: Raw body text (decoded as JSON), or an already-decoded value.
                ``None`` and empty bodies count as samples without fields.
            status_code: Response status of the sample, if any
        """
        self._sample_statuses.append(status_code)
        if status_code is not None:
            self._status_code_stats[status_code] = self._status_code_stats.get(status_code, 0) + 1

        if body is None or body == "" or body == b"":
            return

        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8", errors="replace")

        if isinstance(body, str):
            try:
                payload = json.loads(body)
            except (json.JSONDecodeError, ValueError):
                if self.response_mode:
                    self._record_unstructured(body, status_code)
                else:
                    logger.debug("Skipping non-JSON request body")
                return
        else:
            payload = body

        self._walk(payload, "", status_code)

    def _walk(self, payload: Any, prefix: str, status_code: Optional[int]) -> None:
        if isinstance(payload, list) and not prefix:
            for index, item in enumerate(payload):
                if isinstance(item, dict):
                    self._walk(item, f"[{index}]", status_code)
            return

        if not isinstance(payload, dict):
            return

        for key, value in payload.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            value_type = classify_value(value)
            self._record(path, str(key), value, value_type, status_code)

            if value_type is FieldType.OBJECT:
                self._walk(value, path, status_code)
            elif value_type is FieldType.ARRAY:
                for index, item in enumerate(value):
                    if isinstance(item, dict):
                        self._walk(item, f"{path}[{index}]", status_code)

    def _stats_for(self, path: str, status_code: Optional[int]) -> FieldStatistics:
        stats = self._fields.get(path)
        if stats is None:
            stats = self._fields[path] = FieldStatistics()

        stats.count += 1
        if status_code is not None:
            stats.status_codes.add(status_code)
            stats.status_counts[status_code] = stats.status_counts.get(status_code, 0) + 1
        return stats

    def _record(
        self,
        path: str,
        key: str,
        value: Any,
        value_type: FieldType,
        status_code: Optional[int],
    ) -> None:
        stats = self._stats_for(path, status_code)
        stats.types[value_type.value] = stats.types.get(value_type.value, 0) + 1
        stats.values.append(value)

        if value_type is FieldType.STRING:
            stats.record_length(len(value))
            for detector in self.detectors:
                if detector.detect(value):
                    stats.add_pattern(detector.name)
            if self.response_mode and status_code is not None and status_code >= 400:
                error_key = f"{key}:{value}"
                self._error_patterns[error_key] = self._error_patterns.get(error_key, 0) + 1
        elif value_type is FieldType.NUMBER:
            stats.record_number(value)

    def _record_unstructured(self, body: str, status_code: Optional[int]) -> None:
        stats = self._stats_for(RAW_RESPONSE_FIELD, status_code)
        stats.types[FieldType.STRING.value] = stats.types.get(FieldType.STRING.value, 0) + 1
        stats.values.append(body)
        stats.record_length(len(body))

    def get_field_statistics(self, path: str) -> Optional[FieldStatistics]:
        return self._fields.get(path)

    def get_all_fields(self) -> List[str]:
        return list(self._fields.keys())

    def get_status_code_statistics(self) -> Dict[int, int]:
        return dict(self._status_code_stats)

    def get_error_patterns(self) -> Dict[str, int]:
        return dict(self._error_patterns)

    def field_frequency(self) -> Dict[str, float]:
        total = self.total_samples
        if total == 0:
            return {}
        return {path: stats.count / total for path, stats in self._fields.items()}

    def common_patterns(self) -> Dict[str, int]:
        patterns: Dict[str, int] = {}
        for stats in self._fields.values():
            for name in stats.patterns:
                patterns[name] = patterns.get(name, 0) + 1
        return patterns

    def get_summary(self) -> Dict[str, Any]:
        """Summarize the collected statistics."""
        summary: Dict[str, Any] = {
            "total_samples": self.total_samples,
            "total_fields": len(self._fields),
            "field_frequency": self.field_frequency(),
            "common_patterns": self.common_patterns(),
        }
        if self.response_mode:
            summary["status_code_distribution"] = self.get_status_code_statistics()
            summary["error_patterns"] = self.get_error_patterns()
        return summary
