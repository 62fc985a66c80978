"""Traffic analyzer module.

Provides relevance matching, endpoint discovery and role classification,
field statistics, and schema synthesis.
"""

from trafficspec.analyzer.classifier import (
    ASSEMBLER_RULES,
    DISCOVERY_RULES,
    RoleClassifier,
    pick_most_frequent,
)
from trafficspec.analyzer.discovery import (
    EndpointDiscovery,
    describe_endpoint,
    placeholder_encryption,
)
from trafficspec.analyzer.field_stats import (
    PATTERN_DETECTORS,
    RAW_RESPONSE_FIELD,
    FieldStatistics,
    FieldStatisticsEngine,
    PatternDetector,
    classify_value,
)
from trafficspec.analyzer.schema import (
    ERROR_STATUS_CODES,
    SUCCESS_STATUS_CODES,
    RequestFormatAnalyzer,
    ResponseFormatAnalyzer,
    SchemaSynthesizer,
    schema_from_samples,
)
from trafficspec.analyzer.signatures import FieldSetSignature, RelevanceMatcher

__all__ = [
    # classifier
    "ASSEMBLER_RULES",
    "DISCOVERY_RULES",
    "RoleClassifier",
    "pick_most_frequent",
    # discovery
    "EndpointDiscovery",
    "describe_endpoint",
    "placeholder_encryption",
    # field statistics
    "PATTERN_DETECTORS",
    "RAW_RESPONSE_FIELD",
    "FieldStatistics",
    "FieldStatisticsEngine",
    "PatternDetector",
    "classify_value",
    # schema
    "ERROR_STATUS_CODES",
    "SUCCESS_STATUS_CODES",
    "RequestFormatAnalyzer",
    "ResponseFormatAnalyzer",
    "SchemaSynthesizer",
    "schema_from_samples",
    # signatures
    "FieldSetSignature",
    "RelevanceMatcher",
]
