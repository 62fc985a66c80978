"""Configuration and data models for trafficspec.

This package re-exports all commonly used classes for convenient importing.
"""

# Common enumerations
from trafficspec.config.common import (
    EndpointRole,
    ExportFormat,
    FieldType,
    GenerationType,
    PaddingScheme,
)

# Captured traffic
from trafficspec.config.traffic import (
    HttpTransaction,
    NetworkRequest,
    NetworkResponse,
    ParseResult,
    TimeRange,
    TrafficStatistics,
)

# Endpoints, schemas and specs
from trafficspec.config.spec import (
    ApiEndpoint,
    ApiSpec,
    EncryptionInfo,
    EncryptionValidationResult,
    EndpointValidation,
    GenerationRecord,
    RequestSchema,
    SpecEndpoints,
    SpecValidationResult,
    ValidationRule,
)

# Analysis settings
from trafficspec.config.analysis import (
    AnalysisConfig,
    ClassificationRules,
    RelevanceConfig,
    SignatureConfig,
    default_assembler_rules,
    default_discovery_rules,
)

__all__ = [
    # Enums
    "EndpointRole",
    "ExportFormat",
    "FieldType",
    "GenerationType",
    "PaddingScheme",
    # Traffic
    "HttpTransaction",
    "NetworkRequest",
    "NetworkResponse",
    "ParseResult",
    "TimeRange",
    "TrafficStatistics",
    # Spec
    "ApiEndpoint",
    "ApiSpec",
    "EncryptionInfo",
    "EncryptionValidationResult",
    "EndpointValidation",
    "GenerationRecord",
    "RequestSchema",
    "SpecEndpoints",
    "SpecValidationResult",
    "ValidationRule",
    # Analysis settings
    "AnalysisConfig",
    "ClassificationRules",
    "RelevanceConfig",
    "SignatureConfig",
    "default_assembler_rules",
    "default_discovery_rules",
]
