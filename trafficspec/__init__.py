"""trafficspec - API specification synthesis from captured HTTP traffic.

Reverse-engineers a target API from HAR-like transcripts:
- Relevance matching and endpoint discovery with role classification
- Field statistics and required/optional schema synthesis
- RSA key-pair compatibility verification
- Spec assembly, scoring and export (Markdown, JSON, YAML, TypeScript)
"""

__version__ = "0.1.0"

# Models
from trafficspec.config import (
    AnalysisConfig,
    ApiEndpoint,
    ApiSpec,
    EncryptionInfo,
    ExportFormat,
    FieldType,
    HttpTransaction,
    NetworkRequest,
    NetworkResponse,
    RequestSchema,
)

# Pipeline
from trafficspec.ingest import TrafficIngestor
from trafficspec.analyzer import (
    EndpointDiscovery,
    FieldStatisticsEngine,
    RequestFormatAnalyzer,
    ResponseFormatAnalyzer,
    SchemaSynthesizer,
)
from trafficspec.crypto import (
    EncryptionCompatibilityVerifier,
    EncryptionConfig,
    VerificationResult,
    deep_equal,
    validate_encryption_info,
)
from trafficspec.assembler import SpecAssembler, validate_spec

# Errors
from trafficspec.errors import (
    CaptureFormatNotImplementedError,
    InvalidFormatError,
    NoSpecAvailableError,
    TrafficSpecError,
    UnsupportedDiscriminatorError,
)

__all__ = [
    # Version
    "__version__",
    # Models
    "AnalysisConfig",
    "ApiEndpoint",
    "ApiSpec",
    "EncryptionInfo",
    "ExportFormat",
    "FieldType",
    "HttpTransaction",
    "NetworkRequest",
    "NetworkResponse",
    "RequestSchema",
    # Pipeline
    "TrafficIngestor",
    "EndpointDiscovery",
    "FieldStatisticsEngine",
    "RequestFormatAnalyzer",
    "ResponseFormatAnalyzer",
    "SchemaSynthesizer",
    "EncryptionCompatibilityVerifier",
    "EncryptionConfig",
    "VerificationResult",
    "deep_equal",
    "validate_encryption_info",
    "SpecAssembler",
    "validate_spec",
    # Errors
    "CaptureFormatNotImplementedError",
    "InvalidFormatError",
    "NoSpecAvailableError",
    "TrafficSpecError",
    "UnsupportedDiscriminatorError",
]
