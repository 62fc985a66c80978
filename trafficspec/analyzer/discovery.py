"""Endpoint discovery over captured transactions.

Finds the transactions that belong to the target API, groups them by
``METHOD:path``, and ranks, classifies and validates the resulting endpoints.
"""

from typing import Dict, List, Optional

from trafficspec.analyzer.classifier import DISCOVERY_RULES, RoleClassifier, pick_most_frequent
from trafficspec.analyzer.schema import schema_from_samples
from trafficspec.analyzer.signatures import RelevanceMatcher
from trafficspec.config import (
    AnalysisConfig,
    ApiEndpoint,
    ApiSpec,
    EncryptionInfo,
    EndpointRole,
    EndpointValidation,
    HttpTransaction,
    SpecEndpoints,
)
from trafficspec.utils import logger, sanitize_url, try_parse_json, url_path

STANDARD_METHODS = ("GET", "POST", "PUT", "DELETE")

ACTION_NAMES = {
    "GET": "Get",
    "POST": "Submit",
    "PUT": "Update",
    "DELETE": "Delete",
}

RESOURCE_NAMES = {
    "submit": "free run data",
    "freerun": "free run record",
    "records": "run records",
    "detail": "details",
    "query": "query results",
}


def describe_endpoint(path: str, method: str) -> str:
    """Build a readable description from the method and last path segment."""
    segments = [segment for segment in path.split("/") if segment]
    last_segment = segments[-1] if segments else "unknown"

    action = ACTION_NAMES.get(method, method)
    resource = RESOURCE_NAMES.get(last_segment.lower(), last_segment)
    return f"{action} {resource}"


def placeholder_encryption() -> EncryptionInfo:
    """Encryption descriptor assumed before any verification has run."""
    return EncryptionInfo(algorithm="RSA", key_size=2048, padding="PKCS1")


class EndpointDiscovery:
    """Identify, classify and validate endpoints of the target API."""

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        classifier: Optional[RoleClassifier] = None,
    ):
        self.config = config or AnalysisConfig()
        self.matcher = RelevanceMatcher(self.config.relevance)
        if classifier is not None:
            self.classifier = classifier
        elif config is not None:
            self.classifier = RoleClassifier(self.config.discovery_rules)
        else:
            self.classifier = DISCOVERY_RULES

    def identify_relevant_endpoints(
        self,
        transactions: List[HttpTransaction],
        base_url_filter: Optional[str] = None,
    ) -> List[ApiEndpoint]:
        """Group relevant transactions into endpoints.

        Repeated endpoints get a higher frequency, and their samples are
        overwritten by the latest observation.

        Args:
            transactions: Captured transactions
            base_url_filter: Optional URL substring a transaction must contain

        Returns:
            Endpoints sorted by descending frequency (stable on ties)
        """
        endpoints: Dict[str, ApiEndpoint] = {}

        for transaction in transactions:
            request = transaction.request
            response = transaction.response

            if base_url_filter and base_url_filter not in request.url:
                continue

            sample_request = try_parse_json(request.body)
            reason = self.matcher.match_reason(request.url, sample_request, request.body)
            if reason is None:
                continue

            path = url_path(request.url)
            method = request.method.upper()
            key = f"{method}:{path}"
            sample_response = try_parse_json(response.body) if response else None

            endpoint = endpoints.get(key)
            if endpoint is not None:
                endpoint.frequency += 1
                endpoint.sample_request = sample_request
                if response is not None:
                    endpoint.sample_response = sample_response
            else:
                logger.debug(f"New endpoint {key} from {sanitize_url(request.url)} ({reason})")
                endpoints[key] = ApiEndpoint(
                    path=path,
                    method=method,
                    description=describe_endpoint(path, method),
                    frequency=1,
                    sample_request=sample_request,
                    sample_response=sample_response,
                )

        logger.info(f"Identified {len(endpoints)} relevant endpoints from {len(transactions)} transactions")
        return sorted(endpoints.values(), key=lambda e: e.frequency, reverse=True)

    def classify(self, endpoints: List[ApiEndpoint]) -> Dict[str, List[ApiEndpoint]]:
        """Partition endpoints into submit/query/detail/other buckets."""
        return self.classifier.classify(endpoints)

    def generate_specification(self, endpoints: List[ApiEndpoint], base_url: str) -> ApiSpec:
        """Build a draft spec from discovered endpoints.

        The encryption block is a placeholder and ``encryption_verified`` is
        False until a verification result has been merged.

        Field frequencies only count endpoints that carried a sample.
        """
        classified = self.classify(endpoints)
        other = classified[EndpointRole.OTHER.value]

        def resolve(role: EndpointRole, fallback_method: str) -> str:
            endpoint = pick_most_frequent(classified[role.value])
            if endpoint is None:
                endpoint = pick_most_frequent([e for e in other if e.method == fallback_method])
            return f"{base_url}{endpoint.path}" if endpoint else ""

        return ApiSpec(
            endpoints=SpecEndpoints(
                submit=resolve(EndpointRole.SUBMIT, "POST"),
                query=resolve(EndpointRole.QUERY, "GET"),
                detail=resolve(EndpointRole.DETAIL, "GET"),
            ),
            request_format=schema_from_samples(
                (e.sample_request for e in endpoints if e.sample_request is not None), 0.8
            ),
            response_format=schema_from_samples(
                (e.sample_response for e in endpoints if e.sample_response is not None),
                0.7,
                response_mode=True,
            ),
            encryption=placeholder_encryption(),
            encryption_verified=False,
        )

    def validate(self, endpoint: ApiEndpoint) -> EndpointValidation:
        """Score how likely an endpoint is to be correctly identified."""
        issues: List[str] = []
        confidence = 100

        if not endpoint.path or endpoint.path == "/":
            issues.append("Invalid endpoint path")
            confidence -= 30

        if endpoint.method not in STANDARD_METHODS:
            issues.append(f"Non-standard HTTP method: {endpoint.method}")
            confidence -= 20

        if endpoint.frequency < 2:
            issues.append("Endpoint seen fewer than 2 times, possibly misidentified")
            confidence -= 15

        if endpoint.method == "POST" and endpoint.sample_request is None:
            issues.append("POST endpoint has no sample request")
            confidence -= 10

        if endpoint.sample_response is None:
            issues.append("Endpoint has no sample response")
            confidence -= 10

        return EndpointValidation(
            is_valid=not issues,
            issues=issues,
            confidence=max(0, confidence),
        )
