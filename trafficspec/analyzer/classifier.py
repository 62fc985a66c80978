"""Endpoint role classification.

Two independent rule tables exist: one used by endpoint discovery and one
used by the spec assembler. They are kept as separate strategy objects.
"""

import re
from typing import Dict, List, Optional

from trafficspec.config import (
    ApiEndpoint,
    ClassificationRules,
    EndpointRole,
    default_assembler_rules,
    default_discovery_rules,
)

_NUMERIC_SEGMENT = re.compile(r"/\d+$")


class RoleClassifier:
    """Partition endpoints into submit/query/detail/other buckets.

    Rules are checked in bucket order, so every endpoint lands in exactly
    one bucket.
    """

    def __init__(self, rules: Optional[ClassificationRules] = None):
        self.rules = rules or ClassificationRules()
        self._submit = [k.lower() for k in self.rules.submit_keywords]
        self._query = [k.lower() for k in self.rules.query_keywords]
        self._detail = [k.lower() for k in self.rules.detail_keywords]

    def is_submit(self, method: str, path: str) -> bool:
        return method == self.rules.submit_method.upper() and any(k in path for k in self._submit)

    def is_query(self, method: str, path: str) -> bool:
        return method == self.rules.query_method.upper() and any(k in path for k in self._query)

    def is_detail(self, method: str, path: str) -> bool:
        if method != self.rules.detail_method.upper():
            return False
        if any(k in path for k in self._detail):
            return True
        return self.rules.detail_numeric_suffix and bool(_NUMERIC_SEGMENT.search(path))

    def role_of(self, endpoint: ApiEndpoint) -> EndpointRole:
        method = endpoint.method.upper()
        path = endpoint.path.lower()

        if self.is_submit(method, path):
            return EndpointRole.SUBMIT
        if self.is_query(method, path):
            return EndpointRole.QUERY
        if self.is_detail(method, path):
            return EndpointRole.DETAIL
        return EndpointRole.OTHER

    def classify(self, endpoints: List[ApiEndpoint]) -> Dict[str, List[ApiEndpoint]]:
        """Return ``{"submit": [...], "query": [...], "detail": [...], "other": [...]}``."""
        buckets: Dict[str, List[ApiEndpoint]] = {role.value: [] for role in EndpointRole}
        for endpoint in endpoints:
            buckets[self.role_of(endpoint).value].append(endpoint)
        return buckets


def pick_most_frequent(endpoints: List[ApiEndpoint]) -> Optional[ApiEndpoint]:
    """Highest-frequency endpoint; the earliest one wins ties."""
    best = None
    for endpoint in endpoints:
        if best is None or endpoint.frequency > best.frequency:
            best = endpoint
    return best


DISCOVERY_RULES = RoleClassifier(default_discovery_rules())
ASSEMBLER_RULES = RoleClassifier(default_assembler_rules())
