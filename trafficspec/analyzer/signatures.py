"""Relevance predicates over captured payloads.

A field-set signature is a list of key names whose joint presence in a
payload is treated as domain evidence regardless of URL.
"""

import re
from typing import Any, Iterable, List, Mapping, Optional, Pattern

from trafficspec.config import RelevanceConfig, SignatureConfig


class FieldSetSignature:
    """Matches a mapping when every field is present.

    A field counts as present when it is an exact key, or when it is a
    case-insensitive substring of any existing key.
    """

    def __init__(self, name: str, fields: Iterable[str]):
        self.name = name
        self.fields = list(fields)

    @classmethod
    def from_config(cls, config: SignatureConfig) -> "FieldSetSignature":
        return cls(config.name, config.fields)

    def matches(self, payload: Any) -> bool:
        if not isinstance(payload, Mapping) or not self.fields:
            return False

        keys_lower = [str(key).lower() for key in payload.keys()]
        return all(
            field in payload or any(field.lower() in key for key in keys_lower)
            for field in self.fields
        )

    def __repr__(self) -> str:
        return f"FieldSetSignature({self.name!r}, {self.fields!r})"


def _contains_keyword(value: Any, keywords: List[str]) -> bool:
    """Check keys and scalar values of a decoded JSON value for keywords."""
    if isinstance(value, Mapping):
        return any(
            _contains_keyword(str(key), keywords) or _contains_keyword(item, keywords)
            for key, item in value.items()
        )
    if isinstance(value, list):
        return any(_contains_keyword(item, keywords) for item in value)
    if value is None:
        return False
    text = str(value).lower()
    return any(keyword in text for keyword in keywords)


class RelevanceMatcher:
    """Decides whether a transaction belongs to the target API.

    Checks run in order: URL regexes, URL keywords, body keywords, then
    field-set signatures.
    """

    def __init__(self, config: Optional[RelevanceConfig] = None):
        config = config or RelevanceConfig()
        self.url_patterns: List[Pattern] = [re.compile(p, re.IGNORECASE) for p in config.url_patterns]
        self.keywords = [k.lower() for k in config.keywords]
        self.signatures = [FieldSetSignature.from_config(s) for s in config.field_signatures]

    def match_reason(self, url: str, payload: Any, raw_body: str = "") -> Optional[str]:
        """Return why a transaction is relevant, or None if it is not.

        Args:
            url: Request URL
            payload: Decoded JSON body, or the raw text if it is not JSON
            raw_body: Raw request body text

        Returns:
            "url_pattern", "url_keyword", "body_keyword", "signature:<name>" or None
        """
        if any(p.search(url) for p in self.url_patterns):
            return "url_pattern"

        url_lower = url.lower()
        if any(keyword in url_lower for keyword in self.keywords):
            return "url_keyword"

        if not raw_body and payload is None:
            return None

        if isinstance(payload, (Mapping, list)):
            if _contains_keyword(payload, self.keywords):
                return "body_keyword"
        elif raw_body and _contains_keyword(raw_body, self.keywords):
            return "body_keyword"

        for signature in self.signatures:
            if signature.matches(payload):
                return f"signature:{signature.name}"

        return None

    def is_relevant(self, url: str, payload: Any, raw_body: str = "") -> bool:
        return self.match_reason(url, payload, raw_body) is not None
