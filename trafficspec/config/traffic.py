"""Models for captured HTTP traffic."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from trafficspec.config.common import CAMEL_CONFIG


class NetworkRequest(BaseModel):
    """A captured HTTP request."""

    id: str
    url: str
    method: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""
    timestamp: float = 0.0

    model_config = CAMEL_CONFIG


class NetworkResponse(BaseModel):
    """A captured HTTP response, linked to its request by id."""

    status: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""
    timestamp: float = 0.0
    request_id: str

    model_config = CAMEL_CONFIG


class HttpTransaction(BaseModel):
    """A request and its optional response."""

    request: NetworkRequest
    response: Optional[NetworkResponse] = None
    duration: float = 0.0

    model_config = CAMEL_CONFIG

    @property
    def is_complete(self) -> bool:
        return self.response is not None


class TimeRange(BaseModel):
    """Observed timestamp range (epoch milliseconds)."""

    start: Optional[float] = None
    end: Optional[float] = None


class ParseResult(BaseModel):
    """Outcome of parsing one transcript."""

    transactions: List[HttpTransaction] = Field(default_factory=list)
    total_requests: int = 0
    total_responses: int = 0
    time_range: TimeRange = Field(default_factory=TimeRange)

    model_config = CAMEL_CONFIG


class TrafficStatistics(BaseModel):
    """Aggregate statistics over the transaction store."""

    total_transactions: int = 0
    completed_transactions: int = 0
    unique_endpoints: int = 0
    completion_rate: float = 0.0

    model_config = CAMEL_CONFIG
