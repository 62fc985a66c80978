"""Traffic ingestion for HAR-like transcripts."""

from trafficspec.ingest.har import TrafficIngestor, parse_headers

__all__ = [
    "TrafficIngestor",
    "parse_headers",
]
