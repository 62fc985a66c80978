"""HAR-like transcript ingestion.

Parses ``{"log": {"entries": [...]}}`` transcripts into request/response
records and keeps them in a session-scoped transaction store.
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from trafficspec.config import (
    ApiEndpoint,
    HttpTransaction,
    NetworkRequest,
    NetworkResponse,
    ParseResult,
    TimeRange,
    TrafficStatistics,
)
from trafficspec.errors import CaptureFormatNotImplementedError, InvalidFormatError
from trafficspec.utils import logger, try_parse_json, url_path


# Leading bytes of binary capture formats (pcap both endiannesses, pcap-ns, pcapng)
_BINARY_CAPTURE_MAGIC = (
    b"\xd4\xc3\xb2\xa1",
    b"\xa1\xb2\xc3\xd4",
    b"\x4d\x3c\xb2\xa1",
    b"\xa1\xb2\x3c\x4d",
    b"\x0a\x0d\x0d\x0a",
)


def _parse_timestamp(value: Any) -> float:
    """Convert an ISO-8601 ``startedDateTime`` to epoch milliseconds."""
    if not isinstance(value, str) or not value:
        raise InvalidFormatError(f"Invalid startedDateTime: {value!r}")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text).timestamp() * 1000
    except ValueError as e:
        raise InvalidFormatError(f"Invalid startedDateTime {value!r}: {e}")


def _body_text(container: Dict[str, Any], key: str) -> str:
    """Return ``container[key]["text"]``, or an empty string when absent."""
    section = container.get(key)
    if section is None:
        return ""
    if not isinstance(section, dict):
        raise InvalidFormatError(f"Invalid HAR format: {key} must be an object")
    text = section.get("text")
    return text if isinstance(text, str) else ""


def parse_headers(headers: Any) -> Dict[str, str]:
    """Collapse a HAR header array into a lower-cased name map.

    The last occurrence of a repeated header wins.
    """
    if headers is None:
        return {}
    if not isinstance(headers, list):
        raise InvalidFormatError("Headers must be a list of {name, value} objects")

    result = {}
    for header in headers:
        if not isinstance(header, dict) or "name" not in header:
            raise InvalidFormatError(f"Malformed header entry: {header!r}")
        result[str(header["name"]).lower()] = str(header.get("value", ""))
    return result


class TrafficIngestor:
    """Parse transcripts and answer queries over the captured transactions.

    The store is an arena: it only grows until ``clear()`` re-initialises it.
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._transactions: Dict[str, HttpTransaction] = {}

    def parse(self, data: Union[str, bytes, Dict[str, Any]]) -> ParseResult:
        """Parse a transcript and register its transactions.

        Args:
            data: JSON text, or an already-decoded transcript dict

        Returns:
            ParseResult with the parsed transactions and totals

        Raises:
            CaptureFormatNotImplementedError: If ``data`` is binary
            InvalidFormatError: If the transcript is malformed
        """
        if isinstance(data, (bytes, bytearray, memoryview)):
            raise CaptureFormatNotImplementedError(
                "Binary capture parsing is not supported. Export the capture as a HAR transcript."
            )

        if isinstance(data, str):
            try:
                document = json.loads(data)
            except (json.JSONDecodeError, ValueError) as e:
                raise InvalidFormatError(f"Invalid HAR format: {e}")
        else:
            document = data

        entries = self._get_entries(document)
        result = self._parse_entries(entries)

        for transaction in result.transactions:
            self._transactions[transaction.request.id] = transaction

        logger.info(
            f"Parsed {result.total_requests} requests, {result.total_responses} responses "
            f"({len(self._transactions)} transactions stored)"
        )
        return result

    def parse_file(self, path: Union[str, Path]) -> ParseResult:
        """Parse a transcript file, rejecting binary captures."""
        raw = Path(path).read_bytes()

        if raw.startswith(_BINARY_CAPTURE_MAGIC):
            raise CaptureFormatNotImplementedError(f"{path} looks like a pcap capture; only HAR transcripts are supported")

        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise CaptureFormatNotImplementedError(f"{path} is not a text transcript")

        return self.parse(text)

    @staticmethod
    def _get_entries(document: Any) -> List[Any]:
        if not isinstance(document, dict):
            raise InvalidFormatError("Invalid HAR format: top-level value must be an object")
        log = document.get("log")
        if not isinstance(log, dict):
            raise InvalidFormatError("Invalid HAR format: missing 'log' object")
        entries = log.get("entries")
        if not isinstance(entries, list):
            raise InvalidFormatError("Invalid HAR format: missing 'log.entries' list")
        return entries

    def _parse_entries(self, entries: List[Any]) -> ParseResult:
        transactions: List[HttpTransaction] = []
        start: Optional[float] = None
        end: Optional[float] = None

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not isinstance(entry.get("request"), dict):
                raise InvalidFormatError(f"Invalid HAR format: entry {index} has no request")

            transaction = self._parse_entry(entry)
            timestamp = transaction.request.timestamp
            start = timestamp if start is None else min(start, timestamp)
            end = timestamp if end is None else max(end, timestamp)
            transactions.append(transaction)

        return ParseResult(
            transactions=transactions,
            total_requests=len(transactions),
            total_responses=sum(1 for t in transactions if t.response is not None),
            time_range=TimeRange(start=start, end=end),
        )

    def _parse_entry(self, entry: Dict[str, Any]) -> HttpTransaction:
        raw_request = entry["request"]
        request_id = str(uuid.uuid4())
        request_time = _parse_timestamp(entry.get("startedDateTime"))
        try:
            duration = float(entry.get("time") or 0)
        except (TypeError, ValueError) as e:
            raise InvalidFormatError(f"Invalid HAR format: bad entry time ({e})")

        headers = parse_headers(raw_request.get("headers"))
        body = _body_text(raw_request, "postData")
        try:
            request = NetworkRequest(
                id=request_id,
                url=raw_request["url"],
                method=str(raw_request["method"]).upper(),
                headers=headers,
                body=body,
                timestamp=request_time,
            )
        except KeyError as e:
            raise InvalidFormatError(f"Invalid HAR format: request is missing {e}")
        except ValidationError as e:
            raise InvalidFormatError(f"Invalid HAR format: malformed request ({e.error_count()} errors)")

        response = None
        raw_response = entry.get("response")
        if isinstance(raw_response, dict):
            headers = parse_headers(raw_response.get("headers"))
            body = _body_text(raw_response, "content")
            try:
                response = NetworkResponse(
                    status=int(raw_response["status"]),
                    headers=headers,
                    body=body,
                    timestamp=request_time + duration,
                    request_id=request_id,
                )
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidFormatError(f"Invalid HAR format: malformed response ({e})")

        return HttpTransaction(request=request, response=response, duration=duration)

    def extract_requests(self, filter_url: Optional[str] = None) -> List[NetworkRequest]:
        """Return stored requests, optionally filtered by URL substring."""
        return [t.request for t in self.get_transactions(filter_url)]

    def extract_responses(self, filter_url: Optional[str] = None) -> List[NetworkResponse]:
        """Return stored responses, optionally filtered by request URL substring."""
        return [t.response for t in self.get_transactions(filter_url) if t.response is not None]

    def get_transactions(self, filter_url: Optional[str] = None) -> List[HttpTransaction]:
        """Return stored transactions in insertion order."""
        return [
            t for t in self._transactions.values()
            if not filter_url or filter_url in t.request.url
        ]

    def discover_endpoints(self, base_url: Optional[str] = None) -> List[ApiEndpoint]:
        """Group every stored transaction by ``METHOD:path`` without relevance filtering.

        The first observation's samples are kept. Results are sorted by
        descending frequency.
        """
        endpoints: Dict[str, ApiEndpoint] = {}

        for transaction in self._transactions.values():
            request = transaction.request
            if base_url and base_url not in request.url:
                continue

            path = url_path(request.url)
            key = f"{request.method}:{path}"

            if key in endpoints:
                endpoints[key].frequency += 1
            else:
                endpoints[key] = ApiEndpoint(
                    path=path,
                    method=request.method,
                    description=f"{request.method} {path}",
                    frequency=1,
                    sample_request=try_parse_json(request.body),
                    sample_response=try_parse_json(transaction.response.body) if transaction.response else None,
                )

        return sorted(endpoints.values(), key=lambda e: e.frequency, reverse=True)

    def get_statistics(self) -> TrafficStatistics:
        """Compute aggregate statistics over the store."""
        total = len(self._transactions)
        completed = sum(1 for t in self._transactions.values() if t.response is not None)

        return TrafficStatistics(
            total_transactions=total,
            completed_transactions=completed,
            unique_endpoints=len(self.discover_endpoints()),
            completion_rate=(completed / total) * 100 if total > 0 else 0.0,
        )

    def save_result(self, path: Union[str, Path], data: Any) -> Path:
        """Write an analysis artefact as JSON, or YAML for ``.yaml``/``.yml`` paths."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if hasattr(data, "model_dump"):
            data = data.model_dump(by_alias=True, exclude_none=True, mode="json")

        if path.suffix.lower() in (".yaml", ".yml"):
            path.write_text(yaml.dump(data, sort_keys=False, default_flow_style=False))
        else:
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False))

        logger.debug(f"Stored analysis result at {path}")
        return path

    def clear(self) -> None:
        """Discard all stored transactions."""
        self._reset()

    def __len__(self) -> int:
        return len(self._transactions)
