"""Error taxonomy for traffic analysis and spec synthesis."""


class TrafficSpecError(Exception):
    """Base class for all trafficspec errors."""


class InvalidFormatError(TrafficSpecError, ValueError):
    """Transcript input is not valid JSON or lacks the ``log.entries`` shape."""


class CaptureFormatNotImplementedError(TrafficSpecError, NotImplementedError):
    """Binary capture input (pcap, pcapng, raw bytes) is not supported."""


class NoSpecAvailableError(TrafficSpecError, RuntimeError):
    """An operation needs an assembled spec but none has been generated yet."""


class UnsupportedDiscriminatorError(TrafficSpecError, ValueError):
    """An unknown format or template name was passed to a selector."""
