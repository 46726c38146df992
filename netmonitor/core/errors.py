class MonitorError(Exception):
    """Base class for errors raised by the monitor."""


class TransportError(MonitorError):
    """Network failure or non-2xx response from an upstream source."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(MonitorError):
    """Upstream response was not the expected shape."""


class ConfigError(MonitorError):
    """Missing or unparseable configuration. Fatal at startup."""
