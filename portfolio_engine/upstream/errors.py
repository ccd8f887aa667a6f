"""
Exceptions raised by the upstream clients.

Routers translate these into HTTP error bodies; nothing here is retried.
"""


class UpstreamClientError(Exception):
    """Base class for all upstream client failures."""

    def __init__(self, message: str, service: str | None = None):
        super().__init__(message)
        self.service = service


class ConfigurationMissing(UpstreamClientError):
    """Raised before any network call when a required credential is absent."""

    def __init__(self, missing: list[str], service: str | None = None):
        self.missing = list(missing)
        super().__init__(f"{' or '.join(self.missing)} not configured", service=service)


class UpstreamError(UpstreamClientError):
    """Raised when an upstream answers with a non-success status."""

    def __init__(self, service: str, status_code: int, body: str):
        super().__init__(f"{service} request failed ({status_code}): {body}", service=service)
        self.status_code = status_code
        self.body = body


class NetworkError(UpstreamClientError):
    """Raised when an upstream cannot be reached at the transport level."""

    pass
