"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HttpRequest:
    """Represents a request parsed from a single bounded read."""

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


@dataclass
class HttpResponse:
    """Status, headers and body produced by a route handler."""

    status: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_code(self) -> int:
        """Numeric status code taken from the status text."""
        code, _, _ = self.status.partition(" ")
        return int(code)
