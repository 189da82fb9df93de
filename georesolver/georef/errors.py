from __future__ import annotations

from typing import Any


class UpstreamUnavailable(Exception):
    """An upstream call (GeoRef or Nominatim) failed at the transport or HTTP level."""

    def __init__(
        self,
        operation: str,
        status: int | None = None,
        body: Any = None,
        context: str | None = None,
    ) -> None:
        self.operation = operation
        self.status = status
        self.body = body
        self.context = context
        super().__init__(self._message())

    def _message(self) -> str:
        msg = f"Upstream call failed: {self.operation}"
        if self.status is not None:
            msg += f" (HTTP {self.status})"
        if self.context:
            msg += f" while {self.context}"
        return msg

    def with_context(self, context: str) -> UpstreamUnavailable:
        return UpstreamUnavailable(self.operation, self.status, self.body, context)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "operation": self.operation,
            "context": self.context,
            "upstream_status": self.status,
            "upstream_body": self.body,
        }
