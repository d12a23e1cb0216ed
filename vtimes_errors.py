from __future__ import annotations

from typing import Any


class VtimesError(Exception):
    """Base class for every failure the gateway reports back to a tool caller."""

    kind = "vtimes_error"

    def details(self) -> dict[str, Any] | None:
        return None


class MissingCredentialError(VtimesError):
    kind = "missing_credential"


class TransportError(VtimesError):
    """Outbound call failed at the HTTP level (non-2xx status or no response at all)."""

    kind = "transport_error"

    def __init__(self, message: str, status: int | None = None, body_text: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body_text = body_text

    def details(self) -> dict[str, Any]:
        return {"status": self.status}


class MalformedResponseError(VtimesError):
    """2xx response whose body does not honour the backend contract."""

    kind = "malformed_response"

    def __init__(self, message: str, body_text: str = "") -> None:
        super().__init__(message)
        self.body_text = body_text


class ConfigFetchError(VtimesError):
    kind = "config_fetch_error"

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def details(self) -> dict[str, Any]:
        return {"status": self.status}


class ConfigLogicError(VtimesError):
    """Session endpoint answered but reported a business failure code."""

    kind = "config_logic_error"

    def __init__(self, message: str, code: Any = None) -> None:
        super().__init__(message)
        self.code = code

    def details(self) -> dict[str, Any]:
        return {"code": self.code}


class SchemaViolation(VtimesError):
    kind = "schema_violation"

    def __init__(self, violations: list[dict[str, Any]]) -> None:
        self.violations = list(violations)
        first = self.violations[0] if self.violations else {}
        summary = f"{len(self.violations)} invalid instruction field(s)"
        if first:
            summary += f"; first at index {first.get('index')}: {first.get('message')}"
        super().__init__(summary)

    def details(self) -> dict[str, Any]:
        return {"violations": self.violations}
