"""Response models.

``ApiResponse`` is the envelope used by the bridge's own endpoints:
{ success: bool, data: T | None, error: str | None, meta: dict | None }

``ProxyResponse`` mirrors the upstream call instead:
{ success: true, data, status } or { success: false, error, code }
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for the bridge's own endpoints."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None


class ProxyResponse(BaseModel):
    """Outcome of a proxied upstream call."""

    success: bool
    data: Any = None
    status: int | None = None
    error: Any = None
    code: int | None = None

    model_config = {"frozen": True}

    @classmethod
    def ok(cls, data: Any, status: int) -> ProxyResponse:
        return cls(success=True, data=data, status=status)

    @classmethod
    def failure(cls, error: Any, code: int) -> ProxyResponse:
        return cls(success=False, error=error, code=code)

    def to_dict(self) -> dict:
        """Serialize to the wire shape, dropping the fields of the other branch."""
        if self.success:
            return {"success": True, "data": self.data, "status": self.status}
        return {"success": False, "error": self.error, "code": self.code}
