from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ClaimResult:
    success: bool
    reason: str | None = None
    detail: str | None = None

    def to_ack(self) -> dict[str, Any]:
        return {"success": self.success, "reason": self.reason, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class SendResult:
    error: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_ack(self) -> dict[str, Any]:
        return {"error": self.error, "detail": self.detail}
