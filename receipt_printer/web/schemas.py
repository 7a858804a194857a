from __future__ import annotations

"""
Pydantic schemas for the Receipt Printer HTTP API.

Request models validate submissions; limits are applied via the validation
context passed at runtime, allowing env-driven constraints without circular
imports. Response models give the JSON replies a fixed shape.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationInfo, field_validator


def _has_control_chars(s: str) -> bool:
    return any((ord(c) < 32 and c not in "\n\r\t") or ord(c) == 127 for c in s)


class TextPrintRequest(BaseModel):
    """A plain text receipt submission."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Body of the receipt. Newlines are kept.",
        examples=["Hello from the printer!"],
    )
    from_: Optional[str] = Field(
        default=None,
        alias="from",
        max_length=120,
        description="Attribution line printed in the footer. Defaults to the request host.",
    )

    @field_validator("text")
    @classmethod
    def _text_rules(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError('Missing "text" field in request body')
        v = str(v).replace("\r\n", "\n").rstrip()
        limits = (info.context or {}).get("limits", {})
        max_len = int(limits.get("MAX_TEXT_LEN", 2000))
        if len(v) > max_len:
            raise ValueError(f"text too long (max {max_len})")
        if _has_control_chars(v):
            raise ValueError("control characters not allowed")
        return v

    @field_validator("from_")
    @classmethod
    def _from_rules(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        if _has_control_chars(v):
            raise ValueError("control characters not allowed")
        return v or None


class AdminToggleRequest(BaseModel):
    enabled: StrictBool


class QueueStatus(BaseModel):
    length: int = Field(ge=0, description="Jobs waiting, excluding the one being printed")
    printing: bool


class PrintAccepted(BaseModel):
    success: bool = True
    message: str


class AdminStatus(BaseModel):
    enabled: bool
    queue: QueueStatus


class AdminToggleResponse(BaseModel):
    success: bool = True
    enabled: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "receipt-printer"
    printer: str
    port: int
    accepting: bool
    queue: QueueStatus


__all__ = [
    "AdminStatus",
    "AdminToggleRequest",
    "AdminToggleResponse",
    "HealthResponse",
    "PrintAccepted",
    "QueueStatus",
    "TextPrintRequest",
]
