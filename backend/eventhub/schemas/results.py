"""
Result shapes returned by data access operations whose errors are surfaced
to the caller instead of raised.
"""

from typing import Optional

from pydantic import BaseModel

from eventhub.schemas.event import EventResponse


class ActionResult(BaseModel):
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)


class EventResult(BaseModel):
    event: Optional[EventResponse] = None
    error: Optional[str] = None

    @classmethod
    def fail(cls, error: str) -> "EventResult":
        return cls(error=error)


class UploadResult(BaseModel):
    url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def fail(cls, error: str) -> "UploadResult":
        return cls(error=error)
