"""Notification — what the core asks the caller to deliver.

The core only decides *whether* a notification fires and what it says.
Delivery (toast, OS push, WebSocket broadcast) belongs to the sink.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hotspot_tracker.domain.enums import NotificationReason


class Notification(BaseModel):
    """A `{title, body, eventId, url}` tuple plus the triggering reason."""

    title: str
    body: str
    event_id: str = Field(..., min_length=1)
    url: str = "/"
    reason: NotificationReason

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
