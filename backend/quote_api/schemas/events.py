import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_EVENT_ID = "unknown"


class VerifiedEvent(BaseModel):
    """A webhook event whose signature has already been checked."""

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(..., description="Dotted event type, e.g. checkout.session.completed")
    event_id: str = Field(UNKNOWN_EVENT_ID, description="Provider event ID")
    payload: dict[str, Any] = Field(default_factory=dict)

    def lookup(self, path: str, default: Any = None) -> Any:
        return lookup(self.payload, path, default)


def lookup(tree: Any, path: str, default: Any = None) -> Any:
    """
    Walk a dotted path through nested dicts and lists.

    Integer segments index into lists. Returns ``default`` as soon as a step
    is missing or the value at that step has the wrong shape.
    """
    node = tree
    for part in path.split("."):
        if isinstance(node, dict):
            if part not in node:
                return default
            node = node[part]
        elif isinstance(node, list) and part.lstrip("-").isdigit():
            index = int(part)
            if not -len(node) <= index < len(node):
                return default
            node = node[index]
        else:
            return default
    return node


class HandlerResult(BaseModel):
    ok: bool = True
    object_id: Optional[str] = None
    fields: dict[str, Any] = Field(default_factory=dict)
    detail: Optional[str] = None


class DispatchStatus(str, enum.Enum):
    handled = "handled"
    ignored = "ignored"


class DispatchOutcome(BaseModel):
    status: DispatchStatus
    event_type: str
    event_id: str
    object_id: Optional[str] = None
    result: Optional[HandlerResult] = None


class WebhookAck(BaseModel):
    received: bool = True
