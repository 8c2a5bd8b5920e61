"""Wire protocol messages exchanged with viewers."""

import json
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ProtocolError

# Trace payloads and channel info are opaque to the server.
JSONValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]


class Action(str, Enum):
    """Values of the ``action`` field."""

    # viewer -> server
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    SAVE = "save"
    # server -> viewer
    INITIALIZE = "initialize"
    PUT_TRACE = "putTrace"
    REMOVE_TRACE = "removeTrace"
    SAVE_HTML = "saveHTML"


INBOUND_ACTIONS = frozenset({Action.CONNECT, Action.DISCONNECT, Action.SAVE})


class ClientMessage(BaseModel):
    """A control message sent by a viewer."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    client_id: str = Field(alias="clientId")
    viz_id: str = Field(alias="vizId")
    content: str | None = None
    request_id: str | None = Field(default=None, alias="requestId")

    @property
    def known_action(self) -> Action | None:
        """The parsed inbound action, or None if it is not one we handle."""
        try:
            action = Action(self.action)
        except ValueError:
            return None
        return action if action in INBOUND_ACTIONS else None


def parse_client_message(raw: str | bytes) -> ClientMessage:
    """Parse one inbound frame.

    Raises:
        ProtocolError: the frame is not a JSON object with the required fields,
            or is a ``save`` without ``content``.
    """
    try:
        message = ClientMessage.model_validate_json(raw)
    except ValidationError as e:
        raise ProtocolError(f"Malformed control message: {e.error_count()} error(s)") from e

    if message.known_action is Action.SAVE and message.content is None:
        raise ProtocolError("save message without content")
    return message


def encode(message: dict[str, Any]) -> str:
    """Serialize an outbound message."""
    return json.dumps(message)


def initialize_message(traces: dict[str, JSONValue], info: JSONValue) -> dict[str, Any]:
    return {"action": Action.INITIALIZE.value, "traces": traces, "info": info}


def put_trace_message(trace_id: str, trace: JSONValue) -> dict[str, Any]:
    return {"action": Action.PUT_TRACE.value, "tId": trace_id, "t": trace}


def remove_trace_message(trace_id: str) -> dict[str, Any]:
    return {"action": Action.REMOVE_TRACE.value, "tId": trace_id}


def save_snapshot_message(request_id: str) -> dict[str, Any]:
    """Ask viewers to send back their rendered HTML."""
    return {"action": Action.SAVE_HTML.value, "requestId": request_id}
