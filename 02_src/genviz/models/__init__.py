"""Core data models for GenViz."""

from .channel import CaptureState, ChannelInfo
from .protocol import (
    Action,
    ClientMessage,
    JSONValue,
    encode,
    initialize_message,
    parse_client_message,
    put_trace_message,
    remove_trace_message,
    save_snapshot_message,
)

__all__ = [
    # Channel
    "CaptureState",
    "ChannelInfo",
    # Protocol
    "Action",
    "ClientMessage",
    "JSONValue",
    "encode",
    "initialize_message",
    "parse_client_message",
    "put_trace_message",
    "remove_trace_message",
    "save_snapshot_message",
]
