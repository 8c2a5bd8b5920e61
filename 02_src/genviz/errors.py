"""Exception hierarchy for GenViz."""


class GenVizError(Exception):
    """Base class for all GenViz errors."""


class ChannelNotFoundError(GenVizError, LookupError):
    """Raised when an API call names a channel that does not exist."""

    def __init__(self, channel_id: str):
        super().__init__(f"Unknown visualization channel: {channel_id}")
        self.channel_id = channel_id


class DeliveryError(GenVizError):
    """A single message could not be written to a viewer."""

    def __init__(self, viewer_id: str, reason: str):
        super().__init__(f"Delivery to viewer {viewer_id} failed: {reason}")
        self.viewer_id = viewer_id


class ProtocolError(GenVizError, ValueError):
    """An inbound frame could not be parsed as a control message."""


class CaptureError(GenVizError):
    """A snapshot capture could not be completed."""


class CaptureTimeoutError(CaptureError, TimeoutError):
    """No viewer answered a capture request in time."""
