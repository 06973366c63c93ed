"""Failure taxonomy and user-facing messages.

Library code raises these exceptions; the state synchroniser, discovery
and pairing engines turn them into short messages with describe_error().
"""

# Bridge error type for "link button not pressed"
LINK_BUTTON_NOT_PRESSED = 101


class HueError(Exception):
    """Base class for every bridge client failure."""

    user_message = "Something went wrong talking to the bridge"


class TransportError(HueError):
    """Connection, timeout or TLS policy failure."""

    user_message = "Unable to connect to bridge"

    def __init__(self, message: str, cancelled: bool = False):
        super().__init__(message)
        self.cancelled = cancelled


class NoDataError(HueError):
    user_message = "No data received"


class DecodingError(HueError):
    """Response was not JSON or did not have the expected shape."""

    user_message = "Unable to process bridge response"


class BridgeProtocolError(HueError):
    """The bridge answered with a structured error object."""

    def __init__(self, error_type: int, description: str, address: str | None = None):
        super().__init__(f"Bridge error {error_type}: {description}")
        self.error_type = error_type
        self.description = description
        self.address = address

    @property
    def user_message(self) -> str:
        return self.description or f"Bridge error {self.error_type}"


class LinkButtonNotPressed(BridgeProtocolError):
    user_message = "Press the link button on your Hue Bridge and retry"

    def __init__(self, description: str = 'link button not pressed'):
        super().__init__(LINK_BUTTON_NOT_PRESSED, description)


class BridgeNotFound(HueError):
    """Discovery finished without finding a bridge. Not a failure."""

    user_message = "No Hue bridge found on this network"


def describe_error(error: Exception, operation: str = 'fetch') -> str:
    """Map an exception to the message shown to the user.

    Args:
        error: Exception raised by a bridge operation
        operation: 'fetch', 'pairing' or 'discovery'; pairing and discovery
            word transport failures differently so the right retry is offered

    Returns:
        Short message suitable for a dismissable banner
    """
    if isinstance(error, TransportError):
        if error.cancelled:
            return "Cancelled"
        if operation == 'pairing':
            return "Unable to reach bridge"
        if operation == 'discovery':
            return "Bridge discovery failed, check your network connection"
        return error.user_message
    if isinstance(error, HueError):
        return error.user_message
    return HueError.user_message
