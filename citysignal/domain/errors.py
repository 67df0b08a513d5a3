from typing import Optional

class CitySignalError(Exception):
    """Base class for failures surfaced to API callers.

    Each subclass carries the HTTP status and public message the transport
    layer responds with.
    """

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class InvalidRequestError(CitySignalError):
    status_code = 400
    default_message = "Start and End coordinates required"

class UpstreamUnavailableError(CitySignalError):
    status_code = 502
    default_message = "Routing provider unavailable"

class EmptyResultError(CitySignalError):
    status_code = 404
    default_message = "No routes found"

class UnknownSignalError(CitySignalError):
    """Raised internally for unknown signal ids; the kernel logs and drops it."""

    status_code = 404
    default_message = "Signal not found"

    def __init__(self, signal_id: str):
        self.signal_id = signal_id
        super().__init__(f"Signal {signal_id} not found")
