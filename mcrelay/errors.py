"""Exception types raised inside the relay core."""


class RelayError(Exception):
    """Base class for every error the relay raises on purpose."""


class VersionMismatch(RelayError):
    """Login attempted with an unsupported protocol version."""

    def __init__(self, version, supported):
        self.version = version
        self.supported = supported
        super().__init__(f"Only version {supported} is supported")


class MalformedMessage(RelayError):
    """Inbound payload could not be parsed into a known message kind."""

    def __init__(self, detail='Invalid message format'):
        self.detail = detail
        super().__init__(detail)


class UnauthenticatedAction(RelayError):
    """Player action received from a connection that holds no Player."""


class DeliveryFailure(RelayError):
    """Writing a message to a single connection failed."""
