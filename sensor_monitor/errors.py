"""Error types raised by the bridge."""


class BridgeError(Exception):
    """Base class for all bridge failures."""


class ConfigurationError(BridgeError):
    """Device configuration is missing, unreadable or invalid."""


class TransportError(BridgeError):
    """The remote store could not be reached or answered with garbage."""


class RegistrationError(BridgeError):
    """A create request was accepted but the record never showed up."""


class MalformedPayload(BridgeError):
    """Inbound message body is not a valid sensor payload."""


class UnroutedTopic(BridgeError):
    """No device is configured for the topic a message arrived on."""

    def __init__(self, topic: str):
        super().__init__(f"No device configured for topic: {topic}")
        self.topic = topic
