"""Exception types raised by the bridge pipeline.

Authorization denials are deliberately absent: they are converted into
ordinary chat messages by the dispatcher.  A dropped activity is a
``None`` translation result, not an exception.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge errors."""


class ConfigurationError(BridgeError):
    """Required startup configuration is missing or inconsistent."""


class UnsupportedChannelError(BridgeError):
    """No channel strategy is registered for an activity's ``channel_id``."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"No channel strategy registered for {channel!r}")
        self.channel = channel


class RosterFetchError(BridgeError):
    """The conversation member roster could not be retrieved."""


class TransportError(BridgeError):
    """The connector failed to deliver an outbound batch."""
