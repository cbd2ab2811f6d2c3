"""UDP data-segment and subscriber access-permission protocols, with servers and clients."""

__version__ = "0.1.0"