"""Building blocks for a cloud connector service: MQTT topics and handlers, auth middleware, inventory recording and reporting."""

__version__ = "0.1.0"