"""CHaser match server, wire codec and player client."""

__version__ = "0.2.0"
