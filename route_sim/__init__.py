"""Interactive simulator of hop-by-hop packet forwarding over static routing tables."""

__version__ = "0.1.0"
