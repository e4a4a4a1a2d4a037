"""A two-player card duel over TCP: game rules, wire format, server and terminal client."""

__version__ = "0.1.0"