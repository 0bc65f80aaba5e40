"""replysync — keep bot replies in sync with the messages that asked for them."""

__version__ = "0.1.0"
