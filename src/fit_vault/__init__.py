"""fit-vault: fitness records stored as plain-text documents."""

__version__ = "0.1.0"
