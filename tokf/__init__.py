"""Config-driven filters that compress captured command output."""

__version__ = "0.2.1"