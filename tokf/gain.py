"""Formatting helpers for token-savings reports."""

from __future__ import annotations


def format_num(n: int) -> str:
    """Format an integer with comma thousands separators."""
    return f"{n:,}"