"""Aggregate views over the ingested commit history."""

from .runner import main

__all__ = ["main"]
