"""
Test doubles and data builders.

This package provides an in-memory CompletionProvider and builders for
workout sessions so tests never need a model or stored data.

Usage:
    from tests.fakes import FakeCompletionProvider, make_session

    provider = FakeCompletionProvider(responses=['[{"exercise": "Squat"}]'])
    session = make_session("2024-12-19", [("Squat", [(5, "315")])])
"""

from tests.fakes.completion_provider import FakeCompletionProvider
from tests.fakes.sessions import (
    FIXED_TIMESTAMP,
    contrib,
    ex,
    make_session,
    sequential_ids,
    wire,
)

__all__ = [
    "FakeCompletionProvider",
    "FIXED_TIMESTAMP",
    "contrib",
    "ex",
    "make_session",
    "sequential_ids",
    "wire",
]
