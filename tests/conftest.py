"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, functional and conformance tests:
- A freshly minted token (100 units held by INITIAL_HOLDER)
- An event recorder subscribed to that token
- An empty token with no initial holder
"""

import pytest

from tests.token_helpers import EventRecorder, make_token


@pytest.fixture
def token():
    """Fresh token with INITIAL_SUPPLY minted to INITIAL_HOLDER."""
    return make_token()


@pytest.fixture
def recorder(token):
    """EventRecorder subscribed to the token fixture after construction."""
    rec = EventRecorder()
    token.subscribe(rec)
    return rec


@pytest.fixture
def empty_token():
    """Token with no initial holder and zero supply."""
    return make_token(holder=None, supply=0)
