"""Shared fixtures and fakes for the NLTE test suite."""

from datetime import datetime

import pytest

from nlte.core.contacts import ContactBook, ContactResolver
from nlte.core.parser import CommandParser
from nlte.core.store import InMemoryKeyValueStore
from nlte.providers.base import FeatureFlags

# Wednesday 2025-01-15 10:00 local time
FIXED_NOW = datetime(2025, 1, 15, 10, 0, 0)


class StaticFeatureFlags(FeatureFlags):
    def __init__(self, staking: bool = True, swap: bool = True):
        self.staking = staking
        self.swap = swap

    def is_staking_supported(self) -> bool:
        return self.staking

    def is_swap_supported(self, from_token: str, to_token: str) -> bool:
        return self.swap


@pytest.fixture
def feature_flags():
    """Factory for feature flags with fixed answers."""
    return StaticFeatureFlags


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def contact_book(store):
    return ContactBook(store)


@pytest.fixture
def resolver(contact_book):
    return ContactResolver(contact_book)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    now = FIXED_NOW.timestamp()
    return lambda: now


@pytest.fixture
def parser(resolver, fixed_clock):
    return CommandParser(resolver, clock=fixed_clock)
