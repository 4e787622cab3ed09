"""
Shared fixtures for Growthlog tests.
"""

import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from growthlog.auth.guard import AccessGuard
from growthlog.auth.identity import RequestContext, TokenIdentityProvider
from growthlog.db.backends import MemoryBackend
from growthlog.db.repositories import GuardianRepository
from growthlog.facade import SyncFacade
from growthlog.store import GrowthStore

TODAY = date(2024, 7, 1)
SECRET = "test-secret"


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return GrowthStore(backend, today=lambda: TODAY)


@pytest.fixture
def identity(backend):
    return TokenIdentityProvider(GuardianRepository(backend), SECRET)


@pytest.fixture
def guard(store, identity):
    return AccessGuard(store, identity)


@pytest.fixture
def facade(store, guard):
    return SyncFacade(store, guard)


@pytest.fixture
def g1():
    return RequestContext()


@pytest.fixture
def g2():
    return RequestContext()
