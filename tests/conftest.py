from datetime import datetime, timedelta, timezone

import pytest

from cart import CartStore
from catalog import CatalogStore
from database import MemoryStore
from hashing import hash_password
from schemas import PieceDraft
from sessions import SessionManager
from users import UserStore


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def storage():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(clock):
    return SessionManager(MemoryStore(), clock=clock)


@pytest.fixture
def catalog(storage):
    return CatalogStore(storage)


@pytest.fixture
def cart(storage, catalog):
    return CartStore(storage, catalog)


@pytest.fixture
def users(storage, sessions, clock):
    return UserStore(storage, sessions, clock=clock)


def make_piece(catalog, name, price, **fields):
    return catalog.add_product(PieceDraft(name=name, price=price, **fields))


def make_user(users, email, password='secret123', name='Someone', role='user'):
    return users.create_user(email=email, password_hash=hash_password(password), name=name, role=role)
