"""Wiring for the stores: one Storefront per running application."""
import logging
import os
from datetime import timedelta
from typing import Optional

from cart import CartStore
from catalog import CatalogStore
from database import KeyValueStore, MemoryStore, create_store
from sessions import SESSION_DURATION, SessionManager, utcnow
from users import UserStore

logger = logging.getLogger(__name__)


def session_duration_from_env() -> timedelta:
    hours = os.getenv('SESSION_HOURS')
    return timedelta(hours=float(hours)) if hours else SESSION_DURATION


class Storefront:
    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        session_storage: Optional[KeyValueStore] = None,
        session_duration: timedelta = SESSION_DURATION,
        clock=utcnow,
    ):
        self.storage = storage if storage is not None else MemoryStore()
        # Sessions never go to durable storage
        self.session_storage = session_storage if session_storage is not None else MemoryStore()
        self.sessions = SessionManager(
            self.session_storage,
            user_data_storage=self.storage,
            duration=session_duration,
            clock=clock,
        )
        self.catalog = CatalogStore(self.storage)
        self.cart = CartStore(self.storage, self.catalog)
        self.users = UserStore(self.storage, self.sessions, clock=clock)

    @classmethod
    def from_env(cls) -> 'Storefront':
        return cls(storage=create_store(), session_duration=session_duration_from_env())

    def start(self) -> 'Storefront':
        self.catalog.initialize_from_seed()
        self.users.initialize_defaults()
        return self

    def close(self) -> None:
        self.catalog.flush()
        self.cart.flush()
        self.users.flush()
        self.session_storage.clear()
        logger.info('Storefront state flushed')
