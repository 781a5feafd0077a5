"""
Session manager

Holds at most one session record in a storage scope that does not outlive
the running application. Expiry is evaluated lazily whenever the record is
read; nothing is scheduled.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from database import KeyValueStore
from hashing import generate_secure_token
from schemas import Session, UserData

logger = logging.getLogger(__name__)

SESSION_KEY = 'koby_session'
USER_DATA_KEY = 'koby_user_data'
SESSION_DURATION = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    def __init__(
        self,
        storage: KeyValueStore,
        user_data_storage: Optional[KeyValueStore] = None,
        duration: timedelta = SESSION_DURATION,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.user_data_storage = user_data_storage if user_data_storage is not None else storage
        self.duration = duration
        self.clock = clock

    def create_session(self, user_id: str) -> str:
        """Open a session for user_id, replacing any prior one, and return its token."""
        now = self.clock()
        session = Session(
            user_id=user_id,
            token=generate_secure_token(),
            created_at=now,
            expires_at=now + self.duration,
        )
        self._write(session)
        return session.token

    def get_session(self) -> Optional[Session]:
        raw = self.storage.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            session = Session.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning('Clearing unreadable session record')
            self.clear_session()
            return None
        if self.clock() > session.expires_at:
            self.clear_session()
            return None
        return session

    def validate_session(self, token: str) -> bool:
        session = self.get_session()
        return session is not None and session.token == token

    def clear_session(self) -> None:
        self.storage.remove(SESSION_KEY)

    def get_session_user_id(self) -> Optional[str]:
        session = self.get_session()
        return session.user_id if session else None

    def has_active_session(self) -> bool:
        return self.get_session() is not None

    def extend_session(self) -> bool:
        """Slide the expiry forward from now; only a live session can be extended."""
        session = self.get_session()
        if session is None:
            return False
        self._write(session.model_copy(update={'expires_at': self.clock() + self.duration}))
        return True

    def _write(self, session: Session) -> None:
        self.storage.set(SESSION_KEY, json.dumps(session.dump()))

    # ---------- Display data ----------

    def store_user_data(self, user_data: UserData) -> None:
        self.user_data_storage.set(USER_DATA_KEY, json.dumps(user_data.dump()))

    def get_user_data(self) -> Optional[UserData]:
        raw = self.user_data_storage.get(USER_DATA_KEY)
        if raw is None:
            return None
        try:
            return UserData.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            return None

    def clear_user_data(self) -> None:
        self.user_data_storage.remove(USER_DATA_KEY)
