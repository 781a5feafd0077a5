"""
User / account store

Authentication, registration, profiles, role management and the per-user
sub-collections (orders, favorites, try-on requests).

Two invariants hold after every call:
  * emails are unique, compared case-insensitively
  * if at least one active admin exists, at least one still exists afterwards

Admin counts are always recomputed from the candidate state, never cached.
Operations report failure through booleans / result models; the only
exception raised is UserImportError for unparsable import payloads. Whether
the caller is allowed to invoke an admin operation is decided outside this
store.
"""
import json
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError

from database import KeyValueStore, load_blob, save_blob
from hashing import DEFAULT_IMPORT_PASSWORD, hash_password, verify_password
from schemas import (
    ImportResult,
    OperationResult,
    OrderStatus,
    StoredUser,
    TryOnRequest,
    TryOnStatus,
    UserAddress,
    UserData,
    UserOrder,
    UserStats,
)
from seed_data import default_users
from sessions import SessionManager, utcnow

logger = logging.getLogger(__name__)

USERS_KEY = 'koby-user-store'
USERS_VERSION = 1
MIN_PASSWORD_LENGTH = 6
RECENT_SIGNUP_WINDOW = timedelta(days=30)

# Fields update_user never writes; they have dedicated operations
PROTECTED_FIELDS = {'id', 'password_hash'}


class UserImportError(ValueError):
    """Import payload is not a JSON array of user objects."""


def _base36(number: int) -> str:
    digits = '0123456789abcdefghijklmnopqrstuvwxyz'
    out = ''
    while number:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
    return out or '0'


def generate_user_id() -> str:
    return f"user_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


def generate_order_id() -> str:
    return f"ORD{_base36(int(time.time() * 1000)).upper()}{secrets.token_hex(2).upper()}"


def active_admin_count(users: List[StoredUser]) -> int:
    return sum(1 for u in users if u.role == 'admin' and u.is_active)


def _normalize(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(
        self,
        storage: KeyValueStore,
        sessions: SessionManager,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.sessions = sessions
        self.clock = clock
        self.users: List[StoredUser] = []
        self._load()

    def _now(self) -> str:
        return self.clock().isoformat()

    def _load(self):
        state = load_blob(self.storage, USERS_KEY, USERS_VERSION)
        if state is None:
            return
        try:
            self.users = [StoredUser.model_validate(u) for u in state.get('users', [])]
        except ValidationError:
            logger.warning('Discarding account blob with invalid users')

    def flush(self):
        save_blob(self.storage, USERS_KEY, {'users': [u.dump() for u in self.users]}, USERS_VERSION)

    def initialize_defaults(self) -> bool:
        """Seed the demo accounts into an empty store. No-op otherwise."""
        if self.users:
            return False
        self._commit([StoredUser.model_validate(u) for u in default_users(self._now())])
        logger.info('Account store seeded with %d default users', len(self.users))
        return True

    # ---------- State transitions ----------

    def _commit(self, users: List[StoredUser]):
        self.users = users
        self.flush()

    def _apply(self, user_id: str, changes: dict, action: str = 'update') -> bool:
        """Replace one user with changes applied, unless that empties the active admin set."""
        current = self.get_user_by_id(user_id)
        if current is None:
            return False
        data = current.model_dump()
        data.update(changes)
        try:
            updated = StoredUser.model_validate(data)
        except ValidationError:
            logger.warning('Rejected invalid %s of %s', action, user_id)
            return False
        candidate = [updated if u.id == user_id else u for u in self.users]
        if self._orphans_admins(candidate):
            logger.warning('Refusing %s of %s: would leave no active admin', action, user_id)
            return False
        self._commit(candidate)
        return True

    def _orphans_admins(self, candidate: List[StoredUser]) -> bool:
        return active_admin_count(self.users) > 0 and active_admin_count(candidate) == 0

    # ---------- User management ----------

    def create_user(
        self,
        email: str,
        password_hash: str,
        name: str,
        role: str = 'user',
        phone: Optional[str] = None,
        address: Optional[UserAddress] = None,
    ) -> Optional[StoredUser]:
        if self.get_user_by_email(email) is not None:
            return None
        now = self._now()
        user = StoredUser(
            id=generate_user_id(),
            email=email.strip(),
            password_hash=password_hash,
            name=name,
            role=role,
            phone=phone,
            address=address,
            join_date=now,
            last_login=now,
            is_active=True,
            email_verified=False,
        )
        self._commit([*self.users, user])
        return user

    def update_user(self, user_id: str, updates: dict) -> bool:
        changes = {}
        for key, value in updates.items():
            name = _field_name(key)
            if name in StoredUser.model_fields and name not in PROTECTED_FIELDS:
                changes[name] = value
        if 'email' in changes:
            other = self.get_user_by_email(changes['email'])
            if other is not None and other.id != user_id:
                return False
        return self._apply(user_id, changes)

    def delete_user(self, user_id: str) -> bool:
        if self.sessions.get_session_user_id() == user_id:
            logger.warning('Refusing to delete the signed-in user %s', user_id)
            return False
        if self.get_user_by_id(user_id) is None:
            return False
        candidate = [u for u in self.users if u.id != user_id]
        if self._orphans_admins(candidate):
            logger.warning('Refusing delete of %s: would leave no active admin', user_id)
            return False
        self._commit(candidate)
        return True

    def get_user_by_id(self, user_id: str) -> Optional[StoredUser]:
        return next((u for u in self.users if u.id == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[StoredUser]:
        wanted = _normalize(email)
        return next((u for u in self.users if _normalize(u.email) == wanted), None)

    def get_users(self) -> List[StoredUser]:
        return list(self.users)

    # ---------- Authentication ----------

    def authenticate(self, email: str, password: str) -> Optional[StoredUser]:
        """
        Return the user and open a session on success.

        Unknown email, inactive account and wrong password all return None
        so callers cannot tell which part of the credential was wrong.
        """
        user = self.get_user_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        self._apply(user.id, {'last_login': self._now()}, action='login')
        self.sessions.create_session(user.id)
        self.sessions.store_user_data(UserData(id=user.id, name=user.name, email=user.email, role=user.role))
        return self.get_user_by_id(user.id)

    def register(self, email: str, password: str, name: str) -> OperationResult:
        if not email or not password or not name:
            return OperationResult(success=False, message='All fields are required')
        if len(password) < MIN_PASSWORD_LENGTH:
            return OperationResult(success=False, message=f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        if self.get_user_by_email(email) is not None:
            return OperationResult(success=False, message='An account with this email already exists')
        user = self.create_user(email=email, password_hash=hash_password(password), name=name)
        if user is None:
            return OperationResult(success=False, message='Failed to create account')
        return OperationResult(success=True, message='Account created successfully', user=user)

    def change_password(self, user_id: str, old_password: str, new_password: str) -> OperationResult:
        user = self.get_user_by_id(user_id)
        if user is None:
            return OperationResult(success=False, message='User not found')
        if not verify_password(old_password, user.password_hash):
            return OperationResult(success=False, message='Current password is incorrect')
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return OperationResult(success=False, message=f'New password must be at least {MIN_PASSWORD_LENGTH} characters')
        if not self._apply(user_id, {'password_hash': hash_password(new_password)}, action='password change'):
            return OperationResult(success=False, message='Failed to change password')
        return OperationResult(success=True, message='Password changed successfully')

    def reset_password(self, user_id: str, new_password: str) -> bool:
        """Set a new password without the old one. Callers must be admins."""
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return False
        return self._apply(user_id, {'password_hash': hash_password(new_password)}, action='password reset')

    def logout(self) -> None:
        self.sessions.clear_session()
        self.sessions.clear_user_data()

    def current_user(self) -> Optional[StoredUser]:
        user_id = self.sessions.get_session_user_id()
        return self.get_user_by_id(user_id) if user_id else None

    # ---------- Profile ----------

    def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[UserAddress] = None,
    ) -> bool:
        if self.get_user_by_id(user_id) is None:
            return False
        changes = {}
        if name:
            changes['name'] = name
        if phone is not None:
            changes['phone'] = phone
        if address:
            changes['address'] = address
        return self._apply(user_id, changes)

    def update_notification_preferences(self, user_id: str, **preferences) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None:
            return False
        merged = {**user.notification_preferences.model_dump(), **preferences}
        return self._apply(user_id, {'notification_preferences': merged})

    # ---------- Orders ----------

    def add_order(self, user_id: str, items: list, total: float, status: OrderStatus = 'pending', date: Optional[str] = None) -> Optional[str]:
        user = self.get_user_by_id(user_id)
        if user is None:
            return None
        order = UserOrder(id=generate_order_id(), date=date or self._now(), items=items, total=total, status=status)
        self._apply(user_id, {'orders': [*user.orders, order]})
        return order.id

    def update_order_status(self, user_id: str, order_id: str, status: OrderStatus) -> bool:
        """Any status may be set; transitions are not validated here."""
        user = self.get_user_by_id(user_id)
        if user is None or not any(o.id == order_id for o in user.orders):
            return False
        orders = [{**o.model_dump(), 'status': status} if o.id == order_id else o for o in user.orders]
        return self._apply(user_id, {'orders': orders})

    # ---------- Favorites ----------

    def add_favorite(self, user_id: str, piece_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None or piece_id in user.favorites:
            return False
        return self._apply(user_id, {'favorites': [*user.favorites, piece_id]})

    def remove_favorite(self, user_id: str, piece_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None:
            return False
        return self._apply(user_id, {'favorites': [f for f in user.favorites if f != piece_id]})

    # ---------- Try-on requests ----------

    def add_try_on_request(self, user_id: str, festival_id: str, festival_name: str, items: List[str]) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None:
            return False
        request = TryOnRequest(
            festival_id=festival_id,
            festival_name=festival_name,
            items=items,
            status='pending',
            date=self._now(),
        )
        return self._apply(user_id, {'try_on_requests': [*user.try_on_requests, request]})

    def update_try_on_status(self, user_id: str, festival_id: str, status: TryOnStatus) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None:
            return False
        requests = [
            {**r.model_dump(), 'status': status} if r.festival_id == festival_id else r
            for r in user.try_on_requests
        ]
        return self._apply(user_id, {'try_on_requests': requests})

    # ---------- Admin actions ----------

    def toggle_user_status(self, user_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None:
            return False
        return self._apply(user_id, {'is_active': not user.is_active}, action='deactivation')

    def promote_to_admin(self, user_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None or user.role == 'admin':
            return False
        return self._apply(user_id, {'role': 'admin'}, action='promotion')

    def demote_from_admin(self, user_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        if user is None or user.role != 'admin':
            return False
        return self._apply(user_id, {'role': 'user'}, action='demotion')

    def get_user_stats(self) -> UserStats:
        cutoff = self.clock() - RECENT_SIGNUP_WINDOW
        return UserStats(
            total_users=len(self.users),
            active_users=sum(1 for u in self.users if u.is_active),
            admin_users=sum(1 for u in self.users if u.role == 'admin'),
            recent_signups=sum(1 for u in self.users if _parse_date(u.join_date) > cutoff),
        )

    # ---------- Bulk ----------

    def export_users(self) -> str:
        return json.dumps([u.dump(exclude={'password_hash'}) for u in self.users], indent=2)

    def import_users(self, json_data: str) -> ImportResult:
        try:
            entries = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise UserImportError('Invalid JSON format') from e
        if not isinstance(entries, list):
            raise UserImportError('Invalid data format: expected a JSON array')

        errors: List[str] = []
        accepted: List[StoredUser] = []
        seen = {_normalize(u.email) for u in self.users}
        default_hash = hash_password(DEFAULT_IMPORT_PASSWORD)
        now = self._now()

        for entry in entries:
            if not isinstance(entry, dict) or not entry.get('email') or not entry.get('name'):
                errors.append('Skipped user: missing email or name')
                continue
            email = str(entry['email'])
            if _normalize(email) in seen:
                errors.append(f'Skipped {email}: already exists')
                continue
            try:
                user = StoredUser.model_validate({
                    'id': generate_user_id(),
                    'email': email.strip(),
                    'passwordHash': default_hash,
                    'name': entry['name'],
                    'role': entry.get('role') or 'user',
                    'phone': entry.get('phone'),
                    'address': entry.get('address'),
                    'orders': entry.get('orders') or [],
                    'favorites': entry.get('favorites') or [],
                    'tryOnRequests': entry.get('tryOnRequests') or [],
                    'joinDate': entry.get('joinDate') or now,
                    'lastLogin': now,
                    'isActive': entry.get('isActive', True),
                    'emailVerified': False,
                    'notificationPreferences': entry.get('notificationPreferences') or {},
                })
            except ValidationError:
                errors.append(f'Skipped {email}: invalid record')
                continue
            seen.add(_normalize(email))
            accepted.append(user)

        if accepted:
            self._commit([*self.users, *accepted])
        logger.info('Imported %d users, skipped %d', len(accepted), len(errors))
        return ImportResult(success=True, imported=len(accepted), skipped=len(errors), errors=errors)


def _field_name(key: str) -> str:
    for name, info in StoredUser.model_fields.items():
        if key == name or key == info.alias:
            return name
    return key


def _parse_date(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
