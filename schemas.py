"""
Record Schemas

Pydantic models for every record the stores hold. Field names are
snake_case in Python; persisted blobs and export payloads use the camelCase
aliases so the JSON shape matches what the storefront client reads.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal['admin', 'user']
OrderStatus = Literal['pending', 'processing', 'shipped', 'delivered', 'cancelled']
TryOnStatus = Literal['pending', 'confirmed', 'completed', 'cancelled']
ReservationStatus = Literal['pending', 'confirmed', 'completed']


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self, **kwargs) -> dict:
        return self.model_dump(mode='json', by_alias=True, **kwargs)


# ---------- Catalog ----------

class WornBy(Record):
    name: str
    location: str
    story: str
    photo_url: str


class Piece(Record):
    """
    A catalog product
    Persisted under "product-store"
    """
    id: str = Field(..., description="Immutable identifier")
    name: str = Field(..., description="Display name")
    story: str = Field('', description="Long description")
    fabric_origin: str = Field('', description="Where the fabric comes from")
    denim_type: str = Field('', description="Denim mill / weight")
    vibe: str = Field('', description="Mood tag")
    image_url: str = Field('', description="Primary image")
    video_url: Optional[str] = None
    voice_note_url: Optional[str] = None
    created_for: str = Field('', description="Who the piece was made for")
    current_location: str = Field('', description="City the piece is in")
    weight: float = Field(0, ge=0, description="Weight in kg")
    views: int = Field(0, ge=0)
    hearts: int = Field(0, ge=0)
    inquiries: int = Field(0, ge=0)
    price: float = Field(..., ge=0, description="Price in dollars")
    available: bool = Field(True, description="Whether the piece can be bought")
    category: Optional[str] = None
    available_sizes: List[str] = Field(default_factory=list)
    worn_by: List[WornBy] = Field(default_factory=list)


class PieceDraft(Record):
    """Admin input for a new piece; id and counters are assigned by the store."""
    name: str
    story: str = ''
    fabric_origin: str = ''
    denim_type: str = ''
    vibe: str = ''
    image_url: str = ''
    video_url: Optional[str] = None
    voice_note_url: Optional[str] = None
    created_for: str = ''
    current_location: str = ''
    weight: float = Field(0, ge=0)
    price: float = Field(..., ge=0)
    available: bool = True
    category: Optional[str] = None
    available_sizes: List[str] = Field(default_factory=list)
    worn_by: List[WornBy] = Field(default_factory=list)


# ---------- Cart / journey ----------

class CartItem(Record):
    piece_id: str
    size: str
    quantity: int = Field(1, ge=1)


class TryOnReservation(Record):
    piece_id: str
    festival_id: str
    date: datetime
    status: ReservationStatus = 'pending'


class UserStory(Record):
    name: Optional[str] = None
    looking_for: Optional[str] = None
    vibe: Optional[str] = None
    festival_plan: Optional[str] = None
    connection_story: Optional[str] = None


# ---------- Accounts ----------

class UserAddress(Record):
    street: str
    city: str
    country: str
    postal_code: str


class OrderItem(Record):
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class UserOrder(Record):
    id: str
    date: str
    items: List[OrderItem] = Field(default_factory=list)
    total: float = Field(..., ge=0)
    status: OrderStatus = 'pending'


class TryOnRequest(Record):
    festival_id: str
    festival_name: str
    items: List[str] = Field(default_factory=list)
    status: TryOnStatus = 'pending'
    date: str


class NotificationPreferences(Record):
    order_updates: bool = True
    marketing: bool = False
    try_on_reminders: bool = True


class StoredUser(Record):
    """
    An account
    Persisted under "koby-user-store"; the digest never leaves the store in exports
    """
    id: str = Field(..., description="Unique identifier")
    email: str = Field(..., description="Unique, compared case-insensitively")
    password_hash: str = Field(..., description="SHA-256 digest (internal)")
    name: str = Field(..., description="Display name")
    role: Role = 'user'
    phone: Optional[str] = None
    address: Optional[UserAddress] = None
    orders: List[UserOrder] = Field(default_factory=list)
    favorites: List[str] = Field(default_factory=list)
    try_on_requests: List[TryOnRequest] = Field(default_factory=list)
    join_date: str
    last_login: str
    is_active: bool = Field(True, description="Inactive accounts cannot log in")
    email_verified: bool = False
    notification_preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UserStats(Record):
    total_users: int
    active_users: int
    admin_users: int
    recent_signups: int


# ---------- Sessions ----------

class Session(Record):
    user_id: str
    token: str
    created_at: datetime
    expires_at: datetime


class UserData(Record):
    """Display-only record of the signed-in user, kept in durable storage."""
    id: str
    name: str
    email: str
    role: Role


# ---------- Results ----------

class OperationResult(Record):
    success: bool
    message: str
    user: Optional[StoredUser] = None


class ImportResult(Record):
    success: bool
    imported: int
    skipped: int
    errors: List[str] = Field(default_factory=list)


class FilterStats(Record):
    total_pieces: int
    available_pieces: int
    average_price: float
    highest_price: float
    lowest_price: float
    total_hearts: int
    total_views: int


class CartLine(Record):
    piece_id: str
    size: str
    quantity: int
    name: Optional[str] = None
    price: float = 0


class CartSummary(Record):
    items: List[CartLine]
    total: float
    count: int


