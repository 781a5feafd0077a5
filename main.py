import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, EmailStr, Field

from filters import SortOption, apply_filters, get_filter_stats, get_unique_values, sort_pieces
from schemas import (
    NotificationPreferences,
    OrderItem,
    OrderStatus,
    PieceDraft,
    StoredUser,
    UserAddress,
    WornBy,
)
from services import Storefront
from users import UserImportError


@asynccontextmanager
async def lifespan(app: FastAPI):
    storefront = getattr(app.state, 'storefront', None)
    if storefront is None:
        storefront = Storefront.from_env()
        app.state.storefront = storefront
    storefront.start()
    yield
    storefront.close()


app = FastAPI(title="Koby's Threads Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Dependencies ----------

def get_storefront(request: Request) -> Storefront:
    return request.app.state.storefront


def auth_dependency(
    authorization: Optional[str] = Header(None),
    sf: Storefront = Depends(get_storefront),
) -> StoredUser:
    if not authorization or not authorization.startswith('Bearer '):
        raise HTTPException(status_code=401, detail='Unauthorized')
    token = authorization.split(' ', 1)[1]
    if not sf.sessions.validate_session(token):
        raise HTTPException(status_code=401, detail='Session expired')
    user = sf.users.current_user()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail='User not found')
    sf.sessions.extend_session()
    return user


def require_admin(user: StoredUser = Depends(auth_dependency)) -> StoredUser:
    if user.role != 'admin':
        raise HTTPException(status_code=403, detail='Admin access required')
    return user


def public_user(user: StoredUser) -> dict:
    return user.dump(exclude={'password_hash'})


def session_token(sf: Storefront) -> str:
    session = sf.sessions.get_session()
    if session is None:
        raise HTTPException(status_code=500, detail='Session could not be created')
    return session.token


# ---------- Models ----------

class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str

class ResetPasswordRequest(BaseModel):
    new_password: str

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[UserAddress] = None

class PieceUpdate(BaseModel):
    name: Optional[str] = None
    story: Optional[str] = None
    fabric_origin: Optional[str] = None
    denim_type: Optional[str] = None
    vibe: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    voice_note_url: Optional[str] = None
    created_for: Optional[str] = None
    current_location: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    available: Optional[bool] = None
    category: Optional[str] = None
    available_sizes: Optional[List[str]] = None
    worn_by: Optional[List[WornBy]] = None

class AddToCartRequest(BaseModel):
    piece_id: str
    size: str

class UpdateQuantityRequest(BaseModel):
    piece_id: str
    size: str
    quantity: int

class UpdateStatusBody(BaseModel):
    status: OrderStatus

class ImportRequest(BaseModel):
    data: str


# ---------- Routes ----------

@app.get("/")
def read_root():
    return {"message": "Koby's Threads Storefront API"}

@app.get("/test")
def test_database(sf: Storefront = Depends(get_storefront)):
    return {
        "backend": "✅ Running",
        "storage": type(sf.storage).__name__,
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "pieces": len(sf.catalog.get_all()),
        "users": len(sf.users.get_users()),
    }

# Auth
@app.post('/api/signup')
def signup(payload: SignupRequest, sf: Storefront = Depends(get_storefront)):
    result = sf.users.register(payload.email, payload.password, payload.name)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    user = sf.users.authenticate(payload.email, payload.password)
    return {'token': session_token(sf), 'user': public_user(user)}

@app.post('/api/login')
def login(payload: LoginRequest, sf: Storefront = Depends(get_storefront)):
    user = sf.users.authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail='Invalid credentials')
    return {'token': session_token(sf), 'user': public_user(user)}

@app.post('/api/logout')
def logout(authorization: Optional[str] = Header(None), sf: Storefront = Depends(get_storefront)):
    if authorization and authorization.startswith('Bearer '):
        token = authorization.split(' ', 1)[1]
        if sf.sessions.validate_session(token):
            sf.users.logout()
    return {'message': 'Logged out'}

@app.get('/api/me')
def me(user: StoredUser = Depends(auth_dependency)):
    return public_user(user)

@app.patch('/api/me')
def update_me(payload: ProfileUpdate, user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    sf.users.update_profile(user.id, name=payload.name, phone=payload.phone, address=payload.address)
    return public_user(sf.users.get_user_by_id(user.id))

@app.put('/api/me/notifications')
def update_notifications(payload: NotificationPreferences, user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    sf.users.update_notification_preferences(user.id, **payload.model_dump())
    return public_user(sf.users.get_user_by_id(user.id))

@app.post('/api/me/password')
def change_password(payload: ChangePasswordRequest, user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    result = sf.users.change_password(user.id, payload.old_password, payload.new_password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return {'message': result.message}

@app.get('/api/me/orders')
def my_orders(user: StoredUser = Depends(auth_dependency)):
    return [o.dump() for o in user.orders]

@app.post('/api/me/favorites/{piece_id}')
def add_my_favorite(piece_id: str, user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    return {'added': sf.users.add_favorite(user.id, piece_id)}

@app.delete('/api/me/favorites/{piece_id}')
def remove_my_favorite(piece_id: str, user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    return {'removed': sf.users.remove_favorite(user.id, piece_id)}

# Products
@app.get('/api/products')
def list_products(
    q: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    vibe: Optional[List[str]] = Query(None),
    category: Optional[List[str]] = Query(None),
    available_only: bool = False,
    popular_only: bool = False,
    min_hearts: Optional[int] = None,
    sort: SortOption = 'newest',
    sf: Storefront = Depends(get_storefront),
):
    if q:
        sf.cart.add_to_search_history(q)
    pieces = apply_filters(
        sf.catalog.get_all(),
        search=q,
        price_range=(min_price, max_price),
        vibes=vibe,
        categories=category,
        available_only=available_only,
        popular_only=popular_only,
        min_hearts=min_hearts,
    )
    return [p.dump() for p in sort_pieces(pieces, sort)]

@app.get('/api/products/stats')
def product_stats(sf: Storefront = Depends(get_storefront)):
    pieces = sf.catalog.get_all()
    return {
        **get_filter_stats(pieces).dump(),
        'vibes': get_unique_values(pieces, 'vibe'),
        'categories': get_unique_values(pieces, 'category'),
    }

@app.get('/api/recommendations')
def recommendations(sf: Storefront = Depends(get_storefront)):
    return [p.dump() for p in sf.cart.get_recommendations()]

@app.get('/api/products/{piece_id}')
def get_product(piece_id: str, sf: Storefront = Depends(get_storefront)):
    if not sf.catalog.record_view(piece_id):
        raise HTTPException(status_code=404, detail='Product not found')
    sf.cart.view_piece(piece_id)
    return sf.catalog.get_by_id(piece_id).dump()

@app.post('/api/products/{piece_id}/heart')
def heart_product(piece_id: str, sf: Storefront = Depends(get_storefront)):
    if sf.catalog.get_by_id(piece_id) is None:
        raise HTTPException(status_code=404, detail='Product not found')
    sf.catalog.adjust_hearts(piece_id, sf.cart.heart_piece(piece_id))
    return {'hearted': piece_id in sf.cart.hearted_pieces, 'hearts': sf.catalog.get_by_id(piece_id).hearts}

@app.post('/api/products/{piece_id}/favorite')
def favorite_product(piece_id: str, sf: Storefront = Depends(get_storefront)):
    return {'favorite': sf.cart.toggle_favorite(piece_id)}

# Products (admin)
@app.post('/api/admin/products/seed')
def seed_products(admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    seeded = sf.catalog.initialize_from_seed()
    return {'seeded': seeded, 'count': len(sf.catalog.get_all())}

@app.post('/api/admin/products')
def create_product(payload: PieceDraft, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    return sf.catalog.add_product(payload).dump()

@app.patch('/api/admin/products/{piece_id}')
def update_product(piece_id: str, payload: PieceUpdate, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    if sf.catalog.get_by_id(piece_id) is None:
        raise HTTPException(status_code=404, detail='Product not found')
    if not sf.catalog.update_product(piece_id, payload.model_dump(exclude_unset=True)):
        raise HTTPException(status_code=400, detail='Invalid product update')
    return sf.catalog.get_by_id(piece_id).dump()

@app.delete('/api/admin/products/{piece_id}')
def delete_product(piece_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    if not sf.catalog.delete_product(piece_id):
        raise HTTPException(status_code=404, detail='Product not found')
    return {'deleted': True}

@app.post('/api/admin/products/{piece_id}/duplicate')
def duplicate_product(piece_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    copy = sf.catalog.duplicate_product(piece_id)
    if copy is None:
        raise HTTPException(status_code=404, detail='Product not found')
    return copy.dump()

@app.post('/api/admin/products/{piece_id}/toggle')
def toggle_product(piece_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    if not sf.catalog.toggle_availability(piece_id):
        raise HTTPException(status_code=404, detail='Product not found')
    return {'available': sf.catalog.get_by_id(piece_id).available}

# Cart
@app.get('/api/cart')
def get_cart(sf: Storefront = Depends(get_storefront)):
    return sf.cart.summary().dump()

@app.post('/api/cart')
def add_to_cart(payload: AddToCartRequest, sf: Storefront = Depends(get_storefront)):
    if sf.catalog.get_by_id(payload.piece_id) is None:
        raise HTTPException(status_code=404, detail='Product not found')
    sf.cart.add_to_cart(payload.piece_id, payload.size)
    return sf.cart.summary().dump()

@app.put('/api/cart')
def update_cart_quantity(payload: UpdateQuantityRequest, sf: Storefront = Depends(get_storefront)):
    sf.cart.update_quantity(payload.piece_id, payload.size, payload.quantity)
    return sf.cart.summary().dump()

@app.delete('/api/cart/{piece_id}/{size}')
def remove_cart_item(piece_id: str, size: str, sf: Storefront = Depends(get_storefront)):
    sf.cart.remove_from_cart(piece_id, size)
    return sf.cart.summary().dump()

@app.delete('/api/cart')
def clear_cart(sf: Storefront = Depends(get_storefront)):
    sf.cart.clear_cart()
    return sf.cart.summary().dump()

@app.post('/api/checkout')
def checkout(user: StoredUser = Depends(auth_dependency), sf: Storefront = Depends(get_storefront)):
    summary = sf.cart.summary()
    items = [
        OrderItem(name=line.name, price=line.price, quantity=line.quantity)
        for line in summary.items
        if line.name is not None
    ]
    if not items:
        raise HTTPException(status_code=400, detail='Cart is empty')
    order_id = sf.users.add_order(user.id, items=items, total=summary.total)
    sf.cart.clear_cart()
    return {'order_id': order_id, 'total': summary.total}

# Admin users
def _admin_result(ok: bool, sf: Storefront, user_id: str, detail: str):
    if ok:
        return {'success': True}
    if sf.users.get_user_by_id(user_id) is None:
        raise HTTPException(status_code=404, detail='User not found')
    raise HTTPException(status_code=409, detail=detail)

@app.get('/api/admin/users')
def list_users(admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    return [public_user(u) for u in sf.users.get_users()]

@app.get('/api/admin/users/stats')
def user_stats(admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    return sf.users.get_user_stats().dump()

@app.get('/api/admin/users/export')
def export_users(admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    return {'data': sf.users.export_users()}

@app.post('/api/admin/users/import')
def import_users(payload: ImportRequest, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    try:
        result = sf.users.import_users(payload.data)
    except UserImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.dump()

@app.delete('/api/admin/users/{user_id}')
def delete_user(user_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    ok = sf.users.delete_user(user_id)
    return _admin_result(ok, sf, user_id, 'Cannot delete the signed-in user or the last admin')

@app.post('/api/admin/users/{user_id}/toggle')
def toggle_user(user_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    ok = sf.users.toggle_user_status(user_id)
    return _admin_result(ok, sf, user_id, 'Cannot deactivate the last active admin')

@app.post('/api/admin/users/{user_id}/promote')
def promote_user(user_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    ok = sf.users.promote_to_admin(user_id)
    return _admin_result(ok, sf, user_id, 'User is already an admin')

@app.post('/api/admin/users/{user_id}/demote')
def demote_user(user_id: str, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    ok = sf.users.demote_from_admin(user_id)
    return _admin_result(ok, sf, user_id, 'User is not an admin or is the last admin')

@app.post('/api/admin/users/{user_id}/reset-password')
def reset_password(user_id: str, payload: ResetPasswordRequest, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    if sf.users.get_user_by_id(user_id) is None:
        raise HTTPException(status_code=404, detail='User not found')
    if not sf.users.reset_password(user_id, payload.new_password):
        raise HTTPException(status_code=400, detail='Password must be at least 6 characters')
    return {'success': True}

@app.patch('/api/admin/users/{user_id}/orders/{order_id}')
def update_order_status(user_id: str, order_id: str, body: UpdateStatusBody, admin=Depends(require_admin), sf: Storefront = Depends(get_storefront)):
    if not sf.users.update_order_status(user_id, order_id, body.status):
        raise HTTPException(status_code=404, detail='Order not found')
    return {'updated': True}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
