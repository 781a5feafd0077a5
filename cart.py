"""
Cart / journey store

Line items keyed by (piece_id, size) in insertion order, plus the shopper's
browsing journey: favorites, hearted pieces, recently viewed, search
history, try-on reservations and story preferences. Prices come from the
catalog snapshot at read time; the cart never stores them.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Set

from pydantic import ValidationError

from catalog import CatalogStore
from database import KeyValueStore, load_blob, save_blob
from schemas import CartItem, CartLine, CartSummary, Piece, TryOnReservation, UserStory

logger = logging.getLogger(__name__)

CART_KEY = 'kobys-threads-storage'
HISTORY_LIMIT = 10
RECOMMENDATION_LIMIT = 6


class CartStore:
    def __init__(self, storage: KeyValueStore, catalog: CatalogStore):
        self.storage = storage
        self.catalog = catalog
        self.cart_items: List[CartItem] = []
        self.favorites: List[str] = []
        self.hearted_pieces: Set[str] = set()
        self.viewed_pieces: Set[str] = set()
        self.recently_viewed: List[str] = []
        self.search_history: List[str] = []
        self.try_on_reservations: List[TryOnReservation] = []
        self.user_story = UserStory()
        self._load()

    def _load(self):
        state = load_blob(self.storage, CART_KEY)
        if state is None:
            return
        try:
            cart_items = [CartItem.model_validate(i) for i in state.get('cartItems', [])]
            reservations = [TryOnReservation.model_validate(r) for r in state.get('tryOnReservations', [])]
            user_story = UserStory.model_validate(state.get('userStory', {}))
        except ValidationError:
            logger.warning('Discarding cart blob with invalid records')
            return
        self.cart_items = cart_items
        self.favorites = list(state.get('favorites', []))
        self.hearted_pieces = set(state.get('heartedPieces', []))
        self.viewed_pieces = set(state.get('viewedPieces', []))
        self.recently_viewed = list(state.get('recentlyViewed', []))
        self.search_history = list(state.get('searchHistory', []))
        self.try_on_reservations = reservations
        self.user_story = user_story

    def flush(self):
        save_blob(self.storage, CART_KEY, {
            'cartItems': [i.dump() for i in self.cart_items],
            'favorites': self.favorites,
            'heartedPieces': sorted(self.hearted_pieces),
            'viewedPieces': sorted(self.viewed_pieces),
            'recentlyViewed': self.recently_viewed,
            'searchHistory': self.search_history,
            'tryOnReservations': [r.dump() for r in self.try_on_reservations],
            'userStory': self.user_story.dump(exclude_none=True),
        })

    # ---------- Cart ----------

    def _find(self, piece_id: str, size: str) -> Optional[CartItem]:
        return next((i for i in self.cart_items if i.piece_id == piece_id and i.size == size), None)

    def add_to_cart(self, piece_id: str, size: str) -> None:
        existing = self._find(piece_id, size)
        if existing is None:
            self.cart_items = [*self.cart_items, CartItem(piece_id=piece_id, size=size, quantity=1)]
        else:
            self.cart_items = [
                CartItem(piece_id=i.piece_id, size=i.size, quantity=i.quantity + 1) if i is existing else i
                for i in self.cart_items
            ]
        self.flush()

    def remove_from_cart(self, piece_id: str, size: str) -> None:
        self.cart_items = [i for i in self.cart_items if not (i.piece_id == piece_id and i.size == size)]
        self.flush()

    def update_quantity(self, piece_id: str, size: str, quantity: int) -> None:
        """Set an absolute quantity; zero or less removes the line. Non-integer quantities are ignored."""
        if quantity <= 0:
            self.remove_from_cart(piece_id, size)
            return
        existing = self._find(piece_id, size)
        if existing is None:
            return
        try:
            updated = CartItem(piece_id=piece_id, size=size, quantity=quantity)
        except ValidationError:
            logger.warning('Rejected quantity %r for %s/%s', quantity, piece_id, size)
            return
        self.cart_items = [updated if i is existing else i for i in self.cart_items]
        self.flush()

    def clear_cart(self) -> None:
        self.cart_items = []
        self.flush()

    def get_cart_total(self) -> float:
        total = 0
        for item in self.cart_items:
            piece = self.catalog.get_by_id(item.piece_id)
            total += (piece.price if piece else 0) * item.quantity
        return total

    def get_cart_count(self) -> int:
        return sum(i.quantity for i in self.cart_items)

    def summary(self) -> CartSummary:
        lines = []
        for item in self.cart_items:
            piece = self.catalog.get_by_id(item.piece_id)
            lines.append(CartLine(
                piece_id=item.piece_id,
                size=item.size,
                quantity=item.quantity,
                name=piece.name if piece else None,
                price=piece.price if piece else 0,
            ))
        return CartSummary(items=lines, total=self.get_cart_total(), count=self.get_cart_count())

    # ---------- Favorites & hearts ----------

    def toggle_favorite(self, piece_id: str) -> bool:
        """Returns True if the piece is a favorite afterwards."""
        if piece_id in self.favorites:
            self.favorites = [f for f in self.favorites if f != piece_id]
        else:
            self.favorites = [*self.favorites, piece_id]
        self.flush()
        return piece_id in self.favorites

    def is_favorite(self, piece_id: str) -> bool:
        return piece_id in self.favorites

    def heart_piece(self, piece_id: str) -> int:
        """Toggle the heart and return the delta to apply to the piece's counter."""
        if piece_id in self.hearted_pieces:
            self.hearted_pieces = self.hearted_pieces - {piece_id}
            delta = -1
        else:
            self.hearted_pieces = self.hearted_pieces | {piece_id}
            delta = 1
        self.flush()
        return delta

    # ---------- Journey ----------

    def view_piece(self, piece_id: str) -> None:
        self.viewed_pieces = self.viewed_pieces | {piece_id}
        self.recently_viewed = [piece_id, *[p for p in self.recently_viewed if p != piece_id]][:HISTORY_LIMIT]
        self.flush()

    def clear_recently_viewed(self) -> None:
        self.recently_viewed = []
        self.flush()

    def add_to_search_history(self, query: str) -> None:
        if not query or not query.strip():
            return
        rest = [q for q in self.search_history if q.lower() != query.lower()]
        self.search_history = [query, *rest][:HISTORY_LIMIT]
        self.flush()

    def clear_search_history(self) -> None:
        self.search_history = []
        self.flush()

    def update_user_story(self, **story) -> UserStory:
        merged = {**self.user_story.model_dump(exclude_none=True), **{k: v for k, v in story.items() if v is not None}}
        self.user_story = UserStory.model_validate(merged)
        self.flush()
        return self.user_story

    # ---------- Try-on reservations ----------

    def add_try_on_reservation(self, piece_id: str, festival_id: str) -> bool:
        if any(r.piece_id == piece_id and r.festival_id == festival_id for r in self.try_on_reservations):
            return False
        reservation = TryOnReservation(
            piece_id=piece_id,
            festival_id=festival_id,
            date=datetime.now(timezone.utc),
        )
        self.try_on_reservations = [*self.try_on_reservations, reservation]
        self.flush()
        return True

    def remove_try_on_reservation(self, piece_id: str, festival_id: str) -> None:
        self.try_on_reservations = [
            r for r in self.try_on_reservations
            if not (r.piece_id == piece_id and r.festival_id == festival_id)
        ]
        self.flush()

    def clear_try_on_reservations(self, festival_id: str) -> None:
        self.try_on_reservations = [r for r in self.try_on_reservations if r.festival_id != festival_id]
        self.flush()

    def get_try_on_reservations(self, festival_id: Optional[str] = None) -> List[TryOnReservation]:
        if festival_id:
            return [r for r in self.try_on_reservations if r.festival_id == festival_id]
        return list(self.try_on_reservations)

    # ---------- Recommendations ----------

    def get_recommendations(self) -> List[Piece]:
        story = self.user_story

        def score(piece: Piece) -> float:
            value = piece.hearts * 0.1 + piece.views * 0.01
            if story.vibe and story.vibe.lower() in piece.vibe.lower():
                value += 3
            if story.looking_for and story.looking_for.lower() in piece.created_for.lower():
                value += 2
            return value

        candidates = [p for p in self.catalog.get_all() if p.available and p.id not in self.viewed_pieces]
        return sorted(candidates, key=score, reverse=True)[:RECOMMENDATION_LIMIT]
