"""
Catalog store

CRUD over pieces. The whole collection is persisted under one key together
with an "initialized" flag that guards the one-time seed.
"""
import logging
import secrets
import time
from typing import List, Optional

from pydantic import ValidationError

from database import KeyValueStore, load_blob, save_blob
from schemas import Piece, PieceDraft
from seed_data import SEED_PIECES

logger = logging.getLogger(__name__)

CATALOG_KEY = 'product-store'

# Fields an update may never touch
PROTECTED_FIELDS = {'id'}


def generate_id() -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


class CatalogStore:
    def __init__(self, storage: KeyValueStore):
        self.storage = storage
        self.products: List[Piece] = []
        self.initialized = False
        self._load()

    def _load(self):
        state = load_blob(self.storage, CATALOG_KEY)
        if state is None:
            return
        try:
            products = [Piece.model_validate(p) for p in state.get('products', [])]
        except ValidationError:
            logger.warning('Discarding catalog blob with invalid pieces')
            return
        self.products = products
        self.initialized = bool(state.get('initialized', False))

    def _commit(self, products: List[Piece], initialized: Optional[bool] = None):
        self.products = products
        if initialized is not None:
            self.initialized = initialized
        self.flush()

    def flush(self):
        save_blob(self.storage, CATALOG_KEY, {
            'products': [p.dump() for p in self.products],
            'initialized': self.initialized,
        })

    def initialize_from_seed(self) -> bool:
        """Populate from the seed dataset once. Later calls are no-ops."""
        if self.initialized:
            return False
        self._commit([Piece.model_validate(p) for p in SEED_PIECES], initialized=True)
        logger.info('Catalog seeded with %d pieces', len(self.products))
        return True

    # ---------- CRUD ----------

    def add_product(self, draft: PieceDraft) -> Piece:
        piece = Piece(**draft.model_dump(), id=generate_id(), views=0, hearts=0, inquiries=0)
        self._commit([*self.products, piece])
        return piece

    def update_product(self, piece_id: str, updates: dict) -> bool:
        """Merge-patch a piece. Unknown ids are ignored."""
        current = self.get_by_id(piece_id)
        if current is None:
            return False
        data = current.model_dump()
        for field, value in updates.items():
            name = _field_name(field)
            if name in Piece.model_fields and name not in PROTECTED_FIELDS:
                data[name] = value
        try:
            updated = Piece.model_validate(data)
        except ValidationError:
            logger.warning('Rejected invalid update to piece %s', piece_id)
            return False
        self._commit([updated if p.id == piece_id else p for p in self.products])
        return True

    def delete_product(self, piece_id: str) -> bool:
        remaining = [p for p in self.products if p.id != piece_id]
        if len(remaining) == len(self.products):
            return False
        self._commit(remaining)
        return True

    def duplicate_product(self, piece_id: str) -> Optional[Piece]:
        source = self.get_by_id(piece_id)
        if source is None:
            return None
        copy = source.model_copy(update={
            'id': generate_id(),
            'name': f"{source.name} (Copy)",
            'views': 0,
            'hearts': 0,
            'inquiries': 0,
        }, deep=True)
        self._commit([*self.products, copy])
        return copy

    def toggle_availability(self, piece_id: str) -> bool:
        piece = self.get_by_id(piece_id)
        if piece is None:
            return False
        return self.update_product(piece_id, {'available': not piece.available})

    # ---------- Popularity counters ----------

    def record_view(self, piece_id: str) -> bool:
        piece = self.get_by_id(piece_id)
        if piece is None:
            return False
        return self.update_product(piece_id, {'views': piece.views + 1})

    def adjust_hearts(self, piece_id: str, delta: int) -> bool:
        piece = self.get_by_id(piece_id)
        if piece is None:
            return False
        return self.update_product(piece_id, {'hearts': max(0, piece.hearts + delta)})

    # ---------- Lookups ----------

    def get_by_id(self, piece_id: str) -> Optional[Piece]:
        return next((p for p in self.products if p.id == piece_id), None)

    def get_all(self) -> List[Piece]:
        return list(self.products)


def _field_name(key: str) -> str:
    """Accept either the python name or its camelCase alias."""
    for name, info in Piece.model_fields.items():
        if key == name or key == info.alias:
            return name
    return key
