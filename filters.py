"""
Search, filter and sort over a catalog snapshot.

Every function is pure: it takes a list of pieces and returns a new list or
a reduction. A filter whose parameter is empty passes everything through,
so filters compose by AND in any order.
"""
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from schemas import FilterStats, Piece

SortOption = Literal['newest', 'price-low', 'price-high', 'most-popular', 'most-viewed']
POPULARITY_THRESHOLD = 50

SEARCH_FIELDS = (
    'name',
    'story',
    'vibe',
    'fabric_origin',
    'denim_type',
    'created_for',
    'current_location',
)


def search_piece(piece: Piece, query: str) -> bool:
    if not query or not query.strip():
        return True
    needle = query.lower()
    return any(
        needle in value.lower()
        for value in (getattr(piece, field) for field in SEARCH_FIELDS)
        if value
    )


def search_pieces(pieces: Sequence[Piece], query: Optional[str]) -> List[Piece]:
    return [p for p in pieces if search_piece(p, query or '')]


def filter_by_price_range(pieces: Sequence[Piece], min_price: Optional[float] = None, max_price: Optional[float] = None) -> List[Piece]:
    """Inclusive on both ends; a missing bound does not restrict."""
    return [
        p for p in pieces
        if (min_price is None or p.price >= min_price) and (max_price is None or p.price <= max_price)
    ]


def filter_by_vibes(pieces: Sequence[Piece], vibes: Optional[Iterable[str]]) -> List[Piece]:
    wanted = set(vibes or ())
    if not wanted:
        return list(pieces)
    return [p for p in pieces if p.vibe in wanted]


def filter_by_categories(pieces: Sequence[Piece], categories: Optional[Iterable[str]]) -> List[Piece]:
    wanted = set(categories or ())
    if not wanted:
        return list(pieces)
    return [p for p in pieces if p.category and p.category in wanted]


def filter_by_availability(pieces: Sequence[Piece], available_only: bool = False) -> List[Piece]:
    if not available_only:
        return list(pieces)
    return [p for p in pieces if p.available]


def filter_by_popularity(pieces: Sequence[Piece], min_hearts: Optional[int] = None) -> List[Piece]:
    if min_hearts is None:
        return list(pieces)
    return [p for p in pieces if p.hearts >= min_hearts]


def sort_pieces(pieces: Sequence[Piece], sort_by: SortOption = 'newest') -> List[Piece]:
    # sorted() is stable, so ties keep insertion order
    if sort_by == 'price-low':
        return sorted(pieces, key=lambda p: p.price)
    if sort_by == 'price-high':
        return sorted(pieces, key=lambda p: -p.price)
    if sort_by == 'most-popular':
        return sorted(pieces, key=lambda p: -p.hearts)
    if sort_by == 'most-viewed':
        return sorted(pieces, key=lambda p: -p.views)
    return list(pieces)


def apply_filters(
    pieces: Sequence[Piece],
    search: Optional[str] = None,
    price_range: Optional[Tuple[Optional[float], Optional[float]]] = None,
    vibes: Optional[Iterable[str]] = None,
    categories: Optional[Iterable[str]] = None,
    available_only: bool = False,
    popular_only: bool = False,
    min_hearts: Optional[int] = None,
) -> List[Piece]:
    filtered = search_pieces(pieces, search)
    if price_range is not None:
        filtered = filter_by_price_range(filtered, *price_range)
    filtered = filter_by_vibes(filtered, vibes)
    filtered = filter_by_categories(filtered, categories)
    filtered = filter_by_availability(filtered, available_only)
    if min_hearts is None and popular_only:
        min_hearts = POPULARITY_THRESHOLD
    return filter_by_popularity(filtered, min_hearts)


# ---------- Derived values ----------

def get_unique_values(pieces: Sequence[Piece], field: str) -> list:
    seen = []
    for p in pieces:
        value = getattr(p, field, None)
        if value and value not in seen:
            seen.append(value)
    return seen


def get_price_range(pieces: Sequence[Piece]) -> Tuple[float, float]:
    if not pieces:
        return (0, 0)
    prices = [p.price for p in pieces]
    return (min(prices), max(prices))


def get_filter_stats(pieces: Sequence[Piece]) -> FilterStats:
    lowest, highest = get_price_range(pieces)
    return FilterStats(
        total_pieces=len(pieces),
        available_pieces=sum(1 for p in pieces if p.available),
        average_price=round(sum(p.price for p in pieces) / len(pieces)) if pieces else 0,
        highest_price=highest,
        lowest_price=lowest,
        total_hearts=sum(p.hearts for p in pieces),
        total_views=sum(p.views for p in pieces),
    )
