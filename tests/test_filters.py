import pytest

from filters import (
    apply_filters,
    filter_by_availability,
    filter_by_categories,
    filter_by_popularity,
    filter_by_price_range,
    filter_by_vibes,
    get_filter_stats,
    get_price_range,
    get_unique_values,
    search_pieces,
    sort_pieces,
)
from schemas import Piece
from seed_data import SEED_PIECES


@pytest.fixture
def pieces():
    return [Piece.model_validate(p) for p in SEED_PIECES]


def ids(pieces):
    return [p.id for p in pieces]


def test_empty_query_matches_everything(pieces):
    assert search_pieces(pieces, '') == pieces
    assert search_pieces(pieces, '   ') == pieces
    assert search_pieces(pieces, None) == pieces


def test_search_is_case_insensitive_across_fields(pieces):
    assert ids(search_pieces(pieces, 'KENTE')) == ['sunset-warrior']
    assert ids(search_pieces(pieces, 'street wisdom')) == ['night-market']
    assert ids(search_pieces(pieces, 'hustlers')) == ['night-market']
    assert len(search_pieces(pieces, 'bangkok')) == len(pieces)
    assert search_pieces(pieces, 'velvet') == []


def test_price_range_is_inclusive(pieces):
    assert ids(filter_by_price_range(pieces, 350, 380)) == ['midnight-bloom', 'gentle-rebel', 'night-market']
    assert filter_by_price_range(pieces) == pieces
    assert ids(filter_by_price_range(pieces, min_price=500)) == ['golden-hour']


def test_empty_set_filters_pass_through(pieces):
    assert filter_by_vibes(pieces, []) == pieces
    assert filter_by_categories(pieces, None) == pieces
    assert filter_by_availability(pieces, False) == pieces
    assert filter_by_popularity(pieces, None) == pieces


def test_membership_filters(pieces):
    assert ids(filter_by_vibes(pieces, ['Street wisdom', 'Quiet strength'])) == ['gentle-rebel', 'night-market']
    assert ids(filter_by_categories(pieces, ['khlassic-suits'])) == ['golden-hour', 'night-market']
    assert 'gentle-rebel' not in ids(filter_by_availability(pieces, True))
    assert ids(filter_by_popularity(pieces, 100)) == ['festival-spirit', 'golden-hour']


def test_filters_commute(pieces):
    a = filter_by_categories(filter_by_price_range(pieces, 350, 450), ['t-shirts'])
    b = filter_by_price_range(filter_by_categories(pieces, ['t-shirts']), 350, 450)
    assert ids(a) == ids(b) == ['sunset-warrior', 'gentle-rebel']


def test_apply_filters_is_conjunction(pieces):
    result = apply_filters(pieces, search='denim', price_range=(300, 450), available_only=True, popular_only=True)
    assert ids(result) == ['midnight-bloom', 'festival-spirit', 'ocean-dreams', 'night-market']
    assert apply_filters(pieces) == pieces


def test_sorts(pieces):
    assert ids(sort_pieces(pieces, 'price-low'))[0] == 'gentle-rebel'
    assert ids(sort_pieces(pieces, 'price-high'))[0] == 'golden-hour'
    assert ids(sort_pieces(pieces, 'most-popular'))[:2] == ['golden-hour', 'festival-spirit']
    assert ids(sort_pieces(pieces, 'most-viewed'))[:2] == ['golden-hour', 'festival-spirit']
    assert sort_pieces(pieces, 'newest') == pieces


def test_sort_is_stable_for_ties(pieces):
    tied = [p.model_copy(update={'price': 100}) for p in pieces]
    assert ids(sort_pieces(tied, 'price-high')) == ids(pieces)


def test_sort_does_not_mutate_input(pieces):
    before = ids(pieces)
    sort_pieces(pieces, 'price-low')
    assert ids(pieces) == before


def test_stats(pieces):
    stats = get_filter_stats(pieces)
    assert stats.total_pieces == 8
    assert stats.available_pieces == 7
    assert stats.highest_price == 520
    assert stats.lowest_price == 350
    assert stats.average_price == 420
    assert stats.total_hearts == 644


def test_stats_on_empty_snapshot():
    stats = get_filter_stats([])
    assert stats.total_pieces == 0
    assert stats.average_price == 0
    assert stats.highest_price == 0
    assert stats.lowest_price == 0
    assert get_price_range([]) == (0, 0)


def test_unique_values(pieces):
    assert get_unique_values(pieces, 'category') == ['t-shirts', 'kh-specials', 'limited', 'denims', 'kh-tailored', 'khlassic-suits']
