import itertools
import json

import pytest

from cart import CART_KEY, CartStore
from conftest import make_piece


@pytest.fixture
def priced(catalog):
    one = make_piece(catalog, 'Piece One', 150)
    two = make_piece(catalog, 'Piece Two', 200)
    return one.id, two.id


def test_repeat_add_increments(cart):
    for _ in range(4):
        cart.add_to_cart('p', 'M')
    assert len(cart.cart_items) == 1
    assert cart.cart_items[0].quantity == 4


def test_sizes_are_separate_lines(cart):
    cart.add_to_cart('p', 'M')
    cart.add_to_cart('p', 'L')
    cart.add_to_cart('p', 'M')
    assert [(i.size, i.quantity) for i in cart.cart_items] == [('M', 2), ('L', 1)]


def test_update_keeps_insertion_order(cart):
    cart.add_to_cart('a', 'M')
    cart.add_to_cart('b', 'M')
    cart.update_quantity('a', 'M', 5)
    assert [(i.piece_id, i.quantity) for i in cart.cart_items] == [('a', 5), ('b', 1)]


def test_fractional_quantity_is_ignored(cart):
    cart.add_to_cart('a', 'M')
    cart.update_quantity('a', 'M', 2.5)
    assert cart.cart_items[0].quantity == 1
    assert isinstance(cart.cart_items[0].quantity, int)


@pytest.mark.parametrize('quantity', [0, -1, -10])
def test_non_positive_quantity_removes(cart, quantity):
    cart.add_to_cart('a', 'M')
    cart.add_to_cart('b', 'S')
    cart.update_quantity('a', 'M', quantity)
    assert [i.piece_id for i in cart.cart_items] == ['b']


def test_remove_missing_is_noop(cart):
    cart.add_to_cart('a', 'M')
    cart.remove_from_cart('a', 'L')
    assert len(cart.cart_items) == 1


def test_clear_cart(cart):
    cart.clear_cart()
    assert cart.cart_items == []
    cart.add_to_cart('a', 'M')
    cart.clear_cart()
    assert cart.cart_items == []


def test_total_scenario(cart, priced):
    one, two = priced
    cart.add_to_cart(one, 'M')
    cart.add_to_cart(one, 'M')
    cart.add_to_cart(two, 'L')
    assert cart.get_cart_total() == 500
    cart.update_quantity(two, 'L', 0)
    assert cart.get_cart_total() == 300
    assert len(cart.cart_items) == 1


def test_total_independent_of_order(storage, catalog, priced):
    one, two = priced
    adds = [(one, 'M'), (one, 'M'), (two, 'L'), (one, 'S')]
    totals = set()
    for order in itertools.permutations(adds):
        cart = CartStore(storage, catalog)
        cart.clear_cart()
        for piece_id, size in order:
            cart.add_to_cart(piece_id, size)
        totals.add(cart.get_cart_total())
    assert totals == {650}


def test_unknown_piece_prices_at_zero_but_stays(cart, catalog, priced):
    one, _ = priced
    cart.add_to_cart(one, 'M')
    cart.add_to_cart('ghost', 'M')
    assert cart.get_cart_total() == 150
    catalog.delete_product(one)
    assert cart.get_cart_total() == 0
    assert len(cart.cart_items) == 2


def test_cart_persists(storage, catalog, cart):
    cart.add_to_cart('a', 'M')
    cart.heart_piece('a')
    cart.toggle_favorite('a')
    reloaded = CartStore(storage, catalog)
    assert reloaded.cart_items[0].piece_id == 'a'
    assert reloaded.hearted_pieces == {'a'}
    assert reloaded.is_favorite('a')


def test_invalid_items_in_blob_start_empty(storage, catalog):
    storage.set(CART_KEY, json.dumps({'state': {'cartItems': [{'pieceId': 'a', 'size': 'M', 'quantity': 0}], 'favorites': ['a']}, 'version': 0}))
    cart = CartStore(storage, catalog)
    assert cart.cart_items == []
    assert cart.favorites == []


def test_heart_toggle_returns_delta(cart):
    assert cart.heart_piece('a') == 1
    assert cart.heart_piece('a') == -1
    assert cart.hearted_pieces == set()


def test_favorites_toggle(cart):
    assert cart.toggle_favorite('a')
    assert not cart.toggle_favorite('a')
    assert not cart.is_favorite('a')


def test_search_history(cart):
    for q in ['denim', 'Kente', '  ', 'DENIM']:
        cart.add_to_search_history(q)
    assert cart.search_history == ['DENIM', 'Kente']
    for i in range(12):
        cart.add_to_search_history(f'q{i}')
    assert len(cart.search_history) == 10
    cart.clear_search_history()
    assert cart.search_history == []


def test_recently_viewed(cart):
    for piece_id in ['a', 'b', 'a']:
        cart.view_piece(piece_id)
    assert cart.recently_viewed == ['a', 'b']


def test_try_on_reservations(cart):
    assert cart.add_try_on_reservation('a', 'fest-1')
    assert not cart.add_try_on_reservation('a', 'fest-1')
    cart.add_try_on_reservation('b', 'fest-2')
    assert len(cart.get_try_on_reservations('fest-1')) == 1
    cart.clear_try_on_reservations('fest-1')
    assert [r.piece_id for r in cart.get_try_on_reservations()] == ['b']
    cart.remove_try_on_reservation('b', 'fest-2')
    assert cart.get_try_on_reservations() == []


def test_recommendations_skip_viewed_and_unavailable(cart, catalog):
    catalog.initialize_from_seed()
    cart.update_user_story(vibe='street')
    cart.view_piece('golden-hour')
    picks = [p.id for p in cart.get_recommendations()]
    assert 'golden-hour' not in picks
    assert 'gentle-rebel' not in picks  # unavailable
    assert len(picks) == 6
    assert picks[0] == 'festival-spirit'
    assert picks[1] == 'night-market'


def test_user_story_merges(cart):
    cart.update_user_story(name='Ama')
    cart.update_user_story(vibe='bold')
    assert cart.user_story.name == 'Ama'
    assert cart.user_story.vibe == 'bold'
