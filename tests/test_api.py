import json

import pytest
from fastapi.testclient import TestClient

from main import app
from services import Storefront


@pytest.fixture
def storefront():
    return Storefront()


@pytest.fixture
def client(storefront):
    app.state.storefront = storefront
    with TestClient(app) as c:
        yield c
    del app.state.storefront


def login(client, email, password):
    res = client.post('/api/login', json={'email': email, 'password': password})
    assert res.status_code == 200, res.text
    return {'Authorization': f"Bearer {res.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, 'admin@kobysthreads.com', 'SecureAdmin2025!')


def test_startup_seeds(client):
    res = client.get('/test')
    assert res.json()['pieces'] == 8
    assert res.json()['users'] == 3


def test_signup_and_me(client):
    res = client.post('/api/signup', json={'name': 'Ama', 'email': 'ama@example.com', 'password': 'secret1'})
    assert res.status_code == 200
    body = res.json()
    assert 'passwordHash' not in body['user']
    me = client.get('/api/me', headers={'Authorization': f"Bearer {body['token']}"})
    assert me.json()['email'] == 'ama@example.com'


def test_signup_duplicate(client):
    res = client.post('/api/signup', json={'name': 'J', 'email': 'john@example.com', 'password': 'secret1'})
    assert res.status_code == 400
    assert 'already exists' in res.json()['detail']


def test_login_failure(client):
    res = client.post('/api/login', json={'email': 'john@example.com', 'password': 'nope'})
    assert res.status_code == 401
    assert res.json()['detail'] == 'Invalid credentials'


def test_protected_routes_need_token(client):
    assert client.get('/api/me').status_code == 401
    assert client.get('/api/me', headers={'Authorization': 'Bearer bogus'}).status_code == 401


def test_admin_routes_need_admin(client):
    headers = login(client, 'john@example.com', 'SecureUser2025!')
    assert client.get('/api/admin/users', headers=headers).status_code == 403


def test_product_listing_filters_and_sorts(client):
    res = client.get('/api/products', params={'category': 'khlassic-suits', 'sort': 'price-low'})
    assert [p['id'] for p in res.json()] == ['night-market', 'golden-hour']
    res = client.get('/api/products', params={'q': 'kente'})
    assert [p['id'] for p in res.json()] == ['sunset-warrior']


def test_product_view_counts(client, storefront):
    before = storefront.catalog.get_by_id('golden-hour').views
    assert client.get('/api/products/golden-hour').json()['views'] == before + 1
    assert storefront.cart.recently_viewed == ['golden-hour']
    assert client.get('/api/products/missing').status_code == 404


def test_heart_toggles_counter(client):
    assert client.post('/api/products/golden-hour/heart').json() == {'hearted': True, 'hearts': 144}
    assert client.post('/api/products/golden-hour/heart').json() == {'hearted': False, 'hearts': 143}


def test_cart_flow_and_checkout(client, storefront):
    client.post('/api/cart', json={'piece_id': 'sunset-warrior', 'size': 'M'})
    client.post('/api/cart', json={'piece_id': 'sunset-warrior', 'size': 'M'})
    res = client.post('/api/cart', json={'piece_id': 'night-market', 'size': 'L'})
    assert res.json()['total'] == 1260
    res = client.put('/api/cart', json={'piece_id': 'night-market', 'size': 'L', 'quantity': 0})
    assert res.json()['total'] == 900
    assert len(res.json()['items']) == 1

    headers = login(client, 'john@example.com', 'SecureUser2025!')
    res = client.post('/api/checkout', headers=headers)
    assert res.status_code == 200
    assert res.json()['total'] == 900
    assert client.get('/api/cart').json()['items'] == []
    orders = client.get('/api/me/orders', headers=headers).json()
    assert orders[-1]['items'] == [{'name': 'Sunset Warrior', 'price': 450.0, 'quantity': 2}]
    assert client.post('/api/checkout', headers=headers).status_code == 400


def test_add_unknown_piece_to_cart(client):
    assert client.post('/api/cart', json={'piece_id': 'ghost', 'size': 'M'}).status_code == 404


def test_admin_product_crud(client, admin_headers):
    res = client.post('/api/admin/products', json={'name': 'Blue Hour', 'price': 300, 'vibe': 'Calm'}, headers=admin_headers)
    piece = res.json()
    assert piece['hearts'] == 0
    res = client.patch(f"/api/admin/products/{piece['id']}", json={'price': 310}, headers=admin_headers)
    assert res.json()['price'] == 310
    assert res.json()['vibe'] == 'Calm'
    copy = client.post(f"/api/admin/products/{piece['id']}/duplicate", headers=admin_headers).json()
    assert copy['name'] == 'Blue Hour (Copy)'
    assert client.post(f"/api/admin/products/{piece['id']}/toggle", headers=admin_headers).json() == {'available': False}
    assert client.delete(f"/api/admin/products/{piece['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/admin/products/{piece['id']}", headers=admin_headers).status_code == 404


def test_patch_with_null_required_field_is_rejected(client, admin_headers):
    res = client.patch('/api/admin/products/golden-hour', json={'price': None}, headers=admin_headers)
    assert res.status_code == 400
    assert client.get('/api/products/golden-hour').json()['price'] == 520
    assert client.patch('/api/admin/products/missing', json={'price': 1}, headers=admin_headers).status_code == 404


def test_last_admin_protected_over_http(client, admin_headers):
    assert client.post('/api/admin/users/user_admin_001/demote', headers=admin_headers).status_code == 409
    assert client.delete('/api/admin/users/user_admin_001', headers=admin_headers).status_code == 409
    assert client.post('/api/admin/users/missing/demote', headers=admin_headers).status_code == 404
    assert client.post('/api/admin/users/user_john_002/promote', headers=admin_headers).status_code == 200
    assert client.post('/api/admin/users/user_john_002/demote', headers=admin_headers).status_code == 200


def test_admin_reset_password(client, admin_headers):
    res = client.post('/api/admin/users/user_sarah_003/reset-password', json={'new_password': 'abc'}, headers=admin_headers)
    assert res.status_code == 400
    res = client.post('/api/admin/users/user_sarah_003/reset-password', json={'new_password': 'brand-new'}, headers=admin_headers)
    assert res.status_code == 200
    login(client, 'sarah@example.com', 'brand-new')


def test_export_and_import(client, admin_headers):
    exported = client.get('/api/admin/users/export', headers=admin_headers).json()['data']
    assert 'passwordHash' not in exported
    payload = json.dumps([{'email': 'new@example.com', 'name': 'New'}, {'email': 'john@example.com', 'name': 'John'}])
    res = client.post('/api/admin/users/import', json={'data': payload}, headers=admin_headers)
    assert res.json()['imported'] == 1
    assert res.json()['skipped'] == 1
    res = client.post('/api/admin/users/import', json={'data': 'not json'}, headers=admin_headers)
    assert res.status_code == 400


def test_logout_invalidates_token(client, admin_headers):
    client.post('/api/logout', headers=admin_headers)
    assert client.get('/api/me', headers=admin_headers).status_code == 401
