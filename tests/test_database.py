import json

from database import MemoryStore, create_store, load_blob, save_blob
from services import Storefront


def test_memory_store_contract():
    store = MemoryStore()
    assert store.get('k') is None
    store.set('k', 'v')
    assert store.get('k') == 'v'
    store.remove('k')
    store.remove('k')
    assert store.get('k') is None
    store.set('a', '1')
    store.clear()
    assert store.get('a') is None


def test_blob_envelope():
    store = MemoryStore()
    save_blob(store, 'blob', {'x': 1}, version=2)
    assert json.loads(store.get('blob')) == {'state': {'x': 1}, 'version': 2}
    assert load_blob(store, 'blob', version=2) == {'x': 1}
    assert load_blob(store, 'blob', version=1) is None


def test_malformed_blobs_are_ignored():
    store = MemoryStore()
    store.set('a', 'not json')
    store.set('b', json.dumps([1, 2]))
    assert load_blob(store, 'a') is None
    assert load_blob(store, 'b') is None
    assert load_blob(store, 'missing') is None


def test_create_store_without_database(monkeypatch):
    monkeypatch.delenv('DATABASE_URL', raising=False)
    monkeypatch.delenv('DATABASE_NAME', raising=False)
    assert isinstance(create_store(), MemoryStore)


def test_storefront_state_survives_restart():
    durable = MemoryStore()
    first = Storefront(storage=durable).start()
    first.cart.add_to_cart('golden-hour', 'M')
    first.users.authenticate('john@example.com', 'SecureUser2025!')
    first.close()

    second = Storefront(storage=durable).start()
    assert second.cart.get_cart_total() == 520
    assert second.users.get_user_by_email('john@example.com') is not None
    # sessions are process-scoped
    assert not second.sessions.has_active_session()


def test_session_hours_from_env(monkeypatch):
    monkeypatch.setenv('SESSION_HOURS', '2')
    monkeypatch.delenv('DATABASE_URL', raising=False)
    storefront = Storefront.from_env()
    assert storefront.sessions.duration.total_seconds() == 7200
