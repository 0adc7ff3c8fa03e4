import threading

import pytest

from orgportal.core.revocation import (
    DatabaseRevocationStore,
    InMemoryRevocationStore,
    create_revocation_store,
)


@pytest.fixture(params=["memory", "database"])
def store(request, session_factory):
    if request.param == "memory":
        return InMemoryRevocationStore()
    return DatabaseRevocationStore(session_factory)


def test_unknown_key_starts_at_zero(store):
    assert store.current_generation("org_user:nobody") == 0
    assert store.is_current("org_user:nobody", 0)


def test_revoke_bumps_generation(store):
    assert store.revoke("admin:a1") == 1
    assert store.revoke("admin:a1") == 2

    assert store.current_generation("admin:a1") == 2
    assert not store.is_current("admin:a1", 1)
    assert store.current_generation("admin:a2") == 0


def test_concurrent_revokes_are_not_lost():
    store = InMemoryRevocationStore()

    def worker():
        for _ in range(50):
            store.revoke("org_user:u1")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.current_generation("org_user:u1") == 400


def test_factory_selects_backend(session_factory):
    assert isinstance(create_revocation_store("memory"), InMemoryRevocationStore)
    assert isinstance(create_revocation_store("database", session_factory), DatabaseRevocationStore)
