"""SQL OTC Store — TTL key/value semantics over the signin_codes table."""

from proofpass.infrastructure.otc_store import SqlOTCStore


async def test_set_if_absent_refuses_live_key(otc_store):
    assert await otc_store.set_if_absent("k", "v1", 60)
    assert not await otc_store.set_if_absent("k", "v2", 60)
    assert await otc_store.get_and_delete("k") == "v1"


async def test_set_if_absent_replaces_expired_key(otc_store, clock):
    assert await otc_store.set_if_absent("k", "v1", 60)
    clock.advance(60)
    assert await otc_store.set_if_absent("k", "v2", 60)
    assert await otc_store.get_and_delete("k") == "v2"


async def test_get_and_delete_hands_out_once(otc_store):
    await otc_store.set_with_ttl("k", "v", 60)
    assert await otc_store.get_and_delete("k") == "v"
    assert await otc_store.get_and_delete("k") is None
    assert not await otc_store.exists("k")


async def test_set_with_ttl_overwrites(otc_store):
    await otc_store.set_with_ttl("k", "v1", 60)
    await otc_store.set_with_ttl("k", "v2", 60)
    assert await otc_store.get_and_delete("k") == "v2"


async def test_exists_honors_expiry(otc_store, clock):
    await otc_store.set_with_ttl("k", "v", 30)
    assert await otc_store.exists("k")
    clock.advance(31)
    assert not await otc_store.exists("k")
    assert await otc_store.get_and_delete("k") is None


async def test_stores_share_the_table(test_session_factory, clock):
    a = SqlOTCStore(test_session_factory, clock=clock)
    b = SqlOTCStore(test_session_factory, clock=clock)
    assert await a.set_if_absent("k", "v", 60)
    assert not await b.set_if_absent("k", "w", 60)
