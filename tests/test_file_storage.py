"""Tests del document store sobre archivos JSON."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import pytest

from swotlink.database import COLLECTIONS, DocumentStore, satisfies, where
from swotlink.database.file_storage import next_id
from swotlink.database.seeds import FUNDING_STAGES, INDUSTRIES
from swotlink.exceptions import UnknownCollectionError


# =============================================================================
# initialize
# =============================================================================


@pytest.mark.asyncio
async def test_initialize_creates_every_collection_file(store, data_dir):
    for collection in COLLECTIONS:
        assert (data_dir / f"{collection}.json").exists()

    assert await store.read_all("users") == []
    assert await store.read_all("industries") == INDUSTRIES
    assert await store.read_all("funding_stages") == FUNDING_STAGES
    assert len(await store.read_all("badges")) == 5
    assert len(await store.read_all("forum_categories")) == 5


@pytest.mark.asyncio
async def test_initialize_is_idempotent_and_never_reseeds(store):
    await store.delete("industries", where(industry_id=1))
    await store.initialize()

    industries = await store.read_all("industries")
    assert len(industries) == len(INDUSTRIES) - 1
    assert all(i["industry_id"] != 1 for i in industries)


@pytest.mark.asyncio
async def test_files_are_pretty_printed_utf8(store, data_dir):
    await store.insert("users", {"first_name": "José"})

    text = (data_dir / "users.json").read_text(encoding="utf-8")
    assert "José" in text
    assert text.startswith("[\n  {")


@pytest.mark.asyncio
async def test_initialize_propagates_when_directory_cannot_be_created(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    store = DocumentStore(data_dir=blocker / "data")

    with pytest.raises(OSError):
        await store.initialize()


# =============================================================================
# read_all / write_all
# =============================================================================


@pytest.mark.asyncio
async def test_read_all_returns_empty_on_corrupt_file(store, data_dir):
    (data_dir / "users.json").write_text("{not json", encoding="utf-8")

    assert await store.read_all("users") == []
    assert await store.find_many("users") == []


@pytest.mark.asyncio
async def test_read_all_returns_empty_when_top_level_is_not_a_list(store, data_dir):
    (data_dir / "users.json").write_text('{"user_id": 1}', encoding="utf-8")

    assert await store.read_all("users") == []


@pytest.mark.asyncio
async def test_read_all_returns_empty_when_file_is_missing(store, data_dir):
    (data_dir / "messages.json").unlink()

    assert await store.read_all("messages") == []


@pytest.mark.asyncio
async def test_write_all_reports_failure_without_raising(store, data_dir):
    (data_dir / "users.json").unlink()
    (data_dir / "users.json").mkdir()

    assert await store.write_all("users", [{"user_id": 1}]) is False


@pytest.mark.asyncio
async def test_write_all_rejects_unserializable_records(store):
    assert await store.write_all("users", [{"user_id": 1, "blob": object()}]) is False
    assert await store.read_all("users") == []


@pytest.mark.asyncio
async def test_unknown_collection_raises(store):
    with pytest.raises(UnknownCollectionError):
        await store.read_all("startupProfiles")

    with pytest.raises(KeyError):
        await store.insert("nope", {})


# =============================================================================
# insert / find
# =============================================================================


@pytest.mark.asyncio
async def test_insert_then_find_one_round_trip(store):
    fields = {"email": "ana@test.io", "role": "Startup", "is_active": True}

    record = await store.insert("users", fields)
    found = await store.find_one("users", where(user_id=record["user_id"]))

    assert found == record
    assert found["user_id"] == 1
    assert {k: found[k] for k in fields} == fields
    assert set(found) == set(fields) | {"user_id", "created_at"}


@pytest.mark.asyncio
async def test_insert_assigns_max_plus_one(store):
    first = await store.insert("users", {"email": "a"})
    second = await store.insert("users", {"email": "b"})
    assert (first["user_id"], second["user_id"]) == (1, 2)

    # Borrar el máximo libera su ID
    await store.delete("users", where(user_id=2))
    third = await store.insert("users", {"email": "c"})
    assert third["user_id"] == 2


@pytest.mark.asyncio
async def test_insert_ignores_caller_supplied_id(store):
    await store.insert("users", {"email": "a"})

    record = await store.insert("users", {"user_id": 1, "email": "b"})

    assert record["user_id"] == 2
    assert [u["user_id"] for u in await store.read_all("users")] == [1, 2]


@pytest.mark.asyncio
async def test_insert_with_explicit_id_field(store):
    record = await store.insert("messages", {"body": "hola"}, id_field="message_id")

    assert record["message_id"] == 1
    assert "id" not in record


@pytest.mark.asyncio
async def test_insert_returns_none_when_write_fails(store, data_dir):
    (data_dir / "users.json").unlink()
    (data_dir / "users.json").mkdir()

    assert await store.insert("users", {"email": "a"}) is None


def test_next_id_on_empty_collection():
    assert next_id([], "id") == 1
    assert next_id([{"id": 7}, {"other": 1}], "id") == 8


@pytest.mark.asyncio
async def test_find_supports_both_predicate_styles(store):
    await store.insert("users", {"email": "a", "role": "Startup", "is_active": True})
    await store.insert("users", {"email": "b", "role": "Investor", "is_active": True})
    await store.insert("users", {"email": "c", "role": "Startup", "is_active": False})

    by_fields = await store.find_many("users", where(role="Startup", is_active=True))
    by_function = await store.find_many(
        "users", satisfies(lambda u: u["email"] in ("b", "c"))
    )

    assert [u["email"] for u in by_fields] == ["a"]
    assert [u["email"] for u in by_function] == ["b", "c"]
    assert (await store.find_one("users", where(role="Investor")))["email"] == "b"
    assert await store.find_one("users", where(role="Admin")) is None


@pytest.mark.asyncio
async def test_find_many_without_predicate_returns_all(store):
    for email in ("a", "b", "c"):
        await store.insert("users", {"email": email})

    assert len(await store.find_many("users")) == 3
    assert await store.count("users") == 3
    assert await store.count("users", where(email="b")) == 1


@pytest.mark.asyncio
async def test_query_receives_whole_collection(store):
    for goal in (300, 100, 200):
        await store.insert("startup_profiles", {"funding_goal": goal})

    goals = await store.query(
        "startup_profiles", lambda rows: sorted(r["funding_goal"] for r in rows)
    )
    assert goals == [100, 200, 300]


# =============================================================================
# update / delete
# =============================================================================


@pytest.mark.asyncio
async def test_update_is_a_partial_merge(store):
    record = await store.insert("user_stats", {"a": 1, "b": 2})

    updated = await store.update("user_stats", where(id=record["id"]), {"b": 3})
    stored = await store.find_one("user_stats", where(id=record["id"]))

    assert updated is True
    assert stored["a"] == 1
    assert stored["b"] == 3
    assert stored["created_at"] == record["created_at"]
    assert "updated_at" in stored


@pytest.mark.asyncio
async def test_update_without_matches_does_not_write(store, data_dir):
    await store.insert("user_stats", {"a": 1})
    before = (data_dir / "user_stats.json").read_text(encoding="utf-8")

    assert await store.update("user_stats", where(id=99), {"a": 2}) is False
    assert (data_dir / "user_stats.json").read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_update_touches_every_matching_record(store):
    for _ in range(3):
        await store.insert("notifications", {"user_id": 5, "is_read": False})
    await store.insert("notifications", {"user_id": 6, "is_read": False})

    await store.update("notifications", where(user_id=5), {"is_read": True})

    assert await store.count("notifications", where(is_read=True)) == 3


@pytest.mark.asyncio
async def test_delete_returns_exact_count(store):
    for user_id in (1, 1, 2):
        await store.insert("saved_matches", {"user_id": user_id, "target_user_id": 9})

    assert await store.delete("saved_matches", where(user_id=1)) == 2
    assert [r["user_id"] for r in await store.read_all("saved_matches")] == [2]


@pytest.mark.asyncio
async def test_delete_requires_all_fields_to_match(store):
    await store.insert("saved_matches", {"user_id": 1, "target_user_id": 9})
    await store.insert("saved_matches", {"user_id": 1, "target_user_id": 8})

    assert await store.delete("saved_matches", where(user_id=1, target_user_id=8)) == 1
    assert await store.count("saved_matches") == 1


@pytest.mark.asyncio
async def test_delete_without_matches_leaves_collection_unchanged(store, data_dir):
    await store.insert("saved_matches", {"user_id": 1})
    before = (data_dir / "saved_matches.json").read_text(encoding="utf-8")

    assert await store.delete("saved_matches", where(user_id=42)) == 0
    assert (data_dir / "saved_matches.json").read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_upsert_inserts_then_merges(store):
    created = await store.upsert(
        "messages", where(thread="t1"), {"thread": "t1", "body": "hola"}
    )
    merged = await store.upsert(
        "messages",
        where(thread="t1"),
        {"thread": "t1", "body": "nuevo"},
        patch={"read": True},
    )

    assert created["id"] == merged["id"] == 1
    assert merged["body"] == "hola"
    assert merged["read"] is True
    assert merged["created_at"] == created["created_at"]
    assert "updated_at" in merged
    assert await store.count("messages") == 1


@pytest.mark.asyncio
async def test_upsert_returns_none_when_write_fails(store, data_dir):
    (data_dir / "messages.json").unlink()
    (data_dir / "messages.json").mkdir()

    assert await store.upsert("messages", where(thread="t1"), {"thread": "t1"}) is None


# =============================================================================
# Concurrencia
# =============================================================================


@pytest.mark.asyncio
async def test_concurrent_inserts_do_not_lose_updates(store):
    await asyncio.gather(
        *(store.insert("messages", {"body": f"m{i}"}) for i in range(20))
    )

    messages = await store.read_all("messages")
    assert len(messages) == 20
    assert sorted(m["id"] for m in messages) == list(range(1, 21))


@pytest.mark.asyncio
async def test_file_on_disk_matches_last_write(store, data_dir):
    await store.write_all("users", [{"user_id": 3, "email": "z"}])

    raw = json.loads((data_dir / "users.json").read_text(encoding="utf-8"))
    assert raw == [{"user_id": 3, "email": "z"}]


@pytest.mark.asyncio
async def test_concurrent_upserts_keep_a_single_record(store):
    await asyncio.gather(
        *(
            store.upsert("messages", where(thread="t1"), {"thread": "t1", "body": f"m{i}"})
            for i in range(10)
        )
    )

    messages = await store.read_all("messages")
    assert len(messages) == 1
    assert messages[0]["id"] == 1


@pytest.mark.asyncio
async def test_timestamps_are_utc_aware(store):
    record = await store.insert("messages", {"body": "hola"})

    assert datetime.fromisoformat(record["created_at"]).tzinfo == timezone.utc
