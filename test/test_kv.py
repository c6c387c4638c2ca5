"""
Tests for the key-value backends and password hashing helpers.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.cloud.firestore import ArrayRemove

import CommentAuth as auth
from services.kv import (
    FirestoreKeyValueStore, MemoryKeyValueStore, _prepend_in_transaction, create_kv_store
)


class TestMemoryKeyValueStore:
    """Tests for the in-memory backend."""

    @pytest.mark.asyncio
    async def test_records(self):
        kv = MemoryKeyValueStore()
        await kv.set("comment:a", {"message": "hi"})

        assert await kv.get("comment:a") == {"message": "hi"}
        await kv.delete("comment:a")
        assert await kv.get("comment:a") is None

    @pytest.mark.asyncio
    async def test_stored_values_are_copies(self):
        kv = MemoryKeyValueStore()
        value = {"message": "hi"}
        await kv.set("k", value)
        value["message"] = "changed"

        assert (await kv.get("k"))["message"] == "hi"

    @pytest.mark.asyncio
    async def test_lists(self):
        kv = MemoryKeyValueStore()
        for item in ("a", "b", "a", "c"):
            await kv.list_prepend("comments:p", item)

        assert await kv.list_items("comments:p") == ["c", "a", "b", "a"]
        await kv.list_remove("comments:p", "a")
        assert await kv.list_items("comments:p") == ["c", "b"]

    @pytest.mark.asyncio
    async def test_missing_list_is_empty(self):
        kv = MemoryKeyValueStore()
        assert await kv.list_items("comments:none") == []
        await kv.list_remove("comments:none", "a")


def firestore_kv(exists=True, data=None):
    """FirestoreKeyValueStore over a mocked AsyncClient; returns (kv, doc_ref)."""
    db = MagicMock()
    snapshot = MagicMock()
    snapshot.exists = exists
    snapshot.to_dict.return_value = data if exists else None
    doc_ref = db.collection.return_value.document.return_value
    doc_ref.get = AsyncMock(return_value=snapshot)
    doc_ref.set = AsyncMock()
    doc_ref.delete = AsyncMock()
    return FirestoreKeyValueStore(db), doc_ref


class TestFirestoreKeyValueStore:
    """Tests for the Firestore backend against a mocked client."""

    @pytest.mark.asyncio
    async def test_get_unwraps_value(self):
        kv, _ = firestore_kv(data={"value": {"message": "hi"}})
        assert await kv.get("comment:a") == {"message": "hi"}

    @pytest.mark.asyncio
    async def test_get_missing(self):
        kv, _ = firestore_kv(exists=False)
        assert await kv.get("comment:a") is None

    @pytest.mark.asyncio
    async def test_set_wraps_value(self):
        kv, doc_ref = firestore_kv()
        await kv.set("password:a", "$2b$hash")
        doc_ref.set.assert_awaited_once_with({"value": "$2b$hash"})

    @pytest.mark.asyncio
    async def test_delete(self):
        kv, doc_ref = firestore_kv()
        await kv.delete("comment:a")
        doc_ref.delete.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_list_items(self):
        kv, _ = firestore_kv(data={"items": ["b", "a"]})
        assert await kv.list_items("comments:p") == ["b", "a"]

    @pytest.mark.asyncio
    async def test_list_items_missing(self):
        kv, _ = firestore_kv(exists=False)
        assert await kv.list_items("comments:p") == []

    @pytest.mark.asyncio
    async def test_list_remove_uses_array_remove(self):
        kv, doc_ref = firestore_kv()
        await kv.list_remove("comments:p", "a")
        doc_ref.set.assert_awaited_once_with({"items": ArrayRemove(["a"])}, merge=True)

    @pytest.mark.asyncio
    async def test_list_prepend_runs_in_transaction(self):
        kv, doc_ref = firestore_kv()
        with patch("services.kv._prepend_in_transaction", new_callable=AsyncMock) as prepend:
            await kv.list_prepend("comments:p", "new")
        prepend.assert_awaited_once_with(kv.db.transaction.return_value, doc_ref, "new")

    @pytest.mark.asyncio
    async def test_prepend_puts_new_id_first(self):
        _, doc_ref = firestore_kv(data={"items": ["old", "older"]})
        transaction = MagicMock()

        await _prepend_in_transaction.to_wrap(transaction, doc_ref, "new")

        doc_ref.get.assert_awaited_once_with(transaction=transaction)
        transaction.set.assert_called_once_with(doc_ref, {"items": ["new", "old", "older"]})

    @pytest.mark.asyncio
    async def test_prepend_to_missing_list(self):
        _, doc_ref = firestore_kv(exists=False)
        transaction = MagicMock()

        await _prepend_in_transaction.to_wrap(transaction, doc_ref, "first")

        transaction.set.assert_called_once_with(doc_ref, {"items": ["first"]})


class TestCreateKvStore:
    """Tests for backend selection."""

    def test_memory(self):
        assert isinstance(create_kv_store("memory"), MemoryKeyValueStore)

    def test_firestore_uses_async_client(self):
        with patch("services.kv.firestore.AsyncClient") as client_cls:
            kv = create_kv_store("firestore", "comments-kv")
        assert kv.db is client_cls.return_value
        assert kv.collection == "comments-kv"

    def test_firestore_document_ids_are_escaped(self):
        with patch("services.kv.firestore.AsyncClient") as client_cls:
            kv = create_kv_store("firestore")
        kv._ref("comments:2024/05/hello")

        db = client_cls.return_value
        db.collection.assert_called_with("kv")
        db.collection.return_value.document.assert_called_with("comments%3A2024%2F05%2Fhello")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_kv_store("redis")


class TestPasswordHashing:
    """Tests for bcrypt helpers."""

    def test_hash_and_verify(self):
        hashed = auth.get_password_hash("s3cret")
        assert isinstance(hashed, str)
        assert auth.verify_password("s3cret", hashed)
        assert not auth.verify_password("other", hashed)

    def test_long_passwords(self):
        password = "p" * 100
        hashed = auth.get_password_hash(password)
        assert auth.verify_password(password, hashed)
