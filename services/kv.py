import logging
import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from google.cloud import firestore
from google.cloud.firestore import ArrayRemove, AsyncClient

logger = logging.getLogger('uvicorn.error')


class KeyValueStore(ABC):
    """
    Minimal key-value interface the comment store is written against.
    Scalar/record keys go through get/set/delete, ordered id lists through
    the list_* methods. Each call is atomic for its own key only.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def list_prepend(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def list_items(self, key: str) -> List[str]:
        ...

    @abstractmethod
    async def list_remove(self, key: str, value: str) -> None:
        """Removes every occurrence of value from the list at key."""
        ...


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._lists: Dict[str, List[str]] = {}

    async def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._values.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)
        self._lists.pop(key, None)

    async def list_prepend(self, key: str, value: str) -> None:
        self._lists.setdefault(key, []).insert(0, value)

    async def list_items(self, key: str) -> List[str]:
        return list(self._lists.get(key, []))

    async def list_remove(self, key: str, value: str) -> None:
        if key in self._lists:
            self._lists[key] = [item for item in self._lists[key] if item != value]


@firestore.async_transactional
async def _prepend_in_transaction(transaction, doc_ref, value: str):
    snapshot = await doc_ref.get(transaction=transaction)
    items = (snapshot.to_dict() or {}).get("items", []) if snapshot.exists else []
    transaction.set(doc_ref, {"items": [value] + items})


class FirestoreKeyValueStore(KeyValueStore):
    """
    One Firestore document per key. Records live in the document's "value"
    field, lists in its "items" array field.
    """

    def __init__(self, db: AsyncClient, collection: str = "kv"):
        self.db = db
        self.collection = collection

    def _ref(self, key: str):
        # Document ids cannot contain "/", post ids often do
        return self.db.collection(self.collection).document(quote(key, safe=""))

    async def get(self, key: str) -> Optional[Any]:
        doc = await self._ref(key).get()
        if not doc.exists:
            return None
        return doc.to_dict().get("value")

    async def set(self, key: str, value: Any) -> None:
        await self._ref(key).set({"value": value})

    async def delete(self, key: str) -> None:
        await self._ref(key).delete()

    async def list_prepend(self, key: str, value: str) -> None:
        await _prepend_in_transaction(self.db.transaction(), self._ref(key), value)

    async def list_items(self, key: str) -> List[str]:
        doc = await self._ref(key).get()
        if not doc.exists:
            return []
        return list(doc.to_dict().get("items", []))

    async def list_remove(self, key: str, value: str) -> None:
        await self._ref(key).set({"items": ArrayRemove([value])}, merge=True)


def create_kv_store(backend: str, collection: str = "kv") -> KeyValueStore:
    if backend == "memory":
        logger.warning("Using in-memory key-value store; comments will not survive a restart.")
        return MemoryKeyValueStore()
    if backend == "firestore":
        return FirestoreKeyValueStore(firestore.AsyncClient(), collection)
    raise ValueError(f"Unknown key-value backend: {backend!r}")
