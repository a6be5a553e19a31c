"""
Conversion store: append-only, newest-first list of ConversionRecords.

The store never touches a global key itself; it is handed a storage handle
(anything with load() / save(payload)) so the JSON blob can live on local
disk, in R2, or in memory for tests. DatabaseConversionStore offers the same
append / list_all contract on a SQL table.

Storage failures never reach the caller: reads degrade to an empty list and
failed writes are logged and reported as False. An append whose read fails
is aborted rather than overwriting the existing blob.
"""
import threading
from functools import lru_cache
from typing import Any, List, Optional, Protocol

from core.config import CONVERSIONS_KEY, CONVERSIONS_STORAGE, logger
from utils.records import ConversionRecord
from utils.storage import load_json_key, write_json_key


class BlobStorage(Protocol):
    def load(self) -> Optional[Any]: ...

    def save(self, payload: Any) -> None: ...


class JsonKeyStorage:
    """Single JSON blob under `key` (local static dir, or R2 when configured)."""

    def __init__(self, key: str = CONVERSIONS_KEY):
        self.key = key

    def load(self) -> Optional[Any]:
        return load_json_key(self.key)

    def save(self, payload: Any) -> None:
        write_json_key(self.key, payload)


class MemoryStorage:
    def __init__(self, payload: Optional[Any] = None):
        self.payload = payload

    def load(self) -> Optional[Any]:
        return self.payload

    def save(self, payload: Any) -> None:
        self.payload = payload


class ConversionStore:
    def __init__(self, storage: BlobStorage):
        self.storage = storage
        self._lock = threading.Lock()

    def _load_raw(self) -> List[dict]:
        try:
            payload = self.storage.load()
        except Exception as ex:
            logger.warning(f"[store.read] failed: {ex}")
            return []
        if not payload:
            return []
        if not isinstance(payload, list):
            logger.warning(f"[store.read] unexpected payload type={type(payload).__name__}; treating as empty")
            return []
        return payload

    def list_all(self) -> List[ConversionRecord]:
        """All records, newest first. Entries that no longer parse are skipped."""
        records: List[ConversionRecord] = []
        for item in self._load_raw():
            try:
                records.append(ConversionRecord.from_dict(item))
            except (ValueError, TypeError, AttributeError) as ex:
                logger.warning(f"[store.read] skipping malformed entry: {ex}")
        return records

    def _load_for_append(self) -> List[dict]:
        """Raw entries to rewrite. Raises when the current blob can't be read as a list."""
        payload = self.storage.load()
        if payload is None or payload == []:
            return []
        if not isinstance(payload, list):
            raise ValueError(f"unexpected payload type={type(payload).__name__}")
        return list(payload)

    def append(self, record: ConversionRecord) -> bool:
        with self._lock:
            try:
                entries = self._load_for_append()
            except Exception as ex:
                # Never rewrite a blob that could not be read; that would drop its history
                logger.warning(f"[store.append] read failed, aborted id={record.id}: {ex}")
                return False
            try:
                # Keep raw entries so a malformed one is preserved, not dropped on rewrite
                entries.insert(0, record.to_dict())
                self.storage.save(entries)
                return True
            except Exception as ex:
                logger.warning(f"[store.append] failed id={record.id}: {ex}")
                return False


class DatabaseConversionStore:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def list_all(self) -> List[ConversionRecord]:
        from models.conversions import ConversionRow

        db = self.session_factory()
        try:
            rows = db.query(ConversionRow).order_by(ConversionRow.seq.desc()).all()
            records: List[ConversionRecord] = []
            for r in rows:
                try:
                    records.append(ConversionRecord.from_dict({
                        "id": r.id,
                        "network": r.network,
                        "type": r.kind,
                        "subId": r.sub_id,
                        "transactionId": r.transaction_id,
                        "payout": r.payout,
                        "ipAddress": r.ip_address,
                        "timestamp": r.timestamp,
                        "rawParams": r.raw_params or {},
                    }))
                except (ValueError, TypeError) as ex:
                    logger.warning(f"[store.read] skipping malformed row id={r.id}: {ex}")
            return records
        except Exception as ex:
            logger.warning(f"[store.read] database read failed: {ex}")
            return []
        finally:
            db.close()

    def append(self, record: ConversionRecord) -> bool:
        from models.conversions import ConversionRow

        db = self.session_factory()
        try:
            db.add(ConversionRow(
                id=record.id,
                network=record.network.value,
                kind=record.kind.value,
                sub_id=record.sub_id,
                transaction_id=record.transaction_id,
                payout=record.payout,
                ip_address=record.ip_address,
                timestamp=record.timestamp,
                raw_params=dict(record.raw_params),
            ))
            db.commit()
            return True
        except Exception as ex:
            db.rollback()
            logger.warning(f"[store.append] database write failed id={record.id}: {ex}")
            return False
        finally:
            db.close()


def build_conversion_store(kind: str = CONVERSIONS_STORAGE):
    kind = (kind or "blob").strip().lower()
    if kind == "database":
        from core.database import get_session_factory
        return DatabaseConversionStore(get_session_factory())
    if kind == "memory":
        return ConversionStore(MemoryStorage())
    if kind != "blob":
        logger.warning(f"[store] unknown CONVERSIONS_STORAGE={kind!r}; using blob")
    return ConversionStore(JsonKeyStorage(CONVERSIONS_KEY))


@lru_cache(maxsize=1)
def get_conversion_store():
    """FastAPI dependency: one store per process."""
    store = build_conversion_store()
    logger.info(f"[store] using {type(store).__name__} ({CONVERSIONS_STORAGE})")
    return store
