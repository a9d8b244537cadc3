# ==================================================
# kvset_store/store.py
# ==================================================
import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from .            import config
from .codec       import OK, decode_snapshot, encode
from .compression import compress as zstd_compress
from .sorted_set  import ValueSet, check_value

logger = logging.getLogger(__name__)


def _as_key(key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"key must be bytes or str, not {type(key).__name__}")


class KVSetStore:
    """Key -> ascending int32 set, loaded from one snapshot file and saved back on close."""
    def __init__(self, path: str | os.PathLike,
                 compress: Optional[bool] = None):
        self.path      = Path(path)
        self.compress  = config.COMPRESS if compress is None else compress
        self._entries: dict[bytes, ValueSet] = {}
        self._reserved = 0
        self._closed   = False

        if self.path.exists():
            self._open_existing()
        else:
            self._create_new()

    # ------------------------------------------------------------------
    def _create_new(self):
        # nothing touches the disk until close()
        self.load_status = decode_snapshot(None).status

    def _open_existing(self):
        result = decode_snapshot(self.path.read_bytes())
        self._entries    = result.entries
        self.load_status = result.status
        if result.status == OK:
            self._reserved = result.header.reserved
        logger.debug("loaded %s: %d keys, %d records (%s)",
                     self.path, len(self._entries), result.records, result.status)

    def _check_open(self):
        if self._closed:
            raise ValueError("operation on finalized store")

    # ------------------------------------------------------------------
    def insert(self, key, value) -> bool:
        """Add `value` under `key`; False if it was already there."""
        self._check_open()
        key   = _as_key(key)
        value = check_value(value)
        values = self._entries.get(key)
        if values is None:
            self._entries[key] = ValueSet((value,))
            return True
        return values.add(value)

    def delete(self, key, value) -> bool:
        """Remove `value` from `key`, dropping the key once its set is empty."""
        self._check_open()
        key    = _as_key(key)
        value  = check_value(value)
        values = self._entries.get(key)
        if values is None or not values.discard(value):
            return False
        if not values:
            del self._entries[key]
        return True

    def find(self, key) -> Optional[tuple[int, ...]]:
        """Ascending values for `key`, or None when the key is absent."""
        self._check_open()
        values = self._entries.get(_as_key(key))
        if values is None:
            return None
        return values.as_tuple()

    # ------------------------------------------------------------------
    def __contains__(self, key) -> bool:
        self._check_open()
        return _as_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> Iterator[bytes]:
        self._check_open()
        return iter(list(self._entries))

    def items(self) -> Iterator[tuple[bytes, tuple[int, ...]]]:
        self._check_open()
        return iter([(key, values.as_tuple()) for key, values in self._entries.items()])

    @property
    def record_count(self) -> int:
        return sum(len(values) for values in self._entries.values())

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    def to_bytes(self) -> bytes:
        self._check_open()
        data = encode(self._entries, reserved=self._reserved)
        return zstd_compress(data) if self.compress else data

    def close(self, destination: str | os.PathLike | None = None):
        """Write the whole store to `destination` (default: the load path) and finalize."""
        if self._closed:
            return
        target = Path(destination) if destination is not None else self.path
        data = self.to_bytes()
        try:
            target.write_bytes(data)
        except OSError as exc:
            logger.error("failed to write snapshot %s: %s", target, exc)
            raise
        logger.debug("wrote %d bytes (%d records) to %s", len(data), self.record_count, target)
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


# ------------------------------------------------------------------
def initialize(source: str | os.PathLike, **kwargs) -> KVSetStore:
    return KVSetStore(source, **kwargs)

def finalize(store: KVSetStore, destination: str | os.PathLike | None = None):
    store.close(destination)
