# ==================================================
# kvset_store/codec.py
# ==================================================
"""
Snapshot codec.

A snapshot is a fixed 24-byte header followed by `count` records of
(u16 key length, key bytes, i32 value), all little-endian.  Decoding is
best effort: a missing, foreign or short file yields an empty mapping and
a file cut off mid-record yields every record read before the cut.  The
returned mapping always holds non-empty, ascending, duplicate-free sets.
"""
from __future__ import annotations

import logging
import struct
from typing import Iterable, Mapping, NamedTuple, Optional

from .const       import *
from .compression import CompressionError, decompress, is_compressed
from .sorted_set  import ValueSet

logger = logging.getLogger(__name__)

_HEADER  = struct.Struct(HEADER_FMT)
_KEY_LEN = struct.Struct(KEY_LEN_FMT)
_VALUE   = struct.Struct(VALUE_FMT)

# decode statuses
ABSENT       = "absent"
UNRECOGNIZED = "unrecognized"
TRUNCATED    = "truncated"
OK           = "ok"


class Header(NamedTuple):
    magic: int = MAGIC
    version: int = VERSION
    reserved: int = 0
    count: int = 0

    def pack(self) -> bytes:
        return _HEADER.pack(self.magic, self.version, self.reserved, self.count)


class DecodeResult(NamedTuple):
    entries: dict[bytes, ValueSet]
    header: Optional[Header]
    records: int        # records successfully read
    status: str


# ------------------------------------------------------------------
def read_header(data: bytes) -> Optional[Header]:
    """Parse the header, or None if `data` is too short to hold one."""
    if len(data) < HEADER_SIZE:
        return None
    return Header(*_HEADER.unpack_from(data, 0))


def decode_snapshot(data: Optional[bytes]) -> DecodeResult:
    if data is None:
        logger.debug("no snapshot, starting empty")
        return DecodeResult({}, None, 0, ABSENT)

    if is_compressed(data):
        try:
            data = decompress(data)
        except CompressionError as exc:
            logger.warning("snapshot looks zstd-compressed but can't be read (%s), starting empty", exc)
            return DecodeResult({}, None, 0, UNRECOGNIZED)

    header = read_header(data)
    if header is None:
        if data:
            logger.warning("snapshot of %d bytes is shorter than its header, starting empty", len(data))
        return DecodeResult({}, None, 0, UNRECOGNIZED)
    if header.magic != MAGIC or header.version != VERSION:
        logger.warning("unrecognized snapshot (magic=%#010x version=%d), starting empty",
                       header.magic, header.version)
        return DecodeResult({}, header, 0, UNRECOGNIZED)

    view    = memoryview(data)
    size    = len(view)
    offset  = HEADER_SIZE
    read    = 0
    pending: dict[bytes, list[int]] = {}
    while read < header.count:
        if offset + KEY_LEN_SIZE > size:
            break
        (key_len,) = _KEY_LEN.unpack_from(view, offset)
        key_end = offset + KEY_LEN_SIZE + key_len
        if key_end + VALUE_SIZE > size:
            break
        key = bytes(view[offset + KEY_LEN_SIZE:key_end])
        (value,) = _VALUE.unpack_from(view, key_end)
        pending.setdefault(key, []).append(value)
        offset = key_end + VALUE_SIZE
        read  += 1

    entries = {key: ValueSet(values) for key, values in pending.items()}
    if read < header.count:
        logger.warning("snapshot truncated: read %d of %d records", read, header.count)
        return DecodeResult(entries, header, read, TRUNCATED)
    logger.debug("decoded %d records for %d keys", read, len(entries))
    return DecodeResult(entries, header, read, OK)


def decode(data: Optional[bytes]) -> dict[bytes, ValueSet]:
    return decode_snapshot(data).entries


# ------------------------------------------------------------------
def encode(entries: Mapping[bytes, Iterable[int]], reserved: int = 0) -> bytes:
    """Serialize `entries`; values are written in ascending order per key."""
    sets = {key: values if isinstance(values, ValueSet) else ValueSet(values)
            for key, values in entries.items()}
    total = sum(len(values) for values in sets.values())

    out = bytearray(Header(reserved=reserved, count=total).pack())
    for key, values in sets.items():
        key = bytes(key)
        if len(key) > MAX_KEY_LEN:
            logger.warning("key of %d bytes truncated to %d in snapshot", len(key), MAX_KEY_LEN)
            key = key[:MAX_KEY_LEN]
        prefix = _KEY_LEN.pack(len(key)) + key
        for value in values:
            out += prefix
            out += _VALUE.pack(value)
    return bytes(out)
