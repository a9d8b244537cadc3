# ==================================================
# kvset_store/const.py
# ==================================================
MAGIC = 0x4B565354        # "KVST" read as a little-endian u32
VERSION = 1
HEADER_FMT = "<III4xQ"    # magic, version, reserved, pad, record count
HEADER_SIZE = 24          # bytes (4+4+4+4 pad+8)
KEY_LEN_FMT = "<H"        # u16 key length
KEY_LEN_SIZE = 2
VALUE_FMT = "<i"          # i32 value
VALUE_SIZE = 4
MAX_KEY_LEN = 0xFFFF

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"   # zstandard frame header
