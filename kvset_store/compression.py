# ==================================================
# kvset_store/compression.py
# ==================================================
import zstandard as zstd

from .config import COMPRESS_LEVEL
from .const  import ZSTD_MAGIC

# -------- zstd wrappers ---------------------------------------------------

cctx = zstd.ZstdCompressor(level=COMPRESS_LEVEL)
dctx = zstd.ZstdDecompressor()

CompressionError = zstd.ZstdError


def is_compressed(data: bytes) -> bool:
    return data[:len(ZSTD_MAGIC)] == ZSTD_MAGIC

def compress(data: bytes) -> bytes:
    return cctx.compress(data)

def decompress(data: bytes) -> bytes:
    return dctx.decompress(data)
