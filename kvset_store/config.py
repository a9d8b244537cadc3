# ==================================================
# kvset_store/config.py
# ==================================================
import os

DB_PATH        = os.getenv("KVSET_DB_PATH",        "kv_store.bin")
COMPRESS       = os.getenv("KVSET_COMPRESS",       "0").lower() in ("1", "true", "yes", "on")
COMPRESS_LEVEL = int(os.getenv("KVSET_COMPRESS_LEVEL", "3"))

LOG_LEVEL  = os.getenv("KVSET_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
