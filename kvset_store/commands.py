# ==================================================
# kvset_store/commands.py
# ==================================================
"""
Command driver: reads a command count followed by that many
`insert <key> <value>`, `delete <key> <value>` or `find <key>` commands
from a whitespace-separated stream, applies them to a KVSetStore and
prints one line per `find`.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Iterator, TextIO

from .           import config
from .sorted_set import check_value
from .store      import KVSetStore

logger = logging.getLogger(__name__)

NULL = "null"


class CommandError(ValueError):
    pass


# ── small utils ──────────────────────────────────────────────
def format_values(values: Iterable[int] | None) -> str:
    if values is None:
        return NULL
    return " ".join(str(v) for v in values)

def _int(token: bytes, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise CommandError(f"{what} must be an integer, got {token!r}") from None

def _value(token: bytes) -> int:
    value = _int(token, "value")
    try:
        return check_value(value)
    except ValueError as exc:
        raise CommandError(str(exc)) from None


# ── driver ───────────────────────────────────────────────────
def run(store: KVSetStore, data: bytes, out: TextIO) -> int:
    """Execute the commands in `data`; returns how many were executed."""
    tokens: Iterator[bytes] = iter(data.split())
    count_token = next(tokens, None)
    if count_token is None:
        return 0
    count = _int(count_token, "command count")

    done = 0
    try:
        while done < count:
            verb = next(tokens)
            kind = verb[:1].lower()
            if kind == b"i":
                key = next(tokens)
                store.insert(key, _value(next(tokens)))
            elif kind == b"d":
                key = next(tokens)
                store.delete(key, _value(next(tokens)))
            elif kind == b"f":
                print(format_values(store.find(next(tokens))), file=out)
            else:
                raise CommandError(f"unknown command {verb!r}")
            done += 1
    except StopIteration:
        logger.warning("input ended after %d of %d commands", done, count)
    return done


def main(argv: list[str] | None = None,
         stdin=None, stdout: TextIO | None = None) -> int:
    p = argparse.ArgumentParser(prog="kvset_store",
                                description="Run insert/delete/find commands against a snapshot file.")
    p.add_argument("--db", default=config.DB_PATH, help="snapshot path (default: %(default)s)")
    p.add_argument("--compress", action=argparse.BooleanOptionalAction, default=config.COMPRESS,
                   help="zstd-compress the snapshot on save")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format=config.LOG_FORMAT, stream=sys.stderr)
    stdin  = stdin  if stdin  is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    store = KVSetStore(args.db, compress=args.compress)
    data  = stdin.read()
    if not data.split():
        logger.info("no commands, leaving %s untouched", args.db)
        return 0

    status = 0
    try:
        run(store, data, stdout)
    except CommandError as exc:
        logger.error("%s", exc)
        status = 1

    try:
        store.close()
    except OSError:
        return 2
    return status


if __name__ == "__main__":
    sys.exit(main())
