# ==================================================
# examples/build_store.py
# ==================================================
import argparse, random
from kvset_store import KVSetStore

def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument("store", help="path to snapshot file")
    p.add_argument("count", type=int)
    p.add_argument("--keys", type=int, default=100, help="number of distinct keys")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--compress", action="store_true")
    args = p.parse_args(argv)

    rng = random.Random(args.seed)
    with KVSetStore(args.store, compress=args.compress) as store:
        for _ in range(args.count):
            key = f"key_{rng.randrange(args.keys)}"
            store.insert(key, rng.randint(-1_000_000, 1_000_000))
        print(f"{len(store)} keys, {store.record_count} records")

if __name__ == "__main__":
    main()
