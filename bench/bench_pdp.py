import argparse
import statistics
import time

from aclx import Acl


def build(depth: int, width: int) -> Acl:
    """A role chain *depth* deep and a resource chain *depth* deep, *width* rules per level."""
    acl = Acl()
    acl.add_role("r0")
    acl.add_resource("n0")
    for i in range(1, depth):
        acl.add_role(f"r{i}", [f"r{i - 1}"])
        acl.add_resource(f"n{i}", f"n{i - 1}")
    for i in range(depth):
        for j in range(width):
            acl.allow(f"r{i}", f"n{i}", f"p{j}")
    acl.allow("r0", "n0", "target")
    return acl


def run(depth: int, iters: int, locked: bool):
    acl = build(depth, 10)
    if locked:
        acl.lock()
    role, resource = f"r{depth - 1}", f"n{depth - 1}"
    lat = []
    for _ in range(iters):
        t0 = time.perf_counter()
        allowed = acl.is_allowed(role, resource, "target")
        lat.append((time.perf_counter() - t0) * 1000.0)
    return {
        "p50": statistics.median(lat),
        "avg": sum(lat) / len(lat),
        "p90": percentile(lat, 90),
        "allowed": allowed,
    }


def percentile(arr, p):
    arr2 = sorted(arr)
    k = int(round((p / 100.0) * (len(arr2) - 1)))
    return arr2[k]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--depths", type=int, nargs="+", default=[1, 5, 10, 50])
    ap.add_argument("--iters", type=int, default=200)
    ap.add_argument("--locked", action="store_true", help="lock the acl to enable memoisation")
    args = ap.parse_args()
    print("depth,avg_ms,p50_ms,p90_ms,allowed")
    for d in args.depths:
        r = run(d, args.iters, args.locked)
        print(f"{d},{r['avg']:.3f},{r['p50']:.3f},{r['p90']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()
