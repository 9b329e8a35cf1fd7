from time import sleep, perf_counter
from lazy import SequenceIterator, Stop

def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.2)  # pretend this is expensive
    return x * x

print("\n--- Demo: laziness (no work until pulled) ---")
pipeline = (
    SequenceIterator(range(1, 10_000))
    .map(expensive_transform)   # expensive; watch when it runs
    .filter(lambda v: v % 2 == 0)
    .take(5)
)

print("Constructed pipeline. No output yet (nothing computed).")
print("\nIterating (should compute only what's needed for 5 items):")
t0 = perf_counter()
out = pipeline.to_list()
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.2f}s\n")

print("--- Demo: positional access ---")
it = SequenceIterator([0, 1, 2, 3, 5, 13, 15, 16, 17, 19])
print(f"nth(4) -> {it.nth(4)}")
print(f"next value -> {it.advance()}")
print(f"find(> 100) -> {it.find(lambda v: v > 100)}")
print(f"exhausted? {it.exhausted} (advance() -> {it.advance()!r})\n")

print("--- Demo: lexicographic comparison ---")
pairs = [
    ([1, 2, 3], [1, 2, 0]),
    ([], [1, 2, 3]),
    ([1.0, 2.0], [float("nan"), 3.0]),
]
for left, right in pairs:
    results = {
        op: getattr(SequenceIterator(left), op)(SequenceIterator(right))
        for op in ("lt", "le", "gt", "ge")
    }
    print(f"  {left} vs {right}: {results}")
print(f"  cmp_by([1, 2], [1, 3]) -> {SequenceIterator([1, 2]).cmp_by(SequenceIterator([1, 3]), lambda a, b: a - b)}\n")

print("--- Demo: folding with early stop ---")

def doubling(acc, x):
    nxt = 2 * acc + x
    return Stop(acc) if nxt > 1_000 else nxt

print(f"Full fold: {SequenceIterator(range(3, 14)).reduce(7, lambda acc, x: 2 * acc + x)}")
print(f"Bounded fold: {SequenceIterator(range(3, 14)).reduce(7, doubling)}")
