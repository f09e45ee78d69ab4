import pytest

from xvkit.umalloc import MIN_GROW_UNITS, UNIT, Heap


def test_addresses_are_aligned_and_distinct():
    heap = Heap()
    addrs = [heap.malloc(n) for n in (1, 7, 8, 100, 3000)]
    assert all(a % UNIT == 0 for a in addrs)
    assert len(set(addrs)) == len(addrs)


def test_allocations_do_not_overlap():
    heap = Heap()
    sizes = [5, 17, 64, 1000, 33, 250]
    spans = sorted((heap.malloc(n), n) for n in sizes)
    for (a, n), (b, _) in zip(spans, spans[1:]):
        assert a + n <= b


def test_heap_grows_in_minimum_steps():
    heap = Heap()
    heap.malloc(1)
    assert heap.size() == MIN_GROW_UNITS * UNIT


def test_allocates_from_the_tail_of_a_block():
    heap = Heap()
    first = heap.malloc(16)
    second = heap.malloc(16)
    assert second < first


def test_free_coalesces_everything():
    heap = Heap()
    addrs = [heap.malloc(n) for n in (10, 200, 3000, 40)]
    for a in reversed(addrs[::2]):
        heap.free(a)
    for a in addrs[1::2]:
        heap.free(a)
    assert heap.free_blocks() == [(0, heap.size())]


def test_exhaust_then_recover():
    heap = Heap(limit=2 * MIN_GROW_UNITS * UNIT)
    held = []
    with pytest.raises(MemoryError):
        while True:
            held.append(heap.malloc(10001))
    assert held
    for a in held:
        heap.free(a)
    assert heap.free_blocks() == [(0, heap.size())]
    big = heap.malloc(1024 * 20)
    assert big % UNIT == 0


def test_limit_too_small():
    with pytest.raises(MemoryError):
        Heap(limit=1000).malloc(1)


def test_bad_free_raises():
    heap = Heap()
    a = heap.malloc(10)
    with pytest.raises(ValueError):
        heap.free(a + 1)
    heap.free(a)
    with pytest.raises(ValueError):
        heap.free(a)


def test_reuse_after_free():
    heap = Heap()
    a = heap.malloc(100)
    heap.free(a)
    size = heap.size()
    heap.malloc(100)
    assert heap.size() == size