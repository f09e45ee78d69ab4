import pytest

from xvkit.layout import KERNBASE, v2p
from xvkit.mmu import PGSIZE, PTE_U, PTE_W
from xvkit.vm import OutOfMemory, PageTable, PhysicalMemory, VMError


@pytest.fixture
def memory():
    return PhysicalMemory(64)


def test_kalloc_and_kfree_balance(memory):
    start = memory.free_count()
    pa = memory.kalloc()
    assert pa % PGSIZE == 0
    assert memory.free_count() == start - 1
    memory.kfree(pa)
    assert memory.free_count() == start


def test_double_free_is_an_error(memory):
    pa = memory.kalloc()
    memory.kfree(pa)
    with pytest.raises(VMError):
        memory.kfree(pa)


def test_exhausting_memory_raises():
    memory = PhysicalMemory(2)
    memory.kalloc()
    memory.kalloc()
    with pytest.raises(OutOfMemory):
        memory.kalloc()


def test_walk_without_alloc_on_empty_table(memory):
    pt = PageTable(memory)
    assert pt.walk(0x1000) is None


def test_walk_entries_are_consecutive(memory):
    pt = PageTable(memory)
    first = pt.walk(0x1000, True)
    assert pt.walk(0x1000) == first
    assert pt.walk(0x2000, True) == first + 4


def test_remap_raises(memory):
    pt = PageTable(memory)
    pa = memory.kalloc()
    pt.map_pages(0, PGSIZE, pa, PTE_W | PTE_U)
    with pytest.raises(VMError, match="remap"):
        pt.map_pages(0, PGSIZE, pa, PTE_W | PTE_U)


def test_init_user_places_code_at_zero(memory):
    pt = PageTable(memory)
    pt.init_user(b"\x90\x90\xcc")
    assert pt.read(0, 4) == b"\x90\x90\xcc\x00"


def test_init_user_rejects_a_full_page(memory):
    pt = PageTable(memory)
    with pytest.raises(VMError):
        pt.init_user(bytes(PGSIZE))


def test_alloc_user_returns_new_size_and_zeroed_pages(memory):
    pt = PageTable(memory)
    assert pt.alloc_user(0, 3 * PGSIZE) == 3 * PGSIZE
    assert pt.read(0, 3 * PGSIZE) == bytes(3 * PGSIZE)


def test_alloc_user_shrink_request_keeps_old_size(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, 2 * PGSIZE)
    assert pt.alloc_user(2 * PGSIZE, PGSIZE) == 2 * PGSIZE


def test_alloc_user_refuses_kernel_space(memory):
    pt = PageTable(memory)
    with pytest.raises(VMError):
        pt.alloc_user(0, KERNBASE)


def test_dealloc_then_realloc_gives_zeroed_page(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, 2 * PGSIZE)
    last = 2 * PGSIZE - 1
    pt.copy_out(last, b"\x63")
    assert pt.read(last, 1) == b"\x63"
    assert pt.dealloc_user(2 * PGSIZE, PGSIZE) == PGSIZE
    with pytest.raises(VMError):
        pt.read(last, 1)
    pt.alloc_user(PGSIZE, 2 * PGSIZE)
    assert pt.read(last, 1) == b"\x00"


def test_dealloc_skips_missing_directories(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, PGSIZE)
    pa = memory.kalloc()
    pt.map_pages(0x800000, PGSIZE, pa, PTE_W | PTE_U)
    pt.dealloc_user(0x800000 + PGSIZE, 0)
    with pytest.raises(VMError):
        pt.read(0, 1)
    with pytest.raises(VMError):
        pt.read(0x800000, 1)


def test_free_returns_every_page(memory):
    start = memory.free_count()
    pt = PageTable(memory)
    pt.alloc_user(0, 5 * PGSIZE)
    pt.free()
    assert memory.free_count() == start
    with pytest.raises(VMError):
        pt.free()


def test_out_of_memory_cleans_up_user_pages():
    memory = PhysicalMemory(4)
    pt = PageTable(memory)
    with pytest.raises(OutOfMemory):
        pt.alloc_user(0, 10 * PGSIZE)
    with pytest.raises(VMError):
        pt.read(0, 1)
    pt.free()
    assert memory.free_count() == 4


def test_copy_is_independent(memory):
    parent = PageTable(memory)
    parent.alloc_user(0, 2 * PGSIZE)
    parent.copy_out(100, b"hello")
    child = parent.copy(2 * PGSIZE)
    assert child.read(100, 5) == b"hello"
    child.copy_out(100, b"HELLO")
    assert parent.read(100, 5) == b"hello"
    assert child.read(100, 5) == b"HELLO"


def test_copy_of_unmapped_range_fails_and_leaks_nothing(memory):
    parent = PageTable(memory)
    before = memory.free_count()
    with pytest.raises(VMError):
        parent.copy(PGSIZE)
    assert memory.free_count() == before


def test_copy_out_across_pages_round_trips(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, 3 * PGSIZE)
    data = bytes(range(256)) * 20
    pt.copy_out(PGSIZE - 10, data)
    assert pt.read(PGSIZE - 10, len(data)) == data


def test_clear_user_hides_page(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, 2 * PGSIZE)
    pt.clear_user(0)
    assert pt.user_to_kernel(0) is None
    assert pt.user_to_kernel(PGSIZE) is not None
    with pytest.raises(VMError):
        pt.copy_out(0, b"x")


def test_clear_user_on_unmapped_raises(memory):
    pt = PageTable(memory)
    with pytest.raises(VMError):
        pt.clear_user(0x400000)


def test_user_to_kernel_address(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, PGSIZE)
    ka = pt.user_to_kernel(0)
    assert ka >= KERNBASE
    assert v2p(ka) % PGSIZE == 0
    assert pt.user_to_kernel(5 * PGSIZE) is None


def test_load_copies_file_data(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, 2 * PGSIZE)
    data = b"HEADER" + bytes(range(200)) * 30
    pt.load(0, data, 6, PGSIZE + 100)
    assert pt.read(0, PGSIZE + 100) == data[6:6 + PGSIZE + 100]


def test_load_requires_alignment_and_enough_data(memory):
    pt = PageTable(memory)
    pt.alloc_user(0, PGSIZE)
    with pytest.raises(VMError, match="aligned"):
        pt.load(1, b"abc", 0, 3)
    with pytest.raises(VMError):
        pt.load(0, b"abc", 0, 10)
    with pytest.raises(VMError):
        pt.load(4 * PGSIZE, b"abc", 0, 3)