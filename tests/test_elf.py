import pytest

from xvkit.elf import (
    ELF_PROG_FLAG_EXEC,
    ELF_PROG_FLAG_READ,
    ELF_PROG_LOAD,
    ElfError,
    ElfHeader,
    ProgramHeader,
    program_headers,
)


def _image(phdrs):
    header = ElfHeader(entry=0x1000, phoff=ElfHeader.SIZE, phnum=len(phdrs))
    return header.pack() + b"".join(ph.pack() for ph in phdrs)


def test_header_starts_with_magic():
    assert ElfHeader().pack()[:4] == b"\x7fELF"


def test_header_size():
    assert len(ElfHeader().pack()) == 52


def test_header_round_trip():
    header = ElfHeader(type=2, machine=3, version=1, entry=0x20, phoff=52, phnum=3)
    assert ElfHeader.unpack(header.pack()) == header


def test_header_unpack_ignores_trailing_data():
    header = ElfHeader(entry=0x44)
    assert ElfHeader.unpack(header.pack() + b"extra").entry == 0x44


def test_bad_magic():
    data = bytearray(ElfHeader().pack())
    data[0] = 0
    with pytest.raises(ElfError):
        ElfHeader.unpack(bytes(data))


def test_truncated_header():
    with pytest.raises(ElfError):
        ElfHeader.unpack(ElfHeader().pack()[:20])


def test_bad_ident_length():
    with pytest.raises(ElfError):
        ElfHeader(elf=b"abc").pack()


def test_program_header_round_trip():
    ph = ProgramHeader(ELF_PROG_LOAD, 0x80, 0, 0, 100, 200, ELF_PROG_FLAG_READ, 4096)
    again = ProgramHeader.unpack(ph.pack())
    assert again == ph
    assert again.loadable


def test_program_header_rejects_negative():
    with pytest.raises(ElfError):
        ProgramHeader(filesz=-1).pack()


def test_program_headers_iterates_table():
    phdrs = [
        ProgramHeader(ELF_PROG_LOAD, 0x100, 0, 0, 10, 20, ELF_PROG_FLAG_EXEC, 16),
        ProgramHeader(2, 0x200, 0x1000, 0x1000, 0, 0, 0, 4),
    ]
    found = list(program_headers(_image(phdrs)))
    assert found == phdrs
    assert [ph.loadable for ph in found] == [True, False]


def test_program_headers_empty_table():
    assert list(program_headers(_image([]))) == []


def test_program_headers_truncated_table():
    data = _image([ProgramHeader(ELF_PROG_LOAD)])[:-4]
    with pytest.raises(ElfError):
        list(program_headers(data))