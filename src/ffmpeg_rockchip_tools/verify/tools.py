"""Wrappers around binary introspection, parsed into typed records."""

import re
import shutil
import struct
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

ELF_MAGIC = b"\x7fELF"

# e_machine -> (short name, file(1) label)
ELF_MACHINES: dict[int, tuple[str, str]] = {
    3: ("i386", "Intel 80386"),
    8: ("mips", "MIPS"),
    40: ("arm", "ARM"),
    62: ("x86_64", "x86-64"),
    183: ("aarch64", "ARM aarch64"),
    243: ("riscv", "UCB RISC-V"),
}

ELF_TYPES = {1: "relocatable", 2: "executable", 3: "shared object", 4: "core file"}

NEEDED_RE = re.compile(r"\(NEEDED\)\s+Shared library:\s+\[([^\]]+)\]")

# Same character set and minimum length as strings(1) defaults
PRINTABLE_RUN_RE = re.compile(rb"[\x20-\x7e\t]{4,}")

SHARED_OBJECT_RE = re.compile(r"\.so(\.\d+)*$")


class ToolUnavailable(Exception):
    """An external introspection tool is missing or unusable."""

    def __init__(self, tool: str, reason: str = "not found"):
        self.tool = tool
        self.reason = reason
        super().__init__(f"{tool}: {reason}")


class NotAnElf(ValueError):
    """File does not start with an ELF header."""


@dataclass(frozen=True)
class ElfHeader:
    """Fields of an ELF header relevant to target identification."""

    bits: int
    little_endian: bool
    file_type: int
    machine: int

    @property
    def machine_name(self) -> str:
        return ELF_MACHINES.get(self.machine, (f"machine-{self.machine}", ""))[0]

    def describe(self) -> str:
        """Describe the header the way file(1) does."""
        order = "LSB" if self.little_endian else "MSB"
        kind = ELF_TYPES.get(self.file_type, f"type {self.file_type}")
        label = ELF_MACHINES.get(self.machine, ("", f"machine {self.machine}"))[1]
        return f"ELF {self.bits}-bit {order} {kind}, {label}"


@dataclass(frozen=True)
class LibraryFile:
    name: str
    size: int


@dataclass(frozen=True)
class PkgConfigEntry:
    name: str
    version: str | None


def read_elf_header(path: Path) -> ElfHeader:
    """Parse the identification part of an ELF header."""
    with open(path, "rb") as f:
        data = f.read(20)

    if len(data) < 20 or not data.startswith(ELF_MAGIC):
        raise NotAnElf(f"{path} is not an ELF file")

    ei_class, ei_data = data[4], data[5]
    if ei_class not in (1, 2) or ei_data not in (1, 2):
        raise NotAnElf(f"{path} has a malformed ELF header")

    little = ei_data == 1
    file_type, machine = struct.unpack_from("<HH" if little else ">HH", data, 16)
    return ElfHeader(
        bits=32 if ei_class == 1 else 64,
        little_endian=little,
        file_type=file_type,
        machine=machine,
    )


def find_tool(candidates: Sequence[str]) -> str:
    """Return the path of the first candidate found on PATH."""
    for name in candidates:
        path = shutil.which(name)
        if path:
            return path
    raise ToolUnavailable(" / ".join(candidates))


def parse_needed(output: str) -> list[str]:
    """Extract NEEDED shared library names from ``readelf -d`` output."""
    return [m.group(1) for m in NEEDED_RE.finditer(output)]


def list_needed_libraries(readelf: str, binary: Path) -> list[str]:
    """List shared libraries a binary is linked against."""
    try:
        result = subprocess.run(
            [readelf, "-d", str(binary)],
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise ToolUnavailable(readelf, str(exc)) from exc
    if result.returncode != 0:
        reason = result.stderr.strip() or f"exited with {result.returncode}"
        raise ToolUnavailable(readelf, reason)
    return parse_needed(result.stdout)


def scan_strings(path: Path) -> list[str]:
    """Return printable character runs from a file, in file order."""
    data = path.read_bytes()
    return [m.group().decode("ascii") for m in PRINTABLE_RUN_RE.finditer(data)]


def match_strings(strings: Iterable[str], pattern: re.Pattern[str]) -> list[str]:
    """Strings that fully match a pattern, in order, duplicates kept."""
    return [s for s in strings if pattern.fullmatch(s)]


def is_library_file(path: Path, prefixes: Sequence[str]) -> bool:
    name = path.name
    if not name.startswith(tuple(prefixes)):
        return False
    return name.endswith(".a") or SHARED_OBJECT_RE.search(name) is not None


def list_library_files(lib_dir: Path, prefixes: Sequence[str]) -> list[LibraryFile]:
    """Library archives and shared objects under a directory.

    Symlinks (``libavcodec.so -> libavcodec.so.61``) are skipped so each
    library is counted once.
    """
    found = []
    for path in sorted(lib_dir.rglob("*")):
        if path.is_symlink() or not path.is_file():
            continue
        if is_library_file(path, prefixes):
            found.append(LibraryFile(path.name, path.stat().st_size))
    return found


def read_pc_version(path: Path) -> str | None:
    """Return the ``Version:`` field of a pkg-config file."""
    for line in path.read_text(errors="replace").splitlines():
        if line.startswith("Version:"):
            return line.split(":", 1)[1].strip() or None
    return None


def list_pkgconfig_files(pc_dir: Path) -> list[PkgConfigEntry]:
    return [
        PkgConfigEntry(path.name, read_pc_version(path))
        for path in sorted(pc_dir.glob("*.pc"))
    ]
