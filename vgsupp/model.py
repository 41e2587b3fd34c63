"""Data model for Valgrind suppressions.

This module defines the value types produced by
:mod:`vgsupp.parser`.  A suppression file is a sequence of blocks and
each block describes one (or, for multi-tool blocks, several)
:class:`Suppression` records.  A record is made of:

* a free-text name,
* a :class:`SuppressionKind` identifying the tool and error category,
* optional lines of extra information (e.g. the syscall name of a
  Memcheck ``Param`` suppression),
* the calling context: an ordered list of :class:`Frame` matchers.

Frames and kinds are closed families.  Code consuming them dispatches
with ``isinstance`` over the concrete classes defined here, and every
value is immutable so records can be shared between collections
without copying.

Each class knows how to print itself in canonical suppression syntax
via ``__str__``.  The text produced for a :class:`Suppression` can be
fed back to the parser.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

MEMCHECK = "Memcheck"

# Indentation used for every line inside a suppression block
INDENT = "   "

_SIZED_RE = re.compile(r"(?P<prefix>Addr|Value)(?P<size>[0-9]+)")


class Frame(ABC):
    """One element of a suppression's calling context."""

    @abstractmethod
    def __str__(self) -> str:
        """Return the frame as it appears in a suppressions file."""


@dataclass(frozen=True)
class FrameWildcard(Frame):
    """Matches zero or more frames; written as ``...``."""

    def __str__(self) -> str:
        return "..."


@dataclass(frozen=True)
class ObjFrame(Frame):
    """Matches a frame by the path of its object file.

    ``glob`` may contain the wildcard characters ``*`` and ``?``.
    """

    glob: str

    def __str__(self) -> str:
        return f"obj:{self.glob}"


@dataclass(frozen=True)
class FunFrame(Frame):
    """Matches a frame by function name (``glob`` may use ``*``/``?``)."""

    glob: str

    def __str__(self) -> str:
        return f"fun:{self.glob}"


class SuppressionKind(ABC):
    """The tool and error category a suppression applies to.

    Concrete kinds expose ``tool_name`` and ``category``; the fixed
    Memcheck categories derive from :class:`MemcheckKind` while any
    other tool/category pair is an :class:`OtherKind`.
    """

    @abstractmethod
    def __str__(self) -> str:
        """Return the ``Tool:Category`` line for this kind."""


class MemcheckKind(SuppressionKind, ABC):
    """Base class for the categories Memcheck defines."""

    @property
    def tool_name(self) -> str:
        return MEMCHECK

    @property
    @abstractmethod
    def category(self) -> str:
        """Category text as written after the colon."""

    def __str__(self) -> str:
        return f"{MEMCHECK}:{self.category}"


@dataclass(frozen=True)
class MemcheckAddr(MemcheckKind):
    """Invalid read or write of ``size`` bytes (``Addr1``, ``Addr4``, ...)."""

    size: int

    @property
    def category(self) -> str:
        return f"Addr{self.size}"


@dataclass(frozen=True)
class MemcheckCond(MemcheckKind):
    @property
    def category(self) -> str:
        return "Cond"


@dataclass(frozen=True)
class MemcheckFree(MemcheckKind):
    @property
    def category(self) -> str:
        return "Free"


@dataclass(frozen=True)
class MemcheckLeak(MemcheckKind):
    @property
    def category(self) -> str:
        return "Leak"


@dataclass(frozen=True)
class MemcheckOverlap(MemcheckKind):
    @property
    def category(self) -> str:
        return "Overlap"


@dataclass(frozen=True)
class MemcheckParam(MemcheckKind):
    """Invalid system call parameter; the syscall goes in the extra info."""

    @property
    def category(self) -> str:
        return "Param"


@dataclass(frozen=True)
class MemcheckValue(MemcheckKind):
    """Use of an uninitialised value of ``size`` bytes."""

    size: int

    @property
    def category(self) -> str:
        return f"Value{self.size}"


@dataclass(frozen=True)
class OtherKind(SuppressionKind):
    """Any tool/category pair that is not a recognised Memcheck category.

    The raw text is kept verbatim.  When printed the line is prefixed
    with ``?`` to mark that the kind was not interpreted.
    """

    tool_name: str
    raw_type: str

    @property
    def category(self) -> str:
        return self.raw_type

    def __str__(self) -> str:
        return f"?{self.tool_name}:{self.raw_type}"


_FIXED_MEMCHECK_KINDS = {
    "Cond": MemcheckCond(),
    "Free": MemcheckFree(),
    "Leak": MemcheckLeak(),
    "Overlap": MemcheckOverlap(),
    "Param": MemcheckParam(),
}


def resolve_kind(tool_name: str, raw_type: str) -> SuppressionKind:
    """Map a raw ``tool_name``/``raw_type`` pair onto a kind.

    Only the exact tool name ``Memcheck`` is interpreted.  ``Addr`` and
    ``Value`` need a numeric suffix made of ASCII digits; without one
    (``Addr``, ``Addrx``, ``Value-1``) the pair is kept as an
    :class:`OtherKind`.
    """
    if tool_name == MEMCHECK:
        fixed = _FIXED_MEMCHECK_KINDS.get(raw_type)
        if fixed is not None:
            return fixed
        m = _SIZED_RE.fullmatch(raw_type)
        if m:
            size = int(m.group("size"))
            if m.group("prefix") == "Addr":
                return MemcheckAddr(size)
            return MemcheckValue(size)
    return OtherKind(tool_name, raw_type)


def _check_line(text: str, what: str) -> None:
    """Reject text that would not come back as one body line of a block."""
    if text.splitlines() != [text] or text != text.strip():
        raise ValueError(f"{what} must be a single line without surrounding whitespace: {text!r}")
    if text.startswith("#"):
        raise ValueError(f"{what} cannot start with '#': {text!r}")


def is_frame_line(line: str) -> bool:
    """True if the stripped ``line`` is a calling context line."""
    return line == "..." or line.startswith(("obj:", "fun:"))


@dataclass(frozen=True)
class Suppression:
    """A single suppression record.

    ``extra_info`` is ``None`` when the block carried no extra lines; an
    empty sequence is stored as ``None`` as well.  Sequences passed in
    are stored as tuples.

    Raises:
        ValueError: If the name or an extra info line would not read
            back unchanged from the printed block.
    """

    name: str
    kind: SuppressionKind
    extra_info: Optional[Tuple[str, ...]] = None
    frames: Tuple[Frame, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("suppression name must not be empty")
        _check_line(self.name, "suppression name")
        if "}" in self.name:
            raise ValueError(f"suppression name cannot contain '}}': {self.name!r}")
        extra_info = tuple(self.extra_info or ()) or None
        for line in extra_info or ():
            _check_line(line, "extra info line")
            if line == "}" or is_frame_line(line):
                raise ValueError(f"extra info line would be read as a frame or block end: {line!r}")
        object.__setattr__(self, "extra_info", extra_info)
        object.__setattr__(self, "frames", tuple(self.frames))

    def lines(self) -> List[str]:
        """Return the block as a list of lines without line terminators."""
        body = [self.name, str(self.kind)]
        if self.extra_info is not None:
            body.extend(self.extra_info)
        body.extend(str(frame) for frame in self.frames)
        return ["{"] + [INDENT + line for line in body] + ["}"]

    def __str__(self) -> str:
        return "\n".join(self.lines())


class Suppressions:
    """An ordered collection of :class:`Suppression` records.

    Records keep their insertion order and duplicates are allowed.  The
    collection only ever grows; it is not safe to share between
    threads without external locking.
    """

    def __init__(self, suppressions: Iterable[Suppression] = ()) -> None:
        self._suppressions: List[Suppression] = list(suppressions)

    def append(self, suppression: Suppression) -> None:
        self._suppressions.append(suppression)

    def append_all(self, other: "Suppressions") -> None:
        """Add every record of ``other`` after the records already held.

        Records are immutable, so the two collections can hold the same
        values without affecting each other.  ``other`` may be ``self``.
        """
        self._suppressions.extend(list(other))

    def iterate(self) -> Iterator[Suppression]:
        """Return a fresh iterator over the records in insertion order."""
        return iter(tuple(self._suppressions))

    def __iter__(self) -> Iterator[Suppression]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._suppressions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Suppressions):
            return NotImplemented
        return self._suppressions == other._suppressions

    def __repr__(self) -> str:
        return f"Suppressions({self._suppressions!r})"

    def __str__(self) -> str:
        return "".join(f"{suppression}\n" for suppression in self._suppressions)
