"""Parser for Valgrind suppression files.

The :class:`SuppressionParser` class reads the brace-delimited
suppression syntax understood by Valgrind (see "Suppressing errors" in
the Valgrind user manual) and produces a
:class:`vgsupp.model.Suppressions` collection::

    {
       <name>
       <Tool1,Tool2,...>:<Category>
       [<extra info line>]...
       [...|obj:<glob>|fun:<glob>]...
    }

Parsing is a fold over the input lines through a small state machine.
Each state is an immutable object holding just what has been read of
the current block so far, and each state has one transition function
taking the next significant line.  Blank lines and ``#`` comments are
skipped but still counted, so diagnostics point at the right line.

A block naming several tools (``Memcheck,Helgrind:Race``) yields one
record per tool, all sharing the name, extra info and frames.

The first defect aborts the parse with a
:class:`vgsupp.errors.SuppressionParseError`; no partial result is
returned.

Example usage::

    from vgsupp import SuppressionParser

    parser = SuppressionParser()
    suppressions = parser.parse_file("valgrind.supp")
    for supp in suppressions:
        print(supp.name, supp.kind)

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from .errors import SuppressionParseError
from .model import (
    Frame,
    FrameWildcard,
    FunFrame,
    ObjFrame,
    Suppression,
    Suppressions,
    resolve_kind,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Parser states


@dataclass(frozen=True)
class BeforeBlock:
    """Between blocks; the next line must be ``{``."""


@dataclass(frozen=True)
class AfterOpen:
    """Just read ``{``; the next line is the suppression name."""

    opening_lineno: int


@dataclass(frozen=True)
class HaveName:
    """Name read; the next line is ``Tool[,Tool...]:Category``."""

    opening_lineno: int
    name: str


@dataclass(frozen=True)
class HaveKind:
    """Kind read; collecting extra info until the first frame."""

    opening_lineno: int
    name: str
    tool_names: Tuple[str, ...]
    raw_type: str
    extra_info: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class HaveFrames:
    """At least one frame read; only frames or ``}`` may follow."""

    opening_lineno: int
    name: str
    tool_names: Tuple[str, ...]
    raw_type: str
    extra_info: Optional[Tuple[str, ...]]
    frames: Tuple[Frame, ...]


ParseState = Union[BeforeBlock, AfterOpen, HaveName, HaveKind, HaveFrames]

# A transition yields the next state plus any records completed by the line
Transition = Tuple[ParseState, Tuple[Suppression, ...]]

_NOTHING: Tuple[Suppression, ...] = ()


# ----------------------------------------------------------------------
# Helpers


def _parse_frame(line: str) -> Optional[Frame]:
    """Return the frame described by ``line`` or ``None`` if it is not one."""
    if line == "...":
        return FrameWildcard()
    if line.startswith("obj:"):
        return ObjFrame(line[4:].lstrip())
    if line.startswith("fun:"):
        return FunFrame(line[4:].lstrip())
    return None


def _expand(state: Union[HaveKind, HaveFrames]) -> Tuple[Suppression, ...]:
    """Build one record per tool named in the block, in order."""
    frames = state.frames if isinstance(state, HaveFrames) else ()
    if not frames:
        logger.warning(
            "suppression '%s' (line %d) has no calling context",
            state.name,
            state.opening_lineno,
        )
    return tuple(
        Suppression(
            name=state.name,
            kind=resolve_kind(tool_name, state.raw_type),
            extra_info=state.extra_info,
            frames=frames,
        )
        for tool_name in state.tool_names
    )


# ----------------------------------------------------------------------
# Transitions


def _before_block(state: BeforeBlock, line: str, lineno: int) -> Transition:
    if line == "{":
        return AfterOpen(lineno), _NOTHING
    if line.startswith("{"):
        raise SuppressionParseError(lineno, "expecting an opening brace on its own line")
    raise SuppressionParseError(lineno, "expecting an opening brace")


def _after_open(state: AfterOpen, line: str, lineno: int) -> Transition:
    # "{" directly followed by "}" is an empty block and is skipped
    if line == "}":
        return BeforeBlock(), _NOTHING
    if "}" in line:
        raise SuppressionParseError(
            lineno, "the suppression name cannot contain a closing brace '}'"
        )
    return HaveName(state.opening_lineno, line), _NOTHING


def _have_name(state: HaveName, line: str, lineno: int) -> Transition:
    tools, colon, raw_type = line.partition(":")
    if not colon:
        raise SuppressionParseError(lineno, "no suppression type was found")
    return (
        HaveKind(
            opening_lineno=state.opening_lineno,
            name=state.name,
            tool_names=tuple(tools.split(",")),
            raw_type=raw_type,
        ),
        _NOTHING,
    )


def _have_kind(state: HaveKind, line: str, lineno: int) -> Transition:
    frame = _parse_frame(line)
    if frame is not None:
        return (
            HaveFrames(
                opening_lineno=state.opening_lineno,
                name=state.name,
                tool_names=state.tool_names,
                raw_type=state.raw_type,
                extra_info=state.extra_info,
                frames=(frame,),
            ),
            _NOTHING,
        )
    if line == "}":
        return BeforeBlock(), _expand(state)
    extra_info = (state.extra_info or ()) + (line,)
    return (
        HaveKind(
            opening_lineno=state.opening_lineno,
            name=state.name,
            tool_names=state.tool_names,
            raw_type=state.raw_type,
            extra_info=extra_info,
        ),
        _NOTHING,
    )


def _have_frames(state: HaveFrames, line: str, lineno: int) -> Transition:
    frame = _parse_frame(line)
    if frame is not None:
        return (
            HaveFrames(
                opening_lineno=state.opening_lineno,
                name=state.name,
                tool_names=state.tool_names,
                raw_type=state.raw_type,
                extra_info=state.extra_info,
                frames=state.frames + (frame,),
            ),
            _NOTHING,
        )
    if line == "}":
        return BeforeBlock(), _expand(state)
    raise SuppressionParseError(lineno, "invalid calling context line")


_TRANSITIONS = {
    BeforeBlock: _before_block,
    AfterOpen: _after_open,
    HaveName: _have_name,
    HaveKind: _have_kind,
    HaveFrames: _have_frames,
}


def step(state: ParseState, line: str, lineno: int) -> Transition:
    """Apply one significant, already stripped ``line`` to ``state``."""
    return _TRANSITIONS[type(state)](state, line, lineno)


def check_end_of_input(state: ParseState) -> None:
    """Raise if the input ended in the middle of a block."""
    if isinstance(state, BeforeBlock):
        return
    if isinstance(state, AfterOpen):
        raise SuppressionParseError(
            state.opening_lineno,
            "unexpectedly encountered EOF while parsing a suppression",
        )
    raise SuppressionParseError(
        state.opening_lineno,
        f"unexpectedly encountered EOF while parsing the suppression named '{state.name}'",
    )


# ----------------------------------------------------------------------
# Public API


def _significant_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Yield ``(lineno, stripped_line)`` for lines that are not blank or comments.

    Errors raised by the underlying source while producing a line are
    reported at the number of lines read so far.
    """
    lineno = 0
    source = iter(lines)
    while True:
        try:
            raw = next(source)
        except StopIteration:
            return
        except (OSError, UnicodeError) as exc:
            raise SuppressionParseError(
                lineno, f"I/O error while reading line: {exc}"
            ) from exc
        lineno += 1
        line = raw.strip()
        if line and not line.startswith("#"):
            yield lineno, line


def parse(lines: Iterable[str]) -> Suppressions:
    """Parse suppressions from an iterable of text lines.

    Args:
        lines: Any iterable of strings, e.g. an open text file or the
            result of ``str.splitlines()``.  Line terminators are
            ignored.

    Returns:
        The suppressions in the order they were defined.

    Raises:
        SuppressionParseError: On the first malformed line, a read
            failure, or input ending inside a block.
    """
    suppressions = Suppressions()
    state: ParseState = BeforeBlock()
    for lineno, line in _significant_lines(lines):
        state, completed = step(state, line, lineno)
        for suppression in completed:
            suppressions.append(suppression)
    check_end_of_input(state)
    return suppressions


class SuppressionParser:
    """Convenience front end for :func:`parse` over strings and files."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def parse_lines(self, lines: Iterable[str]) -> Suppressions:
        return parse(lines)

    def parse_text(self, text: str) -> Suppressions:
        """Parse suppressions held in a string."""
        return parse(text.splitlines())

    def parse_file(self, path: str) -> Suppressions:
        """Parse a suppressions file.

        Args:
            path: File system path to the suppressions file.

        Returns:
            The parsed :class:`Suppressions`.

        Raises:
            SuppressionParseError: With ``filename`` set to ``path``;
                undecodable bytes are reported at the line before them.
            OSError: If the file cannot be opened.
        """
        logger.debug("parsing suppressions from %s", path)
        # Decode per line so a bad byte is reported at its own line
        with open(path, "rb") as fh:
            try:
                suppressions = parse(raw.decode(self.encoding) for raw in fh)
            except SuppressionParseError as exc:
                exc.filename = str(path)
                raise
        logger.debug("parsed %d suppressions from %s", len(suppressions), path)
        return suppressions
