"""Splitting a document into preamble and body, and parsing the preamble."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from eipwlint.snippet import Annotation, AnnotationType, Slice, Snippet

_MARKER = re.compile(r"(?:\A|\n)---(?:\n|\Z)")


class SplitError(Exception):
    """The document could not be split into a preamble and a body."""


class LeadingGarbage(SplitError):
    """Text appears before the opening `---` line."""


class MissingStart(SplitError):
    """No opening `---` line was found."""


class MissingEnd(SplitError):
    """No closing `---` line was found."""


class ParseErrors(Exception):
    """One or more preamble lines could not be parsed."""

    def __init__(self, errors: list[Snippet]) -> None:
        super().__init__(f"{len(errors)} preamble parse error(s)")
        self.errors = errors


@dataclass(frozen=True)
class Field:
    """A single `name: value` line of the preamble."""

    line_start: int
    source: str
    name: str
    value: str


class Preamble:
    """An ordered collection of preamble fields, possibly with duplicates."""

    def __init__(self, fields: Iterable[Field] = ()) -> None:
        self._fields = tuple(fields)
        self._by_name = {f.name: i for i, f in enumerate(self._fields)}

    def fields(self) -> Iterator[Field]:
        """Iterate over every field in order, duplicates included."""
        return iter(self._fields)

    def by_name(self, name: str) -> Field | None:
        """Return the last field with the given name, if any."""
        index = self._by_name.get(name)
        return None if index is None else self._fields[index]

    def by_index(self, index: int) -> Field | None:
        """Return the field at the given position, if any."""
        if 0 <= index < len(self._fields):
            return self._fields[index]
        return None

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Preamble):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"Preamble({list(self._fields)!r})"


def split_preamble(text: str) -> tuple[str, str]:
    """Split a document into its preamble text and its body text."""
    markers = _MARKER.finditer(text)
    start = next(markers, None)
    if start is None:
        raise MissingStart("missing opening `---` line")
    end = next(markers, None)
    if end is None:
        raise MissingEnd("missing closing `---` line")
    if start.start() != 0:
        raise LeadingGarbage("text before opening `---` line")
    return text[start.end():end.start()], text[end.end():]


def _parse_line(origin: str | None, line_start: int, line: str) -> Field | Snippet:
    name, colon, value = line.partition(":")
    if not colon:
        return Snippet(
            title=Annotation(
                AnnotationType.ERROR, "missing delimiter `:` in preamble field"
            ),
            slices=[Slice(source=line, line_start=line_start, origin=origin)],
        )
    return Field(line_start=line_start, source=line, name=name, value=value)


def parse_preamble(origin: str | None, text: str) -> Preamble:
    """Parse preamble text; raise ParseErrors listing every bad line."""
    fields: list[Field] = []
    errors: list[Snippet] = []
    # Lines start at one, plus the opening `---` line.
    for line_start, line in enumerate(text.split("\n"), start=2):
        parsed = _parse_line(origin, line_start, line)
        if isinstance(parsed, Field):
            fields.append(parsed)
        else:
            errors.append(parsed)
    if errors:
        raise ParseErrors(errors)
    return Preamble(fields)