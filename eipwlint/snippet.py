"""Structured diagnostics and their plain-text rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, NamedTuple


class AnnotationType(enum.Enum):
    """Severity or role of an annotation."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    NOTE = "Note"
    HELP = "Help"

    @property
    def display_name(self) -> str:
        return self.value.lower()


@dataclass(frozen=True)
class Annotation:
    """A title or footer line of a snippet."""

    annotation_type: AnnotationType
    label: str | None = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "annotation_type": self.annotation_type.value,
            "id": self.id,
            "label": self.label,
        }


@dataclass(frozen=True)
class SourceAnnotation:
    """A label attached to a character range of a slice's source."""

    annotation_type: AnnotationType
    label: str
    range: tuple[int, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "annotation_type": self.annotation_type.value,
            "label": self.label,
            "range": list(self.range),
        }


@dataclass
class Slice:
    """A piece of source text shown within a snippet."""

    source: str
    line_start: int
    origin: str | None = None
    annotations: list[SourceAnnotation] = field(default_factory=list)
    fold: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "annotations": [a.to_dict() for a in self.annotations],
            "fold": self.fold,
            "line_start": self.line_start,
            "origin": self.origin,
            "source": self.source,
        }


@dataclass
class Snippet:
    """A complete diagnostic: title, source slices and footer notes."""

    title: Annotation | None = None
    slices: list[Slice] = field(default_factory=list)
    footer: list[Annotation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": None if self.title is None else self.title.to_dict(),
            "footer": [a.to_dict() for a in self.footer],
            "opt": {"anonymized_line_numbers": False, "color": False},
            "slices": [s.to_dict() for s in self.slices],
        }


class _Line(NamedTuple):
    kind: str
    text: str = ""
    lineno: int | None = None


def _source_lines(source: str) -> list[str]:
    if not source:
        return []
    lines = source.split("\n")
    if source.endswith("\n"):
        lines.pop()
    return lines


def _mark(annotation: SourceAnnotation, line_offset: int, line_end: int) -> _Line:
    start = annotation.range[0] - line_offset
    stop = min(annotation.range[1], line_end) - line_offset
    char = "^" if annotation.annotation_type is AnnotationType.ERROR else "-"
    text = " " * start + char * max(1, stop - start)
    if annotation.label:
        text += f" {annotation.label}"
    return _Line("mark", text)


def _format_slice(slc: Slice, is_first: bool, has_footer: bool) -> list[_Line]:
    entries: list[tuple[_Line, list[_Line]]] = []
    main: tuple[int, int] | None = None
    first_start = slc.annotations[0].range[0] if slc.annotations else None
    offset = 0

    for number, raw in enumerate(_source_lines(slc.source), start=slc.line_start):
        end = offset + len(raw)
        marks = [
            _mark(a, offset, end)
            for a in slc.annotations
            if offset <= a.range[0] <= end
        ]
        if main is None and first_start is not None and offset <= first_start <= end:
            main = (number, first_start - offset + 1)
        entries.append((_Line("content", raw.removesuffix("\r"), number), marks))
        offset = end + 1

    body: list[_Line] = []
    folded = False
    for index, (content, marks) in enumerate(entries):
        if slc.fold and index > 0 and not marks:
            if not folded:
                body.append(_Line("fold"))
                folded = True
            continue
        folded = False
        body.append(content)
        body.extend(marks)

    lines: list[_Line] = []
    if slc.origin is not None:
        arrow = "-->" if is_first else ":::"
        pos = f":{main[0]}:{main[1]}" if main else ""
        lines.append(_Line("origin", f"{arrow} {slc.origin}{pos}"))
    if slc.origin is not None or is_first:
        lines.append(_Line("empty"))
    lines.extend(body)
    if has_footer or (body and body[-1].kind == "content"):
        lines.append(_Line("empty"))
    return lines


def _render_title(title: Annotation) -> str:
    head = title.annotation_type.display_name
    if title.id is not None:
        head += f"[{title.id}]"
    return f"{head}: {title.label}" if title.label is not None else head


def render(snippet: Snippet) -> str:
    """Render a snippet as plain text, without colour."""
    out: list[str] = []
    if snippet.title is not None:
        out.append(_render_title(snippet.title))

    has_footer = bool(snippet.footer)
    body = [
        line
        for index, slc in enumerate(snippet.slices)
        for line in _format_slice(slc, index == 0, has_footer)
    ]
    width = max((len(str(line.lineno)) for line in body if line.lineno is not None), default=0)
    margin = " " * width

    for line in body:
        if line.kind == "origin":
            out.append(f"{margin}{line.text}")
        elif line.kind == "empty":
            out.append(f"{margin} |")
        elif line.kind == "content":
            text = f" {line.text}" if line.text else ""
            out.append(f"{line.lineno:>{width}} |{text}")
        elif line.kind == "mark":
            out.append(f"{margin} | {line.text}")
        else:
            out.append("...")

    for note in snippet.footer:
        out.append(f"{margin} = {note.annotation_type.display_name}: {note.label or ''}")

    return "\n".join(out)