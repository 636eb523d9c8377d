"""Lint requiring second-level sections to be known and in a fixed order."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import islice

from eipwlint.context import Context, Lint, Node
from eipwlint.snippet import Annotation, AnnotationType, Slice, Snippet


def _heading_text(heading: Node) -> str:
    return "".join(
        child.literal
        for child in islice(heading.descendants(), 1, None)
        if child.kind == "text"
    )


def _level_two_headings(body: Node) -> list[tuple[int, str]]:
    return [
        (node.start_line, _heading_text(node))
        for node in body.descendants()
        if node.kind == "heading" and node.level == 2
    ]


@dataclass(frozen=True)
class SectionOrder(Lint):
    """Only the listed sections may appear, and in the listed order."""

    names: tuple[str, ...]

    def _find_preceding(self, present: Sequence[str], needle: str) -> str | None:
        try:
            needle_idx = self.names.index(needle)
        except ValueError:
            return None
        if needle_idx == 0:
            return None

        for idx in reversed(range(needle_idx)):
            name = self.names[idx]
            if name != needle and name in present:
                return name
        return None

    def lint(self, slug: str, ctx: Context) -> None:
        headings = _level_two_headings(ctx.body)

        unknowns = [
            Slice(source=ctx.line(line_start), line_start=line_start, origin=ctx.origin)
            for line_start, text in headings
            if text not in self.names
        ]
        if unknowns:
            ctx.report(
                Snippet(
                    title=Annotation(ctx.annotation_type, "body has extra section(s)", slug),
                    slices=unknowns,
                )
            )

        lines = {text: line_start for line_start, text in headings}
        present = list(lines)

        max_line = 0
        for name in self.names:
            line_start = lines.get(name)
            if line_start is None:
                continue

            current = max_line
            max_line = line_start
            if max_line >= current:
                continue

            footer = []
            preceding = self._find_preceding(present, name)
            if preceding is not None:
                footer.append(
                    Annotation(
                        AnnotationType.HELP,
                        f"`{name}` should come after `{preceding}`",
                    )
                )

            ctx.report(
                Snippet(
                    title=Annotation(
                        ctx.annotation_type, f"section `{name}` is out of order", slug
                    ),
                    slices=[
                        Slice(
                            source=ctx.line(line_start),
                            line_start=line_start,
                            origin=ctx.origin,
                        )
                    ],
                    footer=footer,
                )
            )