"""Lint requiring certain second-level sections in the body."""

from __future__ import annotations

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


@dataclass(frozen=True)
class SectionRequired(Lint):
    """Each listed section must appear as a second-level heading."""

    names: tuple[str, ...]

    def lint(self, slug: str, ctx: Context) -> None:
        headings = {
            _heading_text(node)
            for node in ctx.body.descendants()
            if node.kind == "heading" and node.level == 2
        }

        missing = [name for name in self.names if name not in headings]
        if not missing:
            return

        joined = "`, `".join(missing)
        ctx.report(
            Snippet(
                title=Annotation(
                    ctx.annotation_type,
                    f"body is missing section(s): `{joined}`",
                    slug,
                ),
                slices=[
                    Slice(
                        source=ctx.body_source,
                        line_start=ctx.body.start_line,
                        origin=ctx.origin,
                        fold=True,
                    )
                ],
                footer=[
                    Annotation(
                        AnnotationType.HELP,
                        "must be at the second level (`## Heading`)",
                    )
                ],
            )
        )