"""Lint requiring linked proposals to be at least as advanced as the linking one."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from eipwlint.context import Context, FetchContext, Lint, Node
from eipwlint.snippet import Annotation, AnnotationType, Slice, Snippet

_EIP_LINK = re.compile(r"(?i)eip-([0-9]+).md$")


def _find_links(body: Node) -> Iterator[tuple[int, Path]]:
    # Directories in the URL are dropped, which also rules out traversal.
    for node in body.descendants():
        if node.kind != "link":
            continue
        match = _EIP_LINK.search(node.url)
        if match is not None:
            yield node.start_line, Path(f"eip-{match.group(1)}.md")


@dataclass(frozen=True)
class LinkStatus(Lint):
    """Proposals linked from the body must not have a less advanced status."""

    status: str
    flow: tuple[tuple[str, ...], ...]

    def _tiers(self) -> dict[str, int]:
        return {
            value: tier
            for tier, values in enumerate(self.flow, start=1)
            for value in values
        }

    def _tier(self, tiers: Mapping[str, int], ctx: Context) -> int:
        field = ctx.preamble.by_name(self.status)
        if field is None:
            return 0
        return tiers.get(field.value.strip(), 0)

    def find_resources(self, ctx: FetchContext) -> None:
        for path in {path for _, path in _find_links(ctx.body)}:
            ctx.fetch(path)

    def lint(self, slug: str, ctx: Context) -> None:
        tiers = self._tiers()
        my_tier = self._tier(tiers, ctx)
        min_tier: float = math.inf

        for start_line, url in _find_links(ctx.body):
            line_slice = Slice(
                source=ctx.line(start_line), line_start=start_line, origin=ctx.origin
            )

            try:
                eip = ctx.eip(url)
            except KeyError:
                raise
            except Exception as exc:
                if ctx.origin is None:
                    raise
                ctx.report(
                    Snippet(
                        title=Annotation(
                            ctx.annotation_type,
                            f"unable to read file `{url}`: {exc}",
                            slug,
                        ),
                        slices=[line_slice],
                    )
                )
                continue

            their_tier = self._tier(tiers, eip)
            min_tier = min(min_tier, their_tier)

            if their_tier >= my_tier:
                continue

            status_field = ctx.preamble.by_name(self.status)
            status_value = (
                status_field.value if status_field is not None else "<missing>"
            ).strip()
            label = (
                f"proposal `{url}` is not stable enough for a "
                f"`{self.status}` of `{status_value}`"
            )

            choices = "`, `".join(sorted(v for v, t in tiers.items() if t <= min_tier))
            footer = []
            if choices:
                footer.append(
                    Annotation(
                        AnnotationType.HELP,
                        f"because of this link, this proposal's `{self.status}` "
                        f"must be one of: `{choices}`",
                    )
                )

            ctx.report(
                Snippet(
                    title=Annotation(ctx.annotation_type, label, slug),
                    slices=[line_slice],
                    footer=footer,
                )
            )