"""Lints that relate preamble headers to each other or to other proposals."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from eipwlint.context import Context, FetchContext, Lint
from eipwlint.preamble import Field
from eipwlint.snippet import (
    Annotation,
    AnnotationType,
    Slice,
    Snippet,
    SourceAnnotation,
)

_U64_MAX = 2**64 - 1
_UINT = re.compile(r"\+?[0-9]+")


def _parse_u64(text: str) -> int | None:
    """Parse an unsigned 64-bit integer, returning None when it is not one."""
    if not _UINT.fullmatch(text):
        return None
    number = int(text)
    return number if number <= _U64_MAX else None


def _eip_file(number: int) -> Path:
    return Path(f"eip-{number}.md")


def _field_slice(
    ctx: Context, field: Field, annotations: list[SourceAnnotation] | None = None
) -> Slice:
    return Slice(
        source=field.source,
        line_start=field.line_start,
        origin=ctx.origin,
        annotations=list(annotations or []),
    )


def _title(ctx: Context, slug: str, label: str) -> Annotation:
    return Annotation(ctx.annotation_type, label, slug)


# Conditionally required headers ----------------------------------------------


@dataclass(frozen=True)
class RequiredIfEq(Lint):
    """Header `then` must be present exactly when header `when` equals `equals`."""

    when: str
    equals: str
    then: str

    def lint(self, slug: str, ctx: Context) -> None:
        when = ctx.preamble.by_name(self.when)
        then = ctx.preamble.by_name(self.then)

        if when is None and then is None:
            return

        if when is not None:
            is_equal = when.value.strip() == self.equals
            if is_equal == (then is not None):
                return

        only_allowed = (
            f"preamble header `{self.then}` is only allowed when "
            f"`{self.when}` is `{self.equals}`"
        )

        if when is not None and then is None:
            label = (
                f"preamble header `{self.then}` is required when "
                f"`{self.when}` is `{self.equals}`"
            )
            slices = [
                _field_slice(
                    ctx,
                    when,
                    [
                        SourceAnnotation(
                            AnnotationType.INFO, "defined here", (0, len(when.source))
                        )
                    ],
                )
            ]
        elif when is not None and then is not None:
            label = only_allowed
            slices = sorted(
                [
                    _field_slice(
                        ctx,
                        when,
                        [
                            SourceAnnotation(
                                AnnotationType.INFO,
                                f"unless equal to `{self.equals}`",
                                (0, len(when.source)),
                            )
                        ],
                    ),
                    _field_slice(
                        ctx,
                        then,
                        [
                            SourceAnnotation(
                                ctx.annotation_type, "remove this", (0, len(then.source))
                            )
                        ],
                    ),
                ],
                key=lambda s: s.line_start,
            )
        else:
            assert then is not None
            label = only_allowed
            slices = [
                _field_slice(
                    ctx,
                    then,
                    [
                        SourceAnnotation(
                            ctx.annotation_type, "defined here", (0, len(then.source))
                        )
                    ],
                )
            ]

        ctx.report(Snippet(title=_title(ctx, slug, label), slices=slices))


# Whitespace ------------------------------------------------------------------


@dataclass(frozen=True)
class Trim(Lint):
    """Header values must begin with one space and carry no extra whitespace."""

    def lint(self, slug: str, ctx: Context) -> None:
        no_space: list[Field] = []

        for field in ctx.preamble.fields():
            value = field.value
            if not value:
                continue

            if value.startswith(" "):
                value = value[1:]
            else:
                no_space.append(field)

            if value.strip() == value:
                continue

            start = len(field.name) + 1
            ctx.report(
                Snippet(
                    title=_title(
                        ctx, slug, f"preamble header `{field.name}` has extra whitespace"
                    ),
                    slices=[
                        _field_slice(
                            ctx,
                            field,
                            [
                                SourceAnnotation(
                                    ctx.annotation_type,
                                    "value has extra whitespace",
                                    (start, start + len(field.value)),
                                )
                            ],
                        )
                    ],
                )
            )

        if no_space:
            slices = [
                _field_slice(
                    ctx,
                    field,
                    [
                        SourceAnnotation(
                            ctx.annotation_type,
                            "space required here",
                            (len(field.name) + 1, len(field.name) + 2),
                        )
                    ],
                )
                for field in no_space
            ]
            ctx.report(
                Snippet(
                    title=_title(
                        ctx, slug, "preamble header values must begin with a space"
                    ),
                    slices=slices,
                )
            )


# Status of required proposals ------------------------------------------------


@dataclass(frozen=True)
class RequiresStatus(Lint):
    """Required proposals must be at least as advanced as the requiring one."""

    requires: str
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
        field = ctx.preamble.by_name(self.requires)
        if field is None:
            return
        for item in field.value.split(","):
            number = _parse_u64(item.strip())
            if number is not None:
                ctx.fetch(_eip_file(number))

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.requires)
        if field is None:
            return

        tiers = self._tiers()
        my_tier = self._tier(tiers, ctx)
        too_unstable: list[SourceAnnotation] = []
        min_tier: float = math.inf

        offset = 0
        for item in field.value.split(","):
            current = offset
            offset += len(item) + 1

            number = _parse_u64(item.strip())
            if number is None:
                continue
            key = _eip_file(number)
            item_range = (
                len(field.name) + current + 1,
                len(field.name) + current + 1 + len(item),
            )

            try:
                eip = ctx.eip(key)
            except KeyError:
                raise
            except Exception as exc:
                if ctx.origin is None:
                    raise
                ctx.report(
                    Snippet(
                        title=_title(ctx, slug, f"unable to read file `{key}`: {exc}"),
                        slices=[
                            _field_slice(
                                ctx,
                                field,
                                [
                                    SourceAnnotation(
                                        ctx.annotation_type,
                                        "required from here",
                                        item_range,
                                    )
                                ],
                            )
                        ],
                    )
                )
                continue

            their_tier = self._tier(tiers, eip)
            min_tier = min(min_tier, their_tier)

            if their_tier >= my_tier:
                continue

            too_unstable.append(
                SourceAnnotation(
                    ctx.annotation_type, "has a less advanced status", item_range
                )
            )

        if not too_unstable:
            return

        status_field = ctx.preamble.by_name(self.status)
        status_value = (
            status_field.value if status_field is not None else "<missing>"
        ).strip()
        label = (
            f"preamble header `{self.requires}` contains items not stable enough "
            f"for a `{self.status}` of `{status_value}`"
        )

        choices = "`, `".join(sorted(v for v, t in tiers.items() if t <= min_tier))
        footer = []
        if choices:
            footer.append(
                Annotation(
                    AnnotationType.HELP,
                    f"valid `{self.status}` values for this proposal are: `{choices}`",
                )
            )

        ctx.report(
            Snippet(
                title=_title(ctx, slug, label),
                slices=[_field_slice(ctx, field, too_unstable)],
                footer=footer,
            )
        )