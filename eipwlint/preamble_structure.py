"""Lints that check preamble structure: integers, duplicates, order and references."""

from __future__ import annotations

import enum
import re
from collections.abc import Sequence
from dataclasses import dataclass

from eipwlint.context import Context, Lint, LintError
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
_EIP_MENTION = re.compile(r"(?i)eip-([0-9]+)")


def _parse_u64(text: str) -> int | None:
    """Parse an unsigned 64-bit integer, returning None when it is not one."""
    if not _UINT.fullmatch(text):
        return None
    number = int(text)
    return number if number <= _U64_MAX else None


def _value_range(field: Field) -> tuple[int, int]:
    start = len(field.name) + 1
    return start, start + len(field.value)


def _field_slice(
    ctx: Context, field: Field, annotations: Sequence[SourceAnnotation] = ()
) -> Slice:
    return Slice(
        source=field.source,
        line_start=field.line_start,
        origin=ctx.origin,
        annotations=list(annotations),
    )


def _title(ctx: Context, slug: str, label: str) -> Annotation:
    return Annotation(ctx.annotation_type, label, slug)


# Unsigned integers -----------------------------------------------------------


@dataclass(frozen=True)
class Uint(Lint):
    """The header must be a non-negative integer."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return
        if _parse_u64(field.value.strip()) is not None:
            return

        ctx.report(
            Snippet(
                title=_title(
                    ctx, slug, f"preamble header `{self.name}` must be an unsigned integer"
                ),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [
                            SourceAnnotation(
                                ctx.annotation_type,
                                "not a non-negative integer",
                                _value_range(field),
                            )
                        ],
                    )
                ],
            )
        )


@dataclass(frozen=True)
class UintList(Lint):
    """The header must be an ascending list of non-negative integers."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None or not field.value.strip():
            return

        values: list[int] = []
        not_uint: list[SourceAnnotation] = []
        offset = 0

        # Items are not trimmed here so the offsets line up with the source.
        for item in field.value.split(","):
            current = offset
            offset += len(item) + 1

            number = _parse_u64(item.strip())
            if number is None:
                start = len(field.name) + current + 1
                not_uint.append(
                    SourceAnnotation(
                        ctx.annotation_type,
                        "not a non-negative integer",
                        (start, start + len(item)),
                    )
                )
            else:
                values.append(number)

        if not_uint:
            ctx.report(
                Snippet(
                    title=_title(
                        ctx,
                        slug,
                        f"preamble header `{self.name}` items must be unsigned integers",
                    ),
                    slices=[_field_slice(ctx, field, not_uint)],
                )
            )

        if sorted(values) != values:
            ctx.report(
                Snippet(
                    title=_title(
                        ctx,
                        slug,
                        f"preamble header `{self.name}` items must be sorted in ascending order",
                    ),
                    slices=[_field_slice(ctx, field)],
                )
            )


# Duplicates ------------------------------------------------------------------


@dataclass(frozen=True)
class NoDuplicates(Lint):
    """Each preamble header may appear only once."""

    def lint(self, slug: str, ctx: Context) -> None:
        defined: dict[str, Field] = {}

        for field in ctx.preamble.fields():
            original = defined.setdefault(field.name, field)
            if original is field:
                continue

            ctx.report(
                Snippet(
                    title=_title(
                        ctx,
                        slug,
                        f"preamble header `{original.name}` defined multiple times",
                    ),
                    slices=[
                        _field_slice(
                            ctx,
                            original,
                            [
                                SourceAnnotation(
                                    AnnotationType.INFO,
                                    "first defined here",
                                    (0, len(original.source)),
                                )
                            ],
                        ),
                        _field_slice(
                            ctx,
                            field,
                            [
                                SourceAnnotation(
                                    ctx.annotation_type,
                                    "redefined here",
                                    (0, len(field.source)),
                                )
                            ],
                        ),
                    ],
                )
            )


# Enumerations ----------------------------------------------------------------


@dataclass(frozen=True)
class OneOf(Lint):
    """The trimmed header value must be one of a fixed set."""

    name: str
    values: tuple[str, ...]

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None or field.value.strip() in self.values:
            return

        choices = "`, `".join(self.values)
        ctx.report(
            Snippet(
                title=_title(
                    ctx, slug, f"preamble header `{self.name}` has an unrecognized value"
                ),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [
                            SourceAnnotation(
                                ctx.annotation_type,
                                f"must be one of: `{choices}`",
                                _value_range(field),
                            )
                        ],
                    )
                ],
            )
        )


# Order -----------------------------------------------------------------------


@dataclass(frozen=True)
class Order(Lint):
    """Only known headers may appear, and in the given order."""

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
        unknowns = [
            _field_slice(
                ctx,
                f,
                [
                    SourceAnnotation(
                        ctx.annotation_type, "unrecognized header", (0, len(f.name))
                    )
                ],
            )
            for f in ctx.preamble.fields()
            if f.name not in self.names
        ]

        if unknowns:
            ctx.report(
                Snippet(
                    title=_title(ctx, slug, "preamble has extra header(s)"),
                    slices=unknowns,
                )
            )

        present = [f.name for f in ctx.preamble.fields()]

        max_line = 0
        for name in self.names:
            field = ctx.preamble.by_name(name)
            if field is None:
                continue

            current = max_line
            max_line = field.line_start
            if max_line >= current:
                continue

            footer = []
            preceding = self._find_preceding(present, field.name)
            if preceding is not None:
                footer.append(
                    Annotation(
                        AnnotationType.HELP,
                        f"`{field.name}` should come after `{preceding}`",
                    )
                )

            ctx.report(
                Snippet(
                    title=_title(
                        ctx, slug, f"preamble header `{field.name}` is out of order"
                    ),
                    slices=[_field_slice(ctx, field)],
                    footer=footer,
                )
            )


# Regular expressions ---------------------------------------------------------


class RegexMode(enum.Enum):
    """Whether the pattern must or must not match the header value."""

    INCLUDES = "includes"
    EXCLUDES = "excludes"


@dataclass(frozen=True)
class Regex(Lint):
    """The trimmed header value must (or must not) match a pattern."""

    name: str
    mode: RegexMode
    pattern: str
    message: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise LintError(f"invalid pattern `{self.pattern}`: {exc}") from exc

        matches = compiled.search(field.value.strip()) is not None

        if self.mode is RegexMode.INCLUDES:
            if matches:
                return
            slice_label = "required pattern was not matched"
        else:
            if not matches:
                return
            slice_label = "prohibited pattern was matched"

        ctx.report(
            Snippet(
                title=_title(ctx, slug, self.message),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [SourceAnnotation(ctx.annotation_type, slice_label, _value_range(field))],
                    )
                ],
                footer=[
                    Annotation(
                        AnnotationType.INFO, f"the pattern in question: `{self.pattern}`"
                    )
                ],
            )
        )


# References ------------------------------------------------------------------


@dataclass(frozen=True)
class RequireReferenced(Lint):
    """Proposals mentioned in a header must be listed in the requires header."""

    name: str
    requires: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        requires_field = ctx.preamble.by_name(self.requires)
        requires_txt = requires_field.value if requires_field is not None else ""
        required = {
            number
            for number in (_parse_u64(item.strip()) for item in requires_txt.split(","))
            if number is not None
        }

        missing = [
            m for m in _EIP_MENTION.finditer(field.value) if int(m.group(1)) not in required
        ]
        if not missing:
            return

        base = len(field.name) + 1
        annotations = [
            SourceAnnotation(
                ctx.annotation_type, "mentioned here", (m.start() + base, m.end() + base)
            )
            for m in missing
        ]

        ctx.report(
            Snippet(
                title=_title(
                    ctx,
                    slug,
                    f"proposals mentioned in preamble header `{self.name}` "
                    f"must appear in `{self.requires}`",
                ),
                slices=[_field_slice(ctx, field, annotations)],
            )
        )


# Required headers ------------------------------------------------------------


@dataclass(frozen=True)
class Required(Lint):
    """Every listed header must be present."""

    names: tuple[str, ...]

    def lint(self, slug: str, ctx: Context) -> None:
        missing = [name for name in self.names if ctx.preamble.by_name(name) is None]
        if not missing:
            return

        joined = "`, `".join(missing)
        ctx.report(
            Snippet(
                title=_title(ctx, slug, f"preamble is missing header(s): `{joined}`"),
                slices=[
                    Slice(
                        source=ctx.line(1),
                        line_start=1,
                        origin=ctx.origin,
                        fold=True,
                    )
                ],
            )
        )