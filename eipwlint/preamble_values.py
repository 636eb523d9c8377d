"""Lints that check the value of a single preamble header."""

from __future__ import annotations

import datetime
import ipaddress
import re
from dataclasses import dataclass
from pathlib import Path

from eipwlint.context import Context, Lint
from eipwlint.preamble import Field
from eipwlint.snippet import (
    Annotation,
    AnnotationType,
    Slice,
    Snippet,
    SourceAnnotation,
)


def _value_range(field: Field) -> tuple[int, int]:
    start = len(field.name) + 1
    return start, start + len(field.value)


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


# Author ----------------------------------------------------------------------

_AUTHOR_PATTERNS = (
    re.compile(r"[^()<>,@]+ \(@[a-zA-Z\d-]+\)"),  # GitHub username
    re.compile(r"[^()<>,@]+ <[^@][^>]*@[^>]+\.[^>]+>"),  # email address
    re.compile(r"[^()<>,@]+"),  # just a name
)

_AUTHOR_FOOTER = (
    "Try `Random J. User (@username)` for an author with a GitHub username.",
    "Try `Random J. User <test@example.com>` for an author with an email.",
    "Try `Random J. User` for an author without contact information.",
)


@dataclass(frozen=True)
class Author(Lint):
    """Every author must match a known format; one must have a GitHub username."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        has_username = False
        offset = 0
        for item in field.value.split(","):
            current = offset
            offset += len(item) + 1
            trimmed = item.strip()

            matched = [bool(p.fullmatch(trimmed)) for p in _AUTHOR_PATTERNS]
            if any(matched):
                has_username |= matched[0]
                continue

            start = len(field.name) + current + 1
            ctx.report(
                Snippet(
                    title=_title(
                        ctx, slug, "authors in the preamble must match the expected format"
                    ),
                    slices=[
                        _field_slice(
                            ctx,
                            field,
                            [
                                SourceAnnotation(
                                    ctx.annotation_type,
                                    "unrecognized author",
                                    (start, start + len(item)),
                                )
                            ],
                        )
                    ],
                    footer=[Annotation(AnnotationType.HELP, text) for text in _AUTHOR_FOOTER],
                )
            )

        if not has_username:
            ctx.report(
                Snippet(
                    title=_title(
                        ctx,
                        slug,
                        f"preamble header `{self.name}` must contain at least one GitHub username",
                    ),
                    slices=[_field_slice(ctx, field)],
                )
            )


# Date ------------------------------------------------------------------------

_YEAR = re.compile(r"[+-]?[0-9]+")
_TWO_DIGITS = re.compile(r"[0-9]{1,2}")

_PREMATURE = "premature end of input"
_INVALID = "input contains invalid characters"
_OUT_OF_RANGE = "input is out of range"
_TRAILING = "trailing input"


def _date_error(value: str) -> str | None:
    """Parse `value` as YYYY-MM-DD, returning a description of the failure."""
    pos = 0
    parts: list[int] = []
    for index, pattern in enumerate((_YEAR, _TWO_DIGITS, _TWO_DIGITS)):
        if index:
            if pos >= len(value):
                return _PREMATURE
            if value[pos] != "-":
                return _INVALID
            pos += 1
        if pos >= len(value):
            return _PREMATURE
        match = pattern.match(value, pos)
        if match is None:
            return _INVALID
        parts.append(int(match.group()))
        pos = match.end()

    if pos < len(value):
        return _TRAILING

    year, month, day = parts
    try:
        datetime.date(year, month, day)
    except ValueError:
        return _OUT_OF_RANGE
    return None


@dataclass(frozen=True)
class Date(Lint):
    """The header must be a date in the `YYYY-MM-DD` format."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        value = field.value.strip()
        error: str | None = None

        if [len(part) for part in value.split("-")] != [4, 2, 2]:
            error = "invalid length"

        parse_error = _date_error(value)
        if parse_error is not None:
            error = parse_error

        if error is None:
            return

        ctx.report(
            Snippet(
                title=_title(
                    ctx,
                    slug,
                    f"preamble header `{self.name}` is not a date in the `YYYY-MM-DD` format",
                ),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [SourceAnnotation(ctx.annotation_type, error, _value_range(field))],
                    )
                ],
            )
        )


# File name -------------------------------------------------------------------


@dataclass(frozen=True)
class FileName(Lint):
    """The document's file name must be built from a preamble header."""

    name: str
    prefix: str
    suffix: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None or ctx.origin is None:
            return

        file_name = Path(ctx.origin).name
        if not file_name or file_name == "..":
            raise ValueError("origin did not have a file name")

        expected = f"{self.prefix}{field.value.strip()}{self.suffix}"
        if file_name == expected:
            return

        ctx.report(
            Snippet(
                title=_title(
                    ctx, slug, f"file name must reflect the preamble header `{self.name}`"
                ),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [SourceAnnotation(ctx.annotation_type, "this value", _value_range(field))],
                    )
                ],
                footer=[
                    Annotation(
                        AnnotationType.HELP, f"this file's name should be `{expected}`"
                    )
                ],
            )
        )


# Length ----------------------------------------------------------------------


@dataclass(frozen=True)
class Length(Lint):
    """The trimmed header value must fall within the given length bounds."""

    name: str
    min: int | None = None
    max: int | None = None

    def _report(self, slug: str, ctx: Context, field: Field, label: str, mark: str) -> None:
        ctx.report(
            Snippet(
                title=_title(ctx, slug, label),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [SourceAnnotation(ctx.annotation_type, mark, _value_range(field))],
                    )
                ],
            )
        )

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        length = len(field.value.strip())

        if self.max is not None and length > self.max:
            self._report(
                slug,
                ctx,
                field,
                f"preamble header `{self.name}` value is too long (max {self.max})",
                "too long",
            )

        if self.min is not None and length < self.min:
            self._report(
                slug,
                ctx,
                field,
                f"preamble header `{self.name}` value is too short (min {self.min})",
                "too short",
            )


# List ------------------------------------------------------------------------


@dataclass(frozen=True)
class List(Lint):
    """The header must be a comma separated list with single spaces."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        value = field.value.strip()
        if not value:
            return

        missing_space: list[SourceAnnotation] = []
        extra_space: list[SourceAnnotation] = []
        base = len(field.name)

        offset = 0
        for item in value.split(","):
            current = offset
            offset += len(item) + 1

            if not item.strip():
                ctx.report(
                    Snippet(
                        title=_title(
                            ctx, slug, f"preamble header `{self.name}` cannot have empty items"
                        ),
                        slices=[
                            _field_slice(
                                ctx,
                                field,
                                [
                                    SourceAnnotation(
                                        ctx.annotation_type,
                                        "this item is empty",
                                        (base + current + 1, base + current + 2),
                                    )
                                ],
                            )
                        ],
                    )
                )
                continue

            if item.startswith(" "):
                rest = item[1:]
            elif current == 0:
                rest = item
            else:
                missing_space.append(
                    SourceAnnotation(
                        ctx.annotation_type,
                        "missing space",
                        (base + current + 1, base + current + 2),
                    )
                )
                continue

            if rest.strip() == rest:
                continue

            extra_space.append(
                SourceAnnotation(
                    ctx.annotation_type,
                    "extra space",
                    (base + current + 2, base + current + 2 + len(item)),
                )
            )

        if missing_space:
            ctx.report(
                Snippet(
                    title=_title(
                        ctx, slug, "preamble header list items must begin with a space"
                    ),
                    slices=[_field_slice(ctx, field, missing_space)],
                )
            )

        if extra_space:
            ctx.report(
                Snippet(
                    title=_title(ctx, slug, "preamble header list items have extra whitespace"),
                    slices=[_field_slice(ctx, field, extra_space)],
                )
            )


# URL -------------------------------------------------------------------------

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp", "file"})
_FORBIDDEN_HOST_CHARS = frozenset(" \t\n\r\0#%/:<>?@[\\]^|")
_AUTHORITY_END = re.compile(r"[/\\?#]")


def _ipv4_error(host: str) -> str | None:
    labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
    if not labels or not all(label.isascii() and label.isdigit() for label in labels):
        return None
    numbers = [int(label) for label in labels]
    if len(numbers) > 4 or any(n > 255 for n in numbers[:-1]):
        return "invalid IPv4 address"
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        return "invalid IPv4 address"
    return None


def _url_error(value: str) -> str | None:
    """Check `value` as an absolute URL, returning a description of the failure."""
    match = _SCHEME.match(value)
    if match is None:
        return "relative URL without a base"

    scheme = match.group()[:-1].lower()
    if scheme not in _SPECIAL_SCHEMES:
        return None

    rest = value[match.end():].lstrip("/\\")
    authority = _AUTHORITY_END.split(rest, maxsplit=1)[0]
    host_port = authority.rpartition("@")[2]

    bracketed = host_port.startswith("[")
    if bracketed:
        close = host_port.find("]")
        if close < 0:
            return "invalid IPv6 address"
        try:
            ipaddress.IPv6Address(host_port[1:close])
        except ValueError:
            return "invalid IPv6 address"
        host = host_port[: close + 1]
        tail = host_port[close + 1:]
        if tail and not tail.startswith(":"):
            return "invalid port number"
        port = tail[1:] if tail else ""
    else:
        host, _, port = host_port.partition(":")

    if port and (not (port.isascii() and port.isdigit()) or int(port) > 65535):
        return "invalid port number"

    if not host:
        return None if scheme == "file" else "empty host"

    if not bracketed:
        if any(c in _FORBIDDEN_HOST_CHARS for c in host):
            return "invalid domain character"
        return _ipv4_error(host)
    return None


@dataclass(frozen=True)
class Url(Lint):
    """The header must be a valid absolute URL."""

    name: str

    def lint(self, slug: str, ctx: Context) -> None:
        field = ctx.preamble.by_name(self.name)
        if field is None:
            return

        error = _url_error(field.value.strip())
        if error is None:
            return

        ctx.report(
            Snippet(
                title=_title(ctx, slug, f"preamble header `{self.name}` is not a valid URL"),
                slices=[
                    _field_slice(
                        ctx,
                        field,
                        [SourceAnnotation(ctx.annotation_type, error, _value_range(field))],
                    )
                ],
            )
        )