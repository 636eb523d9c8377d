"""Parsed documents and the contexts lints run against."""

from __future__ import annotations

import abc
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Union

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from eipwlint.preamble import Preamble
from eipwlint.snippet import AnnotationType, Snippet


class LintError(Exception):
    """A lint could not run to completion."""


class Reporter(abc.ABC):
    """Receives the snippets produced by lints."""

    @abc.abstractmethod
    def report(self, snippet: Snippet) -> None:
        """Accept one diagnostic."""


class ListReporter(Reporter):
    """Collects reported snippets in order."""

    def __init__(self) -> None:
        self.reports: list[Snippet] = []

    def report(self, snippet: Snippet) -> None:
        self.reports.append(snippet)


@dataclass
class Node:
    """A markdown syntax node.

    `kind` is one of: document, heading, paragraph, text, link, image, code,
    code_block, html_block, html_inline, softbreak, linebreak, blockquote,
    list, item, table, table_section, table_row, table_cell,
    thematic_break, emph, strong, strikethrough (or the parser's own name).
    """

    kind: str
    start_line: int
    children: list[Node] = field(default_factory=list)
    literal: str = ""
    url: str = ""
    title: str = ""
    level: int = 0
    info: str = ""

    def descendants(self) -> Iterator[Node]:
        """Yield this node and all nodes below it, depth first."""
        yield self
        for child in self.children:
            yield from child.descendants()


_KINDS = {
    "root": "document",
    "code_inline": "code",
    "fence": "code_block",
    "hardbreak": "linebreak",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
    "thead": "table_section",
    "tbody": "table_section",
    "tr": "table_row",
    "th": "table_cell",
    "td": "table_cell",
    "hr": "thematic_break",
    "em": "emph",
    "s": "strikethrough",
}

_LITERAL_KINDS = {"text", "code_inline", "fence", "code_block", "html_block", "html_inline"}


class _TreeBuilder:
    def __init__(self, offset: int) -> None:
        self._offset = offset
        self._inline_line = 0

    def _make(self, src: SyntaxTreeNode, line: int) -> Node:
        attrs: dict[str, Any] = dict(src.attrs)
        node = Node(kind=_KINDS.get(src.type, src.type), start_line=line)
        if src.type in _LITERAL_KINDS:
            node.literal = src.content
        if src.type == "heading":
            node.level = int(src.tag[1:])
        if src.type == "fence":
            node.info = src.info
        if src.type == "link":
            node.url = str(attrs.get("href", ""))
            node.title = str(attrs.get("title", ""))
        if src.type == "image":
            node.url = str(attrs.get("src", ""))
            node.title = str(attrs.get("title", ""))
        return node

    def block(self, src: SyntaxTreeNode, parent_line: int) -> list[Node]:
        line = src.map[0] + 1 + self._offset if src.map else parent_line
        if src.type == "inline":
            self._inline_line = line
            return [n for child in src.children for n in self.inline(child)]
        node = self._make(src, line)
        node.children = [n for child in src.children for n in self.block(child, line)]
        return [node]

    def inline(self, src: SyntaxTreeNode) -> list[Node]:
        node = self._make(src, self._inline_line)
        if src.type in ("softbreak", "hardbreak"):
            self._inline_line += 1
        elif src.type in _LITERAL_KINDS:
            self._inline_line += src.content.count("\n")
        node.children = [n for child in src.children for n in self.inline(child)]
        return [node]


def parse_markdown(text: str, line_offset: int = 0) -> Node:
    """Parse markdown into a Node tree, shifting line numbers by line_offset."""
    parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    root = SyntaxTreeNode(parser.parse(text))
    root_line = 1 + line_offset
    builder = _TreeBuilder(line_offset)
    document = Node(kind="document", start_line=root_line)
    document.children = [
        n for child in root.children for n in builder.block(child, root_line)
    ]
    return document


@dataclass(frozen=True)
class InnerContext:
    """A parsed document: preamble, body tree and the text they came from."""

    preamble: Preamble
    source: str
    body_source: str
    body: Node
    origin: str | None = None


EipEntry = Union[InnerContext, BaseException]


@dataclass
class Context:
    """What a lint sees while checking one document."""

    inner: InnerContext
    eips: Mapping[Path, EipEntry]
    reporter: Reporter
    annotation_type: AnnotationType = AnnotationType.ERROR

    @property
    def preamble(self) -> Preamble:
        return self.inner.preamble

    @property
    def body(self) -> Node:
        return self.inner.body

    @property
    def body_source(self) -> str:
        return self.inner.body_source

    @property
    def origin(self) -> str | None:
        return self.inner.origin

    def line(self, line: int) -> str:
        """Return the given one-based line of the whole source."""
        if line < 1:
            raise ValueError("line numbers start at one")
        lines = self.inner.source.split("\n")
        if line > len(lines):
            raise IndexError(f"line {line} is past the end of the source")
        return lines[line - 1]

    def source_for_text(self, line: int, text: str) -> str:
        """Return the source lines that hold `text`, starting at `line`."""
        if line < 1:
            raise ValueError("line numbers start at one")
        count = max(1, text.count("\n"))
        lines = self.inner.source.split("\n")
        return "\n".join(lines[line - 1:line - 1 + count])

    def report(self, snippet: Snippet) -> None:
        """Hand a diagnostic to the reporter."""
        try:
            self.reporter.report(snippet)
        except LintError:
            raise
        except Exception as exc:
            raise LintError(f"failed to report diagnostic: {exc}") from exc

    def eip(self, path: str | PathLike[str]) -> Context:
        """Return a context for a fetched document next to this one.

        Raises the error recorded when that document could not be loaded.
        """
        if self.origin is None:
            raise ValueError(
                "lint attempted to access an external resource without having an origin"
            )
        key = Path(self.origin).parent / Path(path)
        try:
            entry = self.eips[key]
        except KeyError:
            raise KeyError(f"no eip found for key `{key}`") from None
        if isinstance(entry, BaseException):
            raise entry
        return Context(
            inner=entry,
            eips=self.eips,
            reporter=self.reporter,
            annotation_type=self.annotation_type,
        )


@dataclass
class FetchContext:
    """What a lint sees while collecting the documents it needs."""

    preamble: Preamble
    body: Node
    eips: set[Path] = field(default_factory=set)

    def fetch(self, path: str | PathLike[str]) -> None:
        """Request a document, relative to the one being checked."""
        self.eips.add(Path(path))


class Lint(abc.ABC):
    """A single check run against a document."""

    def find_resources(self, ctx: FetchContext) -> None:
        """Request any other documents this lint needs; none by default."""

    @abc.abstractmethod
    def lint(self, slug: str, ctx: Context) -> None:
        """Check the document and report problems through ctx."""