# eipwlint

`eipwlint` holds the pieces for checking Ethereum Improvement Proposal
documents. A proposal is a Markdown file that opens with a preamble between
two `---` lines, followed by the body. The package splits and parses such a
document, turns the body into a syntax tree, and provides lint classes that
report problems as structured diagnostics ("snippets") that can be rendered
as text in the style of a compiler message:

```text
error[preamble-requires-status]: preamble header `requires` contains items not stable enough for a `status` of `Last Call`
  --> tests/eips/eip-1000.md:12:10
   |
12 | requires: 20
   |          ^^^ has a less advanced status
   |
   = help: valid `status` values for this proposal are: `Draft`, `Stagnant`
```

## Modules

- `eipwlint.snippet`: `AnnotationType`, `Annotation`, `SourceAnnotation`,
  `Slice` and `Snippet`. `Snippet.to_dict()` gives a JSON-compatible
  dictionary; `render(snippet)` gives the plain-text form shown above.
- `eipwlint.preamble`: `split_preamble(text)` returns the preamble text and
  the body text, or raises `MissingStart`, `MissingEnd` or `LeadingGarbage`
  (all subclasses of `SplitError`). `parse_preamble(origin, text)` returns a
  `Preamble` of `Field`s (`line_start`, `source`, `name`, `value`), or raises
  `ParseErrors`, whose `errors` list holds one snippet per line lacking `:`.
  `Preamble.fields()` yields every field in order, duplicates included;
  `by_name` returns the last field of that name; `by_index` the field at a
  position.
- `eipwlint.fetch`: `Fetch` is the abstract reader of referenced documents
  (`async fetch(path)`). `FileFetch` reads UTF-8 files from disk;
  `NullFetch` raises `io.UnsupportedOperation` for every path.
- `eipwlint.context`: `parse_markdown(text, line_offset)` builds a tree of
  `Node`s (CommonMark plus tables and strikethrough) whose line numbers are
  shifted by `line_offset`. `InnerContext` bundles a parsed document.
  `Context` is what a lint checks; `FetchContext` is what a lint uses to ask
  for other documents. `Reporter` receives snippets; `ListReporter` keeps
  them in its `reports` list. `Lint` is the base class of every check.
  Errors raised by a reporter reach the caller as `LintError`.

## Lints

Each lint is a frozen dataclass with `lint(slug, ctx)`; the slug becomes the
id in the snippet title, and the title takes `ctx.annotation_type` as its
level.

- `eipwlint.preamble_values`: `Author`, `Date`, `FileName`, `Length`,
  `List`, `Url`.
- `eipwlint.preamble_structure`: `Uint`, `UintList`, `NoDuplicates`,
  `OneOf`, `Order`, `Regex` (with `RegexMode.INCLUDES` or
  `RegexMode.EXCLUDES`; an invalid pattern raises `LintError`),
  `RequireReferenced`, `Required`.
- `eipwlint.preamble_relations`: `RequiredIfEq`, `Trim`, `RequiresStatus`.
- `eipwlint.section_required`: `SectionRequired`.
- `eipwlint.section_order`: `SectionOrder`.
- `eipwlint.link_status`: `LinkStatus`.

## Checking a document

```python
from eipwlint.context import Context, InnerContext, ListReporter, parse_markdown
from eipwlint.preamble import parse_preamble, split_preamble
from eipwlint.preamble_structure import Required
from eipwlint.snippet import render

source = "---\neip: 1\ntitle: Example\n---\n\n## Abstract\n"
preamble_text, body_text = split_preamble(source)
preamble = parse_preamble("eip-1.md", preamble_text)

# The body starts after the preamble lines and both `---` lines.
body = parse_markdown(body_text, preamble_text.count("\n") + 3)

inner = InnerContext(
    preamble=preamble,
    source=source,
    body_source=body_text,
    body=body,
    origin="eip-1.md",
)
reporter = ListReporter()
ctx = Context(inner=inner, eips={}, reporter=reporter)

Required(("eip", "title", "description")).lint("preamble-req", ctx)

for snippet in reporter.reports:
    print(render(snippet))
```

## Lints that read other proposals

`RequiresStatus` and `LinkStatus` compare this proposal's status with that of
the proposals it requires or links to. Before linting, call their
`find_resources(FetchContext(preamble=..., body=...))`; the context's `eips`
set then holds the file names wanted (such as `eip-20.md`). Read each one
(for instance with `FileFetch`), parse it into an `InnerContext`, and pass a
mapping to `Context(eips=...)` keyed by `Path(origin).parent / name`. A value
may also be the exception met while reading that file; the lint then reports
`unable to read file ...` instead of comparing statuses. `Context.eip`
raises `ValueError` when the document has no origin and `KeyError` when a
file was never put in the mapping.

## What the package does not do

There is no command-line program and no single call that lints a file from
start to finish. The package has no built-in list of lints with their slugs
and settings, and nothing that reads the files, gathers the referenced
proposals, runs each lint and collects the results: that wiring, as in the
example above, is left to the caller.

## Running the tests

Install the package with its `test` extra, then run `pytest` from the project
root.