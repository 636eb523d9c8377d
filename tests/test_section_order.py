from eipwlint.context import Context, InnerContext, ListReporter, parse_markdown
from eipwlint.preamble import parse_preamble, split_preamble
from eipwlint.section_order import SectionOrder
from eipwlint.snippet import AnnotationType

NAMES = ("Abstract", "Motivation", "Specification")


def make_ctx(text, annotation_type=AnnotationType.ERROR):
    pre, body = split_preamble(text)
    inner = InnerContext(
        preamble=parse_preamble("eip-1.md", pre),
        source=text,
        body_source=body,
        body=parse_markdown(body, pre.count("\n") + 3),
        origin="eip-1.md",
    )
    reporter = ListReporter()
    ctx = Context(inner=inner, eips={}, reporter=reporter, annotation_type=annotation_type)
    return ctx, reporter


def test_in_order_reports_nothing():
    text = "---\na: b\n---\n\n## Abstract\n\nx\n\n## Motivation\n\ny\n\n## Specification\n\nz\n"
    ctx, reporter = make_ctx(text)
    SectionOrder(NAMES).lint("order", ctx)
    assert reporter.reports == []


def test_extra_section_is_reported():
    text = "---\na: b\n---\n\n## Abstract\n\nx\n\n## Extra\n\ny\n"
    ctx, reporter = make_ctx(text)
    SectionOrder(NAMES).lint("order", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "body has extra section(s)"
    assert snippet.title.id == "order"
    assert [s.source for s in snippet.slices] == ["## Extra"]
    assert ctx.line(snippet.slices[0].line_start) == "## Extra"


def test_out_of_order_section():
    text = (
        "---\na: b\n---\n\n## Abstract\n\nx\n\n## Specification\n\nz\n\n## Motivation\n\ny\n"
    )
    ctx, reporter = make_ctx(text)
    SectionOrder(NAMES).lint("order", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "section `Specification` is out of order"
    assert [f.label for f in snippet.footer] == [
        "`Specification` should come after `Motivation`"
    ]
    assert snippet.slices[0].source == "## Specification"


def test_level_three_headings_are_ignored():
    text = "---\na: b\n---\n\n## Abstract\n\n### Whatever\n\n## Motivation\n"
    ctx, reporter = make_ctx(text)
    SectionOrder(NAMES).lint("order", ctx)
    assert reporter.reports == []


def test_annotation_type_is_used():
    text = "---\na: b\n---\n\n## Nope\n"
    ctx, reporter = make_ctx(text, AnnotationType.WARNING)
    SectionOrder(NAMES).lint("order", ctx)
    assert reporter.reports[0].title.annotation_type is AnnotationType.WARNING