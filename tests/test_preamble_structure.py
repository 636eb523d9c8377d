import pytest

from eipwlint.context import (
    Context,
    InnerContext,
    LintError,
    ListReporter,
    parse_markdown,
)
from eipwlint.preamble import parse_preamble, split_preamble
from eipwlint.preamble_structure import (
    NoDuplicates,
    OneOf,
    Order,
    Regex,
    RegexMode,
    RequireReferenced,
    Required,
    Uint,
    UintList,
)
from eipwlint.snippet import AnnotationType


def make_ctx(preamble_text, annotation_type=AnnotationType.ERROR, origin="eip-1.md"):
    source = f"---\n{preamble_text}\n---\n\nSome body text.\n"
    pre_src, body_src = split_preamble(source)
    preamble = parse_preamble(origin, pre_src)
    body = parse_markdown(body_src, pre_src.count("\n") + 3)
    inner = InnerContext(
        preamble=preamble,
        source=source,
        body_source=body_src,
        body=body,
        origin=origin,
    )
    reporter = ListReporter()
    ctx = Context(inner=inner, eips={}, reporter=reporter, annotation_type=annotation_type)
    return ctx, reporter


def marked(snippet_slice, annotation):
    start, end = annotation.range
    return snippet_slice.source[start:end]


# Uint ------------------------------------------------------------------------


@pytest.mark.parametrize("value", ["1", " 1000", "+5", "18446744073709551615"])
def test_uint_accepts(value):
    ctx, reporter = make_ctx(f"eip:{value}")
    Uint("eip").lint("preamble-eip", ctx)
    assert reporter.reports == []


@pytest.mark.parametrize("value", [" abc", " -1", " 1.5", " ", " 18446744073709551616"])
def test_uint_rejects(value):
    ctx, reporter = make_ctx(f"eip:{value}")
    Uint("eip").lint("preamble-eip", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble header `eip` must be an unsigned integer"
    assert snippet.title.id == "preamble-eip"
    slc = snippet.slices[0]
    assert slc.annotations[0].label == "not a non-negative integer"
    assert marked(slc, slc.annotations[0]) == value


def test_uint_missing_header_is_ignored():
    ctx, reporter = make_ctx("title: hello")
    Uint("eip").lint("preamble-eip", ctx)
    assert reporter.reports == []


# UintList --------------------------------------------------------------------


def test_uint_list_valid():
    ctx, reporter = make_ctx("requires: 1, 20, 300")
    UintList("requires").lint("preamble-uint-requires", ctx)
    assert reporter.reports == []


def test_uint_list_not_integer():
    ctx, reporter = make_ctx("requires: 1, x, 3")
    UintList("requires").lint("preamble-uint-requires", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble header `requires` items must be unsigned integers"
    slc = snippet.slices[0]
    assert [marked(slc, a) for a in slc.annotations] == [" x"]


def test_uint_list_unsorted():
    ctx, reporter = make_ctx("requires: 30, 1")
    UintList("requires").lint("preamble-uint-requires", ctx)
    labels = [s.title.label for s in reporter.reports]
    assert labels == ["preamble header `requires` items must be sorted in ascending order"]
    assert reporter.reports[0].slices[0].annotations == []


def test_uint_list_empty_value_ignored():
    ctx, reporter = make_ctx("requires:  ")
    UintList("requires").lint("preamble-uint-requires", ctx)
    assert reporter.reports == []


# NoDuplicates ----------------------------------------------------------------


def test_no_duplicates_reports_redefinition():
    ctx, reporter = make_ctx("title: a\neip: 1\ntitle: b")
    NoDuplicates().lint("preamble-no-dup", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble header `title` defined multiple times"
    first, second = snippet.slices
    assert first.source == "title: a"
    assert second.source == "title: b"
    assert first.line_start < second.line_start
    assert first.annotations[0].label == "first defined here"
    assert first.annotations[0].annotation_type is AnnotationType.INFO
    assert second.annotations[0].label == "redefined here"
    assert marked(second, second.annotations[0]) == "title: b"


def test_no_duplicates_clean():
    ctx, reporter = make_ctx("title: a\neip: 1")
    NoDuplicates().lint("preamble-no-dup", ctx)
    assert reporter.reports == []


# OneOf -----------------------------------------------------------------------


def test_one_of_accepts_trimmed_value():
    ctx, reporter = make_ctx("status:  Final ")
    OneOf("status", ("Draft", "Final")).lint("preamble-enum-status", ctx)
    assert reporter.reports == []


def test_one_of_rejects():
    ctx, reporter = make_ctx("status: Bogus", annotation_type=AnnotationType.WARNING)
    OneOf("status", ("Draft", "Final")).lint("preamble-enum-status", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble header `status` has an unrecognized value"
    assert snippet.title.annotation_type is AnnotationType.WARNING
    annotation = snippet.slices[0].annotations[0]
    assert annotation.label == "must be one of: `Draft`, `Final`"
    assert marked(snippet.slices[0], annotation) == " Bogus"


# Order -----------------------------------------------------------------------


def test_order_correct():
    ctx, reporter = make_ctx("eip: 1\ntitle: x\nauthor: y")
    Order(("eip", "title", "author")).lint("preamble-order", ctx)
    assert reporter.reports == []


def test_order_unknown_and_out_of_order():
    ctx, reporter = make_ctx("title: x\neip: 1\nfoo: y")
    Order(("eip", "title", "author")).lint("preamble-order", ctx)
    assert len(reporter.reports) == 2

    unknown = reporter.reports[0]
    assert unknown.title.label == "preamble has extra header(s)"
    slc = unknown.slices[0]
    assert slc.source == "foo: y"
    assert slc.annotations[0].label == "unrecognized header"
    assert marked(slc, slc.annotations[0]) == "foo"

    out_of_order = reporter.reports[1]
    assert out_of_order.title.label == "preamble header `title` is out of order"
    assert [a.label for a in out_of_order.footer] == ["`title` should come after `eip`"]
    assert out_of_order.slices[0].source == "title: x"


# Regex -----------------------------------------------------------------------


def test_regex_excludes_matched():
    ctx, reporter = make_ctx("title: Hello: World")
    lint = Regex(
        name="title",
        mode=RegexMode.EXCLUDES,
        pattern=":",
        message="preamble header `title` should not contain `:`",
    )
    lint.lint("preamble-re-title-colon", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble header `title` should not contain `:`"
    assert snippet.slices[0].annotations[0].label == "prohibited pattern was matched"
    assert [a.label for a in snippet.footer] == ["the pattern in question: `:`"]


def test_regex_excludes_not_matched():
    ctx, reporter = make_ctx("title: Hello World")
    Regex("title", RegexMode.EXCLUDES, ":", "msg").lint("slug", ctx)
    assert reporter.reports == []


def test_regex_includes():
    pattern = "^https://ethereum-magicians.org/"
    good, good_reporter = make_ctx("discussions-to: https://ethereum-magicians.org/t/1")
    Regex("discussions-to", RegexMode.INCLUDES, pattern, "msg").lint("slug", good)
    assert good_reporter.reports == []

    bad, bad_reporter = make_ctx("discussions-to: https://example.com/t/1")
    Regex("discussions-to", RegexMode.INCLUDES, pattern, "msg").lint("slug", bad)
    assert len(bad_reporter.reports) == 1
    annotation = bad_reporter.reports[0].slices[0].annotations[0]
    assert annotation.label == "required pattern was not matched"


def test_regex_case_insensitive_pattern():
    ctx, reporter = make_ctx("title: A Standardized Thing")
    Regex("title", RegexMode.EXCLUDES, r"(?i)standar\w*\b", "msg").lint("slug", ctx)
    assert len(reporter.reports) == 1


def test_regex_invalid_pattern():
    ctx, _ = make_ctx("title: anything")
    with pytest.raises(LintError):
        Regex("title", RegexMode.EXCLUDES, "(", "msg").lint("slug", ctx)


# RequireReferenced -----------------------------------------------------------


def test_require_referenced_missing():
    ctx, reporter = make_ctx("title: See EIP-20 and eip-1\nrequires: 1")
    RequireReferenced(name="title", requires="requires").lint("slug", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == (
        "proposals mentioned in preamble header `title` must appear in `requires`"
    )
    slc = snippet.slices[0]
    assert [marked(slc, a) for a in slc.annotations] == ["EIP-20"]
    assert slc.annotations[0].label == "mentioned here"


def test_require_referenced_all_present():
    ctx, reporter = make_ctx("title: EIP-20 and EIP-1\nrequires: 1, 20")
    RequireReferenced("title", "requires").lint("slug", ctx)
    assert reporter.reports == []


def test_require_referenced_without_requires():
    ctx, reporter = make_ctx("description: builds on eip-7")
    RequireReferenced("description", "requires").lint("slug", ctx)
    slc = reporter.reports[0].slices[0]
    assert [marked(slc, a) for a in slc.annotations] == ["eip-7"]


# Required --------------------------------------------------------------------


def test_required_missing():
    ctx, reporter = make_ctx("a: 1")
    Required(("a", "b", "c")).lint("preamble-req", ctx)
    assert len(reporter.reports) == 1
    snippet = reporter.reports[0]
    assert snippet.title.label == "preamble is missing header(s): `b`, `c`"
    slc = snippet.slices[0]
    assert slc.fold is True
    assert slc.line_start == 1
    assert slc.source == "---"
    assert slc.origin == "eip-1.md"


def test_required_all_present():
    ctx, reporter = make_ctx("a: 1\nb: 2")
    Required(("a", "b")).lint("preamble-req", ctx)
    assert reporter.reports == []