from mpwatch.web.markdown import first_heading_id, is_safe_href, markdown_to_html


def test_headings_get_slug_ids():
    out = markdown_to_html("# The Plastic Age\n\n### Where it ends up ###")

    assert '<h1 id="the-plastic-age">The Plastic Age</h1>' in out
    assert '<h3 id="where-it-ends-up">Where it ends up</h3>' in out


def test_paragraph_lines_are_joined():
    assert markdown_to_html("one\ntwo\n\nthree") == "<p>one two</p>\n<p>three</p>"


def test_lists_and_quotes():
    out = markdown_to_html("1. first\n2. second\n\n> quoted *text*\n\n---")

    assert "<ol>\n<li>first</li>\n<li>second</li>\n</ol>" in out
    assert "<blockquote>\n<p>quoted <em>text</em></p>\n</blockquote>" in out
    assert out.endswith("<hr>")


def test_raw_html_is_escaped():
    out = markdown_to_html("<script>alert(1)</script> and `<b>`")

    assert "<script>" not in out
    assert "<code>&lt;b&gt;</code>" in out


def test_only_safe_links_are_kept():
    out = markdown_to_html("[report](https://example.org/r.pdf) [bad](javascript:alert(1))")

    assert '<a href="https://example.org/r.pdf">report</a>' in out
    assert "javascript:" not in out
    assert "bad" in out


def test_heading_ids_are_unique_and_avoid_reserved():
    out = markdown_to_html("## Notes\n\n## Notes\n\n# Intro", reserved_ids=["intro"])

    assert '<h2 id="notes">' in out
    assert '<h2 id="notes-2">' in out
    assert '<h1 id="intro-2">' in out


def test_first_heading_id():
    assert first_heading_id("\n# Foreword\n\ntext") == "foreword"
    assert first_heading_id("text first\n# Foreword") is None
    assert first_heading_id("") is None


def test_is_safe_href():
    assert is_safe_href("https://example.org")
    assert is_safe_href("/story/1")
    assert not is_safe_href("javascript:alert(1)")
    assert not is_safe_href("data:text/html,hi")
    assert not is_safe_href(None)
