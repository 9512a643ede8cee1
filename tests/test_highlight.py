import pytest

from mpwatch.services.highlight import contains_term, highlight_html, split_highlight


def test_split_marks_case_insensitive_matches():
    segs = split_highlight("Microplastics and microplastic debris", "microplastic")

    matches = [s.text for s in segs if s.is_match]
    assert matches == ["Microplastic", "microplastic"]
    assert "".join(s.text for s in segs) == "Microplastics and microplastic debris"


@pytest.mark.parametrize(
    "term",
    ["(", "a+b", "[PE]", "c.*d", "$5", "x|y", "\\", "?", "^start", "{2}"],
)
def test_regex_metacharacters_match_literally(term: str):
    text = f"before {term} after {term.upper()}"

    segs = split_highlight(text, term)

    assert "".join(s.text for s in segs) == text
    assert any(s.is_match and s.text.lower() == term.lower() for s in segs)
    assert contains_term(text, term)


def test_metacharacter_term_does_not_match_pattern_meaning():
    # "c.*d" must not behave like a wildcard
    assert not contains_term("cabbage and dill", "c.*d")
    assert split_highlight("cabbage and dill", "c.*d")[0].is_match is False


def test_empty_term_returns_plain_text():
    assert split_highlight("some text", "") == split_highlight("some text", None)
    assert all(not s.is_match for s in split_highlight("some text", "   "))
    assert split_highlight("", "term") == []


def test_highlight_html_escapes_and_anchors_first():
    out = highlight_html("<b>PET</b> and pet", "pet", anchor_first=True)

    assert "<b>" not in out
    assert "&lt;b&gt;" in out
    assert out.count("<mark") == 2
    assert out.count('id="first-highlight"') == 1
    assert out.index('id="first-highlight"') < out.index("and")


def test_highlight_html_escapes_term_in_attribute():
    out = highlight_html('say "hi"', '"hi"')

    assert 'data-highlight="&quot;hi&quot;"' in out
