from __future__ import annotations

from gifindex.media import (
    derivative_name,
    is_archive_original,
    is_derivative,
    is_identifier_name,
    match_candidate,
    page_name,
    period_key,
)


def test_match_candidate_output_pattern():
    assert match_candidate("output1.GIF") == "output*.GIF"
    assert match_candidate("output_abc.gif") == "output*.gif"
    assert match_candidate("output.GIF") == "output*.GIF"


def test_match_candidate_motion_still_pattern():
    assert match_candidate("Motion-Still_2017.gif") == "Motion-Still*.gif"
    assert match_candidate("Motion-Still_2017.GIF") == "Motion-Still*.GIF"


def test_match_candidate_rejects_other_names():
    assert match_candidate("output1.png") is None
    assert match_candidate("Output1.GIF") is None
    assert match_candidate("motion-still.gif") is None
    assert match_candidate("IMG_0001.gif") is None
    assert match_candidate("output1.Gif") is None


def test_match_candidate_priority_order():
    patterns = ("*.GIF", "output*.GIF")
    assert match_candidate("output1.GIF", patterns) == "*.GIF"


def test_archive_names():
    assert is_archive_original("20240305_100000_abcDEF.gif")
    assert not is_archive_original("20240305_100000_abcDEF-small.gif")
    assert is_derivative("20240305_100000_abcDEF-small.gif")
    assert not is_archive_original("202403.html")
    assert derivative_name("20240305_100000_abcDEF.gif") == "20240305_100000_abcDEF-small.gif"


def test_is_identifier_name():
    assert is_identifier_name("20240305_100000_abcDE9.gif")
    assert not is_identifier_name("20240305_100000_abcDE9-small.gif")
    assert not is_identifier_name("20240305_100000_abc.gif")
    assert not is_identifier_name("funny.gif")
    assert not is_identifier_name("index.html")


def test_period_and_page_name():
    assert period_key("20240305_100000_abcDEF.gif") == "202403"
    assert page_name("202403") == "202403.html"
