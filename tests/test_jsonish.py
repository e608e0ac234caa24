import pytest

from archfolio.providers.jsonish import parse_json_object, strip_code_fences


def test_fenced_json_is_parsed():
    assert parse_json_object('```json\n{"gridCols": 3}\n```') == {"gridCols": 3}


def test_json_surrounded_by_prose_is_parsed():
    raw = 'Here is your layout: {"layout": {"title": "a } b"}} Hope it helps!'
    assert parse_json_object(raw) == {"layout": {"title": "a } b"}}


def test_strip_code_fences_leaves_plain_text_alone():
    assert strip_code_fences("  plain  ") == "plain"


@pytest.mark.parametrize("raw", [None, "", "   ", "no json here", "{broken"])
def test_unparseable_output_raises_value_error(raw):
    with pytest.raises(ValueError):
        parse_json_object(raw)
