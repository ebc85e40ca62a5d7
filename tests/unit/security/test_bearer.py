import pytest

from cachegate.security.bearer import BearerTokenAuth, extract_bearer_token


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
        ("  Bearer   abc  ", "abc"),
        ("Bearer", None),
        ("Bearer a b", None),
        ("Basic abc", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_empty_configured_token_rejected():
    with pytest.raises(ValueError):
        BearerTokenAuth("")
