"""
Unit tests for request validation in shortit.schemas.

Custom names are judged by the token they normalize to.
"""

import pydantic
import pytest

from shortit.errors import ValidationError
from shortit.schemas import CreateUrlRequest, UpdateUrlRequest, validate_custom_alias, validate_url


@pytest.mark.parametrize("alias", ["hello", "my alias", "Team-Docs-2024", "  padded name  ", "a" * 64])
def test_custom_alias_accepted(alias):
    assert validate_custom_alias(alias) == alias


@pytest.mark.parametrize(
    "alias,message",
    [
        ("abc", "at least"),
        ("ab     c", "at least"),  # normalizes to "ab-c"
        ("   ", "at least"),
        ("a" * 65, "at most"),
        ("team/docs", "may contain only"),
        ("what?now", "may contain only"),
        ("top#anchor", "may contain only"),
        ("50%off-deal", "may contain only"),
        ("café-menu", "may contain only"),
    ],
)
def test_custom_alias_rejected(alias, message):
    with pytest.raises(ValidationError, match=message):
        validate_custom_alias(alias)


@pytest.mark.parametrize("url", ["https://a.com", "http://a.com/x?y=1", "  https://padded.com  "])
def test_validate_url_accepts(url):
    assert validate_url(url) == url.strip()


@pytest.mark.parametrize("url", ["not-a-url", "ftp://a.com", "https://", ""])
def test_validate_url_rejects(url):
    with pytest.raises(ValidationError):
        validate_url(url)


def test_create_request_rejects_slash_in_custom_name():
    with pytest.raises(pydantic.ValidationError):
        CreateUrlRequest(originalUrl="https://a.com", customName="team/docs")


def test_update_request_allows_empty_fields():
    req = UpdateUrlRequest(originalUrl="", customName="")
    assert (req.originalUrl, req.customName) == ("", "")
