"""
Unit tests for shortit.allocator.strategies.
"""

import re

import pytest

from shortit.allocator.strategies import (
    ALPHABET,
    RandomStrategy,
    SHA256Strategy,
    _base62_encode,
    get_strategy_from_config,
)

BASE62_PATTERN = re.compile(r"^[0-9a-zA-Z]+$")


def test_alphabet_has_62_distinct_symbols():
    assert len(ALPHABET) == 62
    assert len(set(ALPHABET)) == 62


def test_random_strategy_length_charset_and_diversity():
    r = RandomStrategy()
    samples = [r.generate("ignored", length=5) for _ in range(200)]
    assert all(len(x) == 5 and BASE62_PATTERN.match(x) for x in samples)
    assert len(set(samples)) > 150


def test_random_strategy_is_callable_like_a_function():
    assert len(RandomStrategy()("https://a.com", length=7)) == 7


def test_sha256_strategy_stability_and_attempts():
    s = SHA256Strategy()
    url = "https://example.com/path?q=1"

    c0 = s.generate(url, length=5, attempt=0)
    c0b = s.generate(url, length=5, attempt=0)
    c1 = s.generate(url, length=5, attempt=1)

    assert c0 == c0b
    assert c1 != c0
    assert BASE62_PATTERN.match(c0) and len(c0) == 5


@pytest.mark.parametrize("requested,expected", [(1, 4), (5, 5), (100, 32)])
def test_length_is_clamped(requested, expected):
    assert len(RandomStrategy().generate("x", length=requested)) == expected


def test_base62_encode_edges():
    assert _base62_encode(0) == "0"
    assert _base62_encode(61) == "z"
    assert _base62_encode(62) == "10"
    with pytest.raises(ValueError):
        _base62_encode(-1)


@pytest.mark.parametrize(
    "name,cls",
    [("random", RandomStrategy), ("sha256", SHA256Strategy), ("DETERMINISTIC", SHA256Strategy), ("nosuch", RandomStrategy)],
)
def test_get_strategy_from_config(name, cls):
    assert isinstance(get_strategy_from_config(name), cls)
