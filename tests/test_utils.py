"""Tests for shared helpers."""

from __future__ import annotations

import pytest

from hf_proxy.shared.utils import bearer_token, mask_key


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer hf_abc", "hf_abc"),
        ("bearer   hf_abc ", "hf_abc"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_mask_key_hides_the_middle():
    assert mask_key("hf_abcdefghijkl") == "hf_a...ijkl"
    assert mask_key("short") == "****"
    assert mask_key("") == "<none>"
