from __future__ import annotations

import pytest

from eaglenet._collections import HTTPHeaderDict


@pytest.fixture()
def d() -> HTTPHeaderDict:
    header_dict = HTTPHeaderDict(Cookie="foo")
    header_dict.add("cookie", "bar")
    return header_dict


class TestHTTPHeaderDict:
    def test_create_from_kwargs(self) -> None:
        h = HTTPHeaderDict(ab="1", cd="2", ef="3", gh="4")
        assert len(h) == 4
        assert "ab" in h

    def test_create_from_dict(self) -> None:
        h = HTTPHeaderDict(dict(ab="1", cd="2", ef="3", gh="4"))
        assert len(h) == 4
        assert "ab" in h

    def test_create_from_iterator(self) -> None:
        teststr = "eaglenetontherocks"
        h = HTTPHeaderDict((c, c * 5) for c in teststr)
        assert len(h) == len(set(teststr))

    def test_create_from_list(self) -> None:
        headers = [
            ("ab", "A"),
            ("cd", "B"),
            ("cookie", "C"),
            ("cookie", "D"),
            ("cookie", "E"),
        ]
        h = HTTPHeaderDict(headers)
        assert len(h) == 3
        assert "ab" in h
        clist = h.getlist("cookie")
        assert len(clist) == 3
        assert clist[0] == "C"
        assert clist[-1] == "E"

    def test_create_from_headerdict(self, d: HTTPHeaderDict) -> None:
        h = HTTPHeaderDict(d)
        assert h == d
        assert h is not d
        h.add("cookie", "baz")
        assert d.getlist("cookie") == ["foo", "bar"]

    def test_setitem(self, d: HTTPHeaderDict) -> None:
        d["Cookie"] = "foo"
        assert d["cookie"] == "foo"
        d["cookie"] = "with, comma"
        assert d.getlist("cookie") == ["with, comma"]

    def test_case_insensitive(self, d: HTTPHeaderDict) -> None:
        assert "COOKIE" in d
        assert "Content-Type" not in d
        assert 1 not in d  # type: ignore[comparison-overlap]

    def test_getitem_merges(self, d: HTTPHeaderDict) -> None:
        assert d["cookie"] == "foo, bar"

    def test_delitem(self, d: HTTPHeaderDict) -> None:
        del d["COOKIE"]
        assert "cookie" not in d
        with pytest.raises(KeyError):
            del d["cookie"]

    def test_keys_keep_first_case(self, d: HTTPHeaderDict) -> None:
        assert list(d) == ["Cookie"]

    def test_iteritems(self, d: HTTPHeaderDict) -> None:
        assert list(d.iteritems()) == [("Cookie", "foo"), ("Cookie", "bar")]

    def test_itermerged(self, d: HTTPHeaderDict) -> None:
        assert list(d.itermerged()) == [("Cookie", "foo, bar")]

    def test_getlist_missing(self, d: HTTPHeaderDict) -> None:
        assert d.getlist("missing") == []

    def test_extend_rejects_many_args(self, d: HTTPHeaderDict) -> None:
        with pytest.raises(TypeError):
            d.extend({}, {})  # type: ignore[call-arg]

    def test_equal(self, d: HTTPHeaderDict) -> None:
        assert d == {"cookie": "foo, bar"}
        assert d != {"cookie": "foo"}
        assert d != 1

    def test_copy(self, d: HTTPHeaderDict) -> None:
        clone = d.copy()
        clone["X"] = "1"
        assert "X" not in d
        assert clone.getlist("cookie") == ["foo", "bar"]

    def test_repr(self, d: HTTPHeaderDict) -> None:
        assert repr(d) == "HTTPHeaderDict({'Cookie': 'foo, bar'})"
