import pytest

from api_normalizer.exceptions import JsonPathError, NormalizerError
from api_normalizer.mapping.jsonpath import compile_path, query

DATA = {
    "title": "Example",
    "meta": {"version": "v1", "a.b": 1},
    "items": [{"name": "first", "tags": ["x"]}, {"name": "second"}, {"id": 3}],
}


class TestQuery:
    def test_root(self):
        assert query(DATA, "$") == [DATA]

    def test_member(self):
        assert query(DATA, "$.title") == ["Example"]
        assert query(DATA, "$.meta.version") == ["v1"]

    def test_quoted_member(self):
        assert query(DATA, "$.meta['a.b']") == [1]
        assert query(DATA, '$["title"]') == ["Example"]

    def test_index(self):
        assert query(DATA, "$.items[0].name") == ["first"]
        assert query(DATA, "$.items[-1].id") == [3]

    def test_index_out_of_range(self):
        assert query(DATA, "$.items[7]") == []

    def test_list_wildcard_skips_missing(self):
        assert query(DATA, "$.items[*].name") == ["first", "second"]

    def test_mapping_wildcard(self):
        assert query({"a": 1, "b": 2}, "$.*") == [1, 2]

    def test_nested_wildcards(self):
        assert query(DATA, "$.items[*].tags[*]") == ["x"]

    def test_missing_path(self):
        assert query(DATA, "$.missing") == []
        assert query(DATA, "$.title.deeper") == []

    def test_wrong_container_kinds(self):
        assert query(DATA, "$.meta[0]") == []
        assert query(DATA, "$.items.name") == []

    def test_list_root(self):
        assert query([{"a": 1}, {"a": 2}], "$[*].a") == [1, 2]


class TestCompile:
    def test_steps(self):
        assert compile_path("$.a[2][*].b") == (("key", "a"), ("index", 2), ("wildcard", None), ("key", "b"))

    @pytest.mark.parametrize("expression", ["title", "$..title", "$.a[?(@.x)]", "$.a[1:2]", "$.a.", "$ .a"])
    def test_unsupported(self, expression):
        with pytest.raises(JsonPathError) as exc_info:
            compile_path(expression)
        assert exc_info.value.expression == expression

    def test_error_is_a_normalizer_error(self):
        with pytest.raises(NormalizerError):
            query(DATA, "$..x")
