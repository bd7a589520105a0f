"""Tests for field descriptors and argument validation."""

from __future__ import annotations

import pytest

from cityquest_mcp import schema as s
from cityquest_mcp.errors import ValidationError

FIELDS: dict[str, s.Field] = {
    "playerName": s.string("Player", min_length=1),
    "score": s.number(),
    "progress": s.number(minimum=0, maximum=100, optional=True),
    "badges": s.array(s.string(), max_items=3, optional=True),
    "operation": s.enum(("+", "-"), optional=True),
    "done": s.boolean(optional=True),
    "link": s.url(optional=True),
}


class TestValidate:
    def test_accepts_valid(self) -> None:
        args = {
            "playerName": "Rae",
            "score": 10,
            "progress": 50.5,
            "badges": ["a", "b"],
            "operation": "+",
            "done": False,
            "link": "https://cityquest.example/x",
        }
        assert s.validate("tool", FIELDS, args) == args

    def test_none_counts_as_absent(self) -> None:
        result = s.validate("tool", FIELDS, {"playerName": "Rae", "score": 1, "progress": None})
        assert "progress" not in result

    def test_unknown_keys_dropped(self) -> None:
        result = s.validate("tool", FIELDS, {"playerName": "Rae", "score": 1, "extra": 3})
        assert result == {"playerName": "Rae", "score": 1}

    def test_collects_every_violation(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            s.validate("update-score", FIELDS, {"score": "ten", "operation": "%"})
        assert excinfo.value.fields == ["playerName", "score", "operation"]
        assert excinfo.value.tool == "update-score"
        assert "playerName: required" in str(excinfo.value)

    def test_missing_arguments(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            s.validate("tool", FIELDS, None)
        assert excinfo.value.fields == ["playerName", "score"]

    def test_non_mapping_arguments(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            s.validate("tool", FIELDS, ["Rae"])  # type: ignore[arg-type]
        assert excinfo.value.fields == ["arguments"]

    def test_huge_integers_are_numbers(self) -> None:
        result = s.validate("tool", FIELDS, {"playerName": "Rae", "score": 10**400})
        assert result["score"] == 10**400

    def test_huge_integer_out_of_range(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            s.validate("tool", FIELDS, {"playerName": "Rae", "score": 1, "progress": 10**400})
        assert excinfo.value.fields == ["progress"]

    @pytest.mark.parametrize(
        ("args", "field"),
        [
            ({"playerName": "", "score": 1}, "playerName"),
            ({"playerName": "Rae", "score": True}, "score"),
            ({"playerName": "Rae", "score": float("nan")}, "score"),
            ({"playerName": "Rae", "score": 1, "progress": 101}, "progress"),
            ({"playerName": "Rae", "score": 1, "progress": -1}, "progress"),
            ({"playerName": "Rae", "score": 1, "badges": "a"}, "badges"),
            ({"playerName": "Rae", "score": 1, "badges": ["a", "b", "c", "d"]}, "badges"),
            ({"playerName": "Rae", "score": 1, "badges": ["a", 2]}, "badges[1]"),
            ({"playerName": "Rae", "score": 1, "done": "yes"}, "done"),
            ({"playerName": "Rae", "score": 1, "link": "cityquest.example"}, "link"),
        ],
    )
    def test_single_violation(self, args: dict, field: str) -> None:
        with pytest.raises(ValidationError) as excinfo:
            s.validate("tool", FIELDS, args)
        assert excinfo.value.fields == [field]


class TestJsonSchema:
    def test_object_schema(self) -> None:
        rendered = s.object_schema(FIELDS)
        assert rendered["type"] == "object"
        assert rendered["required"] == ["playerName", "score"]
        assert list(rendered["properties"]) == list(FIELDS)

    def test_property_constraints(self) -> None:
        props = s.object_schema(FIELDS)["properties"]
        assert props["playerName"] == {"type": "string", "minLength": 1, "description": "Player"}
        assert props["progress"] == {"type": "number", "minimum": 0, "maximum": 100}
        assert props["badges"] == {"type": "array", "maxItems": 3, "items": {"type": "string"}}
        assert props["operation"] == {"type": "string", "enum": ["+", "-"]}
        assert props["link"] == {"type": "string", "format": "uri"}

    def test_empty_schema(self) -> None:
        assert s.object_schema({}) == {"type": "object", "properties": {}, "required": []}


class TestIsUrl:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("https://cityquest.example", True),
            ("ui://widget/x.html", True),
            ("cityquest.example/path", False),
            ("not a url", False),
            ("http://[::1", False),
        ],
    )
    def test_is_url(self, value: str, expected: bool) -> None:
        assert s.is_url(value) is expected


class TestKinds:
    def test_supported_kinds(self) -> None:
        assert [k.value for k in s.Kind] == ["string", "number", "boolean", "enum", "array"]

    @pytest.mark.parametrize("kind", list(s.Kind))
    def test_every_kind_renders_and_checks(self, kind: s.Kind) -> None:
        descriptor = s.Field(kind, items=s.string() if kind is s.Kind.ARRAY else None)
        assert "type" in descriptor.json_schema()
        assert descriptor.check(object(), "value")[0].field == "value"
