"""Tests for span, spanned-value and workflow domain models."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from ghastly.models.errors import PolicyViolation, Position, Span
from ghastly.models.spanned import Spanned, unwrap
from ghastly.models.workflow import GlobalPermission, PermissionLevel, PermissionSet


def _span(line: int, column: int, end_line: int, end_column: int) -> Span:
    return Span(
        start=Position(line=line, column=column),
        end=Position(line=end_line, column=end_column),
    )


class TestPosition:
    def test_positions_are_one_based(self) -> None:
        with pytest.raises(ValidationError):
            Position(line=0, column=1)
        with pytest.raises(ValidationError):
            Position(line=1, column=0)

    def test_str(self) -> None:
        assert str(Position(line=3, column=7)) == "3:7"

    def test_from_zero_based_mark(self) -> None:
        class Mark:
            line = 0
            column = 4

        assert Position.from_mark(Mark()) == Position(line=1, column=5)


class TestSpan:
    def test_unlocated_span(self) -> None:
        span = Span()
        assert span.start is None
        assert span.end is None
        assert not span.located
        assert span.sort_key == (0, 0)
        assert str(span) == "?"

    def test_end_without_start_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot have an end"):
            Span(end=Position(line=1, column=1))

    def test_start_without_end_allowed(self) -> None:
        span = Span(start=Position(line=2, column=3))
        assert span.located
        assert span.sort_key == (2, 3)

    def test_sort_key_orders_by_line_then_column(self) -> None:
        spans = [_span(4, 1, 4, 9), Span(), _span(2, 8, 2, 9), _span(2, 3, 2, 5)]
        ordered = sorted(spans, key=lambda s: s.sort_key)
        assert [s.sort_key for s in ordered] == [(0, 0), (2, 3), (2, 8), (4, 1)]

    def test_spans_are_immutable(self) -> None:
        span = _span(1, 1, 1, 5)
        with pytest.raises(ValidationError):
            span.start = None  # type: ignore[misc]

    def test_equality_by_value(self) -> None:
        assert _span(1, 2, 3, 4) == _span(1, 2, 3, 4)
        assert _span(1, 2, 3, 4) != _span(1, 2, 3, 5)


class TestPolicyViolation:
    def test_defaults_to_unlocated(self) -> None:
        violation = PolicyViolation(message="something is off")
        assert violation.source == Span()

    def test_carries_span(self) -> None:
        violation = PolicyViolation(source=_span(5, 3, 5, 10), message="bad")
        assert violation.source.sort_key == (5, 3)
        assert violation.message == "bad"


class TestSpanned:
    def test_unlocated_by_default(self) -> None:
        assert Spanned("x").span == Span()

    def test_equality_delegates_to_value(self) -> None:
        assert Spanned("echo", _span(1, 1, 1, 5)) == "echo"
        assert Spanned("echo", _span(1, 1, 1, 5)) == Spanned("echo", _span(9, 9, 9, 9))
        assert Spanned("echo") != "printf"

    def test_hash_follows_value(self) -> None:
        assert hash(Spanned("key")) == hash("key")
        assert {Spanned("key"): 1}["key"] == 1

    def test_container_protocols(self) -> None:
        mapping = Spanned({"a": 1, "b": 2})
        assert len(mapping) == 2
        assert "a" in mapping
        assert mapping["b"] == 2
        assert sorted(mapping) == ["a", "b"]
        assert list(mapping.items()) == [("a", 1), ("b", 2)]

    def test_truthiness_and_str(self) -> None:
        assert not Spanned("")
        assert not Spanned([])
        assert Spanned("x")
        assert str(Spanned(42)) == "42"

    def test_attribute_access_delegates(self) -> None:
        assert Spanned("hello").upper() == "HELLO"

    def test_missing_attribute_raises(self) -> None:
        with pytest.raises(AttributeError):
            Spanned("hello").no_such_attribute  # noqa: B018

    def test_unwrap(self) -> None:
        assert unwrap(Spanned(3)) == 3
        assert unwrap(3) == 3


class _Holder(BaseModel):
    count: Spanned[int]
    labels: Spanned[list[Spanned[str]]] | None = None


class TestSpannedValidation:
    def test_validates_wrapped_value_and_keeps_span(self) -> None:
        span = _span(2, 5, 2, 6)
        holder = _Holder.model_validate({"count": Spanned(3, span)})
        assert isinstance(holder.count, Spanned)
        assert holder.count == 3
        assert holder.count.span == span

    def test_plain_values_get_unlocated_span(self) -> None:
        holder = _Holder(count=5)  # type: ignore[arg-type]
        assert holder.count == 5
        assert holder.count.span == Span()

    def test_nested_spans(self) -> None:
        item_span = _span(3, 7, 3, 10)
        holder = _Holder.model_validate(
            {
                "count": Spanned(1),
                "labels": Spanned([Spanned("abc", item_span)], _span(3, 5, 3, 12)),
            }
        )
        assert holder.labels is not None
        assert holder.labels.span.sort_key == (3, 5)
        assert holder.labels[0].span == item_span

    def test_type_mismatch_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            _Holder.model_validate({"count": Spanned("not a number")})

    def test_dump_unwraps(self) -> None:
        holder = _Holder.model_validate({"count": Spanned(3, _span(1, 1, 1, 2))})
        assert holder.model_dump() == {"count": 3, "labels": None}


class TestPermissionModels:
    def test_level_values(self) -> None:
        assert PermissionLevel.READ == "read"
        assert PermissionLevel.WRITE == "write"
        assert PermissionLevel.NONE == "none"

    def test_global_permission_values(self) -> None:
        assert GlobalPermission.READ_ALL == "read-all"
        assert GlobalPermission.WRITE_ALL == "write-all"

    def test_unspecified_scopes_default_to_none(self) -> None:
        permissions = PermissionSet.model_validate({"contents": "read"})
        assert permissions.contents is PermissionLevel.READ
        assert permissions.issues is PermissionLevel.NONE
        assert not permissions.is_empty

    def test_empty_set(self) -> None:
        assert PermissionSet().is_empty
        assert PermissionSet.model_validate({"contents": "none"}).is_empty

    def test_kebab_case_scopes(self) -> None:
        permissions = PermissionSet.model_validate(
            {"id-token": Spanned("write"), "pull-requests": Spanned("read")}
        )
        assert permissions.id_token is PermissionLevel.WRITE
        assert permissions.pull_requests is PermissionLevel.READ

    def test_items_cover_all_fourteen_scopes(self) -> None:
        scopes = [scope for scope, _ in PermissionSet().items()]
        assert len(scopes) == 14
        assert scopes[0] == "actions"
        assert "id-token" in scopes
        assert "security-events" in scopes
        assert scopes[-1] == "statuses"

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PermissionSet.model_validate({"contents": "admin"})

    def test_unknown_scope_ignored(self) -> None:
        permissions = PermissionSet.model_validate({"models": "read"})
        assert permissions.is_empty
