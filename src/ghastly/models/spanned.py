"""Value-with-provenance wrapper shared by the YAML loader and the workflow models."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, TypeVar, get_args

from pydantic import GetCoreSchemaHandler, ValidatorFunctionWrapHandler
from pydantic_core import core_schema

from ghastly.models.errors import Span

T = TypeVar("T")

UNLOCATED = Span()


class Spanned(Generic[T]):
    """A value paired with the span of source text it was read from.

    Attribute access, iteration, indexing, membership, truthiness, ``str``,
    equality and hashing all go to the wrapped value, so rule code can treat
    ``Spanned[Job]`` like a ``Job`` and only reach for ``.span`` when it
    reports a violation.

    Used as a pydantic field type, ``Spanned[T]`` validates the wrapped raw
    value as ``T`` and carries the raw node's span over to the result.
    """

    __slots__ = ("value", "span")

    def __init__(self, value: T, span: Span | None = None) -> None:
        self.value = value
        self.span = span if span is not None else UNLOCATED

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not defined on Spanned itself.
        if name.startswith("__") or name in ("value", "span"):
            raise AttributeError(name)
        return getattr(self.value, name)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Spanned):
            other = other.value
        return bool(self.value == other)

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __len__(self) -> int:
        return len(self.value)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.value)  # type: ignore[call-overload]

    def __getitem__(self, key: Any) -> Any:
        return self.value[key]  # type: ignore[index]

    def __contains__(self, item: object) -> bool:
        return item in self.value  # type: ignore[operator]

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"Spanned({self.value!r}, span={self.span})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        args = get_args(source_type)
        inner = handler.generate_schema(args[0]) if args else core_schema.any_schema()

        def _validate(raw: Any, validate_inner: ValidatorFunctionWrapHandler) -> Spanned[Any]:
            if isinstance(raw, Spanned):
                return cls(validate_inner(raw.value), raw.span)
            return cls(validate_inner(raw))

        return core_schema.no_info_wrap_validator_function(
            _validate,
            inner,
            serialization=core_schema.wrap_serializer_function_ser_schema(
                lambda spanned, serialize: serialize(spanned.value),
                schema=inner,
                info_arg=False,
            ),
        )


def unwrap(value: Any) -> Any:
    """Return the wrapped value of a :class:`Spanned`, anything else unchanged."""
    return value.value if isinstance(value, Spanned) else value
