"""Per-type field declarations and the cache that holds them.

Resolving type hints and building validators is done once per DTO class and
reused by every instance of that class.
"""

import logging
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    Dict,
    Iterator,
    Tuple,
    get_args,
    get_origin,
    get_type_hints,
)

from .validation import TypeValidator, accepts, qualified_name

if TYPE_CHECKING:
    from .core import DataTransferObject

logger = logging.getLogger(__name__)


class FieldDeclaration:
    """Static description of one declared field."""

    __slots__ = ("name", "owner", "annotation", "supplementary")

    def __init__(
        self,
        name: str,
        owner: type,
        annotation: Any,
        supplementary: Tuple[accepts, ...] = (),
    ) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "owner", owner)
        object.__setattr__(self, "annotation", annotation)
        object.__setattr__(self, "supplementary", supplementary)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"'{self.__class__.__name__}' is immutable")

    @classmethod
    def from_hint(cls, name: str, owner: type, hint: Any) -> "FieldDeclaration":
        """Split an ``Annotated`` hint into the native type and accepts() markers."""
        if get_origin(hint) is Annotated:
            args = get_args(hint)
            markers = tuple(m for m in args[1:] if isinstance(m, accepts))
            return cls(name, owner, args[0], markers)
        return cls(name, owner, hint)

    def __repr__(self) -> str:
        return (
            f"FieldDeclaration({self.name!r}, owner={qualified_name(self.owner)}, "
            f"annotation={self.annotation!r})"
        )


class Schema:
    """Ordered field declarations of a DTO class and one validator per field."""

    __slots__ = ("type_name", "fields", "validators")

    def __init__(self, dto_class: type, fields: Tuple[FieldDeclaration, ...]) -> None:
        self.type_name = qualified_name(dto_class)
        self.fields: Dict[str, FieldDeclaration] = {f.name: f for f in fields}
        self.validators: Dict[str, TypeValidator] = {
            f.name: TypeValidator(f) for f in fields
        }

    @property
    def property_names(self) -> Tuple[str, ...]:
        return tuple(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __iter__(self) -> Iterator[FieldDeclaration]:
        return iter(self.fields.values())

    def __len__(self) -> int:
        return len(self.fields)


class SchemaRegistry:
    """Maps DTO classes to their schemas, building each on first use."""

    def __init__(self) -> None:
        self._schemas: Dict[type, Schema] = {}

    def resolve(self, dto_class: "type[DataTransferObject]") -> Schema:
        schema = self._schemas.get(dto_class)
        if schema is None:
            # Concurrent builders compute the same schema; first stored wins.
            schema = self._schemas.setdefault(dto_class, self._build(dto_class))
        return schema

    def _build(self, dto_class: "type[DataTransferObject]") -> Schema:
        hints = get_type_hints(dto_class, include_extras=True)
        owners = dto_class._field_owners
        fields = tuple(
            FieldDeclaration.from_hint(name, owners[name], hints[name])
            for name in dto_class._fields
        )
        schema = Schema(dto_class, fields)
        logger.debug(
            "Built schema for %s: %s",
            schema.type_name,
            ", ".join(
                f"{name}={list(v.allowed_types) or 'any'}"
                for name, v in schema.validators.items()
            ),
        )
        return schema

    def clear(self) -> None:
        self._schemas.clear()

    def __contains__(self, dto_class: object) -> bool:
        return dto_class in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


default_registry = SchemaRegistry()
