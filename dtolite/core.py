import copy
import re
import sys
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Union,
    cast,
    get_origin,
)

from .exceptions import DataTransferObjectError
from .reflection import Schema, SchemaRegistry, default_registry

_MISSING: Any = object()

_CLASS_VAR_STRING = re.compile(r"^\s*(typing\.)?ClassVar\b")


def _own_annotations(cls: type) -> Dict[str, Any]:
    """Annotations declared directly on ``cls``, without evaluating forward references."""
    if sys.version_info >= (3, 14):
        import annotationlib

        return annotationlib.get_annotations(
            cls, format=annotationlib.Format.FORWARDREF
        )
    return dict(cls.__dict__.get("__annotations__", {}))


def _is_class_var(annotation: Any) -> bool:
    if annotation is ClassVar or get_origin(annotation) is ClassVar:
        return True
    text = getattr(annotation, "__forward_arg__", annotation)
    return isinstance(text, str) and _CLASS_VAR_STRING.match(text) is not None


# --- Metaclass ---
class DataTransferObjectMeta(type):
    """Collects declared field names and strips class-level defaults."""

    def __new__(mcls, name: str, bases: tuple, namespace: dict) -> Any:
        namespace.setdefault("__slots__", ())
        cls = super().__new__(mcls, name, bases, namespace)
        cls_any = cast(Any, cls)

        fields: List[str] = []
        owners: Dict[str, type] = {}
        for base in bases:
            for field_name in getattr(base, "_fields", ()):
                if field_name not in owners:
                    fields.append(field_name)
                    owners[field_name] = base._field_owners[field_name]

        for field_name, annotation in _own_annotations(cls).items():
            if field_name.startswith("_") or _is_class_var(annotation):
                continue
            for base in cls.__mro__[1:]:
                if field_name in vars(base):
                    raise TypeError(
                        f"Field '{field_name}' of {name} clashes with "
                        f"{base.__name__}.{field_name}"
                    )
            if field_name not in owners:
                fields.append(field_name)
            owners[field_name] = cls
            # Defaults never initialise a field; every instance starts unset.
            if field_name in cls.__dict__:
                delattr(cls, field_name)

        cls_any._fields = tuple(fields)
        cls_any._field_owners = owners
        return cls


# --- Main DataTransferObject Class ---
class DataTransferObject(metaclass=DataTransferObjectMeta):
    """Record with declared, type-checked fields that can be partially set.

    A field is either unset, or set to a value accepted by its declared
    type(s). Unset fields raise on read and are left out of ``to_dict()``.
    """

    __slots__ = ("_schema", "_data", "_only_names", "_except_names")
    __registry__: ClassVar[SchemaRegistry] = default_registry

    def __init__(
        self, parameters: Optional[Mapping[str, Any]] = None, /, **kwargs: Any
    ) -> None:
        schema = self.__registry__.resolve(type(self))
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_data", {})
        object.__setattr__(self, "_only_names", None)
        object.__setattr__(self, "_except_names", ())

        if parameters:
            self.set(parameters)
        if kwargs:
            self.set(kwargs)

    @classmethod
    def make(
        cls, parameters: Optional[Mapping[str, Any]] = None, /, **kwargs: Any
    ) -> "DataTransferObject":
        """Create an instance and assign ``parameters`` through the validated path."""
        return cls(parameters, **kwargs)

    @classmethod
    def field_names(cls) -> List[str]:
        """Get list of all declared field names for this DTO."""
        return list(cls._fields)

    # --- Field Access ---
    def _assert_property_exists(self, name: str) -> None:
        schema: Schema = self._schema
        if name not in schema:
            raise DataTransferObjectError.nonexistent_property(schema.type_name, name)

    def __setattr__(self, name: str, value: Any) -> None:
        self._assert_property_exists(name)
        self._schema.validators[name].validate(value)
        self._data[name] = value

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for fields and unknown names.
        if name.startswith("_"):
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{name}'"
            )
        self._assert_property_exists(name)
        try:
            return self._data[name]
        except KeyError:
            raise DataTransferObjectError.property_not_initialized(
                self._schema.type_name, name
            ) from None

    def __delattr__(self, name: str) -> None:
        self._data.pop(name, None)

    def __contains__(self, name: object) -> bool:
        """Whether ``name`` is currently set."""
        return name in self._data

    def set(
        self, name: Union[str, Mapping[str, Any]], value: Any = None
    ) -> "DataTransferObject":
        """Assign one field, or every item of a mapping in order. Chainable."""
        if isinstance(name, Mapping):
            for key, item in name.items():
                self.set(key, item)
        else:
            setattr(self, name, value)
        return self

    def get(self, name: str, default: Any = _MISSING) -> Any:
        """Read a field, returning ``default`` when it is declared but unset."""
        self._assert_property_exists(name)
        if name in self._data:
            return self._data[name]
        if default is _MISSING:
            raise DataTransferObjectError.property_not_initialized(
                self._schema.type_name, name
            )
        return default

    def unset(self, *names: str) -> "DataTransferObject":
        for name in names:
            self._assert_property_exists(name)
            self._data.pop(name, None)
        return self

    # --- View Filters ---
    def only(self, *names: str) -> "DataTransferObject":
        """Restrict ``to_dict()`` to ``names``. No names disables the restriction."""
        for name in names:
            self._assert_property_exists(name)
        object.__setattr__(self, "_only_names", tuple(dict.fromkeys(names)) or None)
        return self

    def except_(self, *names: str) -> "DataTransferObject":
        """Leave ``names`` out of ``to_dict()``; applied after ``only()``."""
        for name in names:
            self._assert_property_exists(name)
        object.__setattr__(self, "_except_names", tuple(names))
        return self

    def compact(self) -> "DataTransferObject":
        """Restrict ``to_dict()`` to the fields currently set to a non-None value."""
        object.__setattr__(
            self,
            "_only_names",
            # An empty tuple still filters: all-None data projects to {}.
            tuple(name for name, value in self._data.items() if value is not None),
        )
        return self

    # --- Serialization ---
    def to_dict(self) -> Dict[str, Any]:
        """Convert the set fields to a dictionary, expanding nested DTOs."""
        names: List[str] = list(self._data)
        if self._only_names is not None:
            names = [name for name in self._only_names if name in self._data]

        d = {}
        for name in names:
            if name in self._except_names:
                continue
            value = self._data[name]
            if isinstance(value, DataTransferObject):
                value = value.to_dict()
            d[name] = value
        return d

    # --- Copying ---
    def copy(self, **changes: Any) -> "DataTransferObject":
        """Return a shallow copy with the same filters, optionally with field changes."""
        new_obj = self.__class__(self._data, **changes)
        object.__setattr__(new_obj, "_only_names", self._only_names)
        object.__setattr__(new_obj, "_except_names", self._except_names)
        return new_obj

    def __copy__(self) -> "DataTransferObject":
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "DataTransferObject":
        """Integration with Python's copy.deepcopy()."""
        new_obj = self.__class__.__new__(self.__class__)
        memo[id(self)] = new_obj
        object.__setattr__(new_obj, "_schema", self._schema)
        object.__setattr__(
            new_obj,
            "_data",
            {name: copy.deepcopy(value, memo) for name, value in self._data.items()},
        )
        object.__setattr__(new_obj, "_only_names", self._only_names)
        object.__setattr__(new_obj, "_except_names", self._except_names)
        return new_obj

    # --- Equality and Representation ---
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        fields_str = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"{self.__class__.__name__}({fields_str})"
