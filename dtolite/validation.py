import builtins
import importlib
import sys
import types
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    Dict,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from .exceptions import DataTransferObjectError

if TYPE_CHECKING:
    from .reflection import FieldDeclaration

_UnionType = getattr(types, "UnionType", None)
_NoneType = type(None)

# Runtime categories of plain values, keyed on exact type.
_CATEGORIES: Dict[type, str] = {
    _NoneType: "null",
    bool: "boolean",
    int: "integer",
    float: "double",
    str: "string",
    list: "array",
    tuple: "array",
    dict: "array",
}

# Native spellings of the scalar builtins.
_SCALAR_NAMES: Dict[type, str] = {
    _NoneType: "None",
    bool: "bool",
    int: "int",
    float: "float",
    str: "str",
}

_SCALAR_CLASSES: Dict[str, type] = {name: cls for cls, name in _SCALAR_NAMES.items()}

TYPE_ALIASES: Dict[str, str] = {
    "int": "integer",
    "bool": "boolean",
    "float": "double",
    "str": "string",
    "None": "null",
}

# Case-insensitive keywords understood by accepts().
_KEYWORDS: Dict[str, str] = {
    "null": "None",
    "none": "None",
    "bool": "bool",
    "boolean": "bool",
    "int": "int",
    "integer": "int",
    "float": "float",
    "double": "float",
    "str": "str",
    "string": "str",
    "array": "array",
}


def qualified_name(cls: type) -> str:
    """Return ``module.QualName`` for a class, or the bare name for builtins."""
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def type_name(value: Any) -> str:
    """Return the runtime category name of a value."""
    cls = type(value)
    return _CATEGORIES.get(cls) or qualified_name(cls)


class accepts:
    """Supplementary type list for a field, used inside ``Annotated`` metadata.

    Example:
        class Payload(DataTransferObject):
            body: Annotated[str, accepts("Message|str")]
            extra: Annotated[Any, accepts("int|None")]
    """

    __slots__ = ("types",)

    def __init__(self, *types: Union[str, type, None]) -> None:
        if not types:
            raise TypeError("accepts() requires at least one type.")
        for t in types:
            if not (t is None or isinstance(t, (str, type))):
                raise TypeError(
                    f"accepts() takes type names or classes, got {t!r}"
                )
        self.types = types

    def __repr__(self) -> str:
        return f"accepts({', '.join(repr(t) for t in self.types)})"


class TypeValidator:
    """Computes the allowed type set of one field and checks values against it."""

    def __init__(self, declaration: "FieldDeclaration") -> None:
        self.declaration = declaration
        # Name -> class for names matched with isinstance.
        self._classes: Dict[str, type] = {}

        native = self._native_types(declaration.annotation)
        supplementary = self._supplementary_types()

        allowed: List[str] = []
        for name in (native or []) + supplementary:
            if name not in allowed:
                allowed.append(name)
        self.allowed_types: Tuple[str, ...] = tuple(allowed)

    def validate(self, value: Any) -> None:
        if not self.allowed_types:
            # no declared restriction
            return

        actual_type = type_name(value)

        for allowed in self.allowed_types:
            if allowed == actual_type:
                return
            if TYPE_ALIASES.get(allowed) == actual_type:
                return
            cls = self._classes.get(allowed, _SCALAR_CLASSES.get(allowed))
            if cls is None or (cls is int and isinstance(value, bool)):
                continue
            if isinstance(value, cls):
                return

        raise DataTransferObjectError.invalid_type(
            qualified_name(self.declaration.owner),
            self.declaration.name,
            actual_type,
            self.allowed_types,
        )

    # --- Native annotation ---
    def _native_types(self, annotation: Any) -> Optional[List[str]]:
        """Names emitted by a type hint, or None when it places no restriction."""
        if annotation is Any or isinstance(annotation, TypeVar):
            return None
        if annotation is None or annotation is _NoneType:
            return ["None"]

        origin = get_origin(annotation)

        if origin is Annotated:
            return self._native_types(get_args(annotation)[0])

        if origin is Union or (_UnionType is not None and origin is _UnionType):
            members = get_args(annotation)
            names: List[str] = ["None"] if _NoneType in members else []
            for member in members:
                if member is _NoneType:
                    continue
                member_names = self._native_types(member)
                if member_names is None:
                    return None
                names.extend(member_names)
            return names

        if isinstance(origin, type):
            # List[int], dict[str, int], ...: only the container is checked
            return [self._class_name(origin)]

        if isinstance(annotation, type):
            return [self._class_name(annotation)]

        raise TypeError(
            f"Unsupported type annotation {annotation!r} for field "
            f"'{self.declaration.name}' of {qualified_name(self.declaration.owner)}"
        )

    def _class_name(self, cls: type) -> str:
        if cls in _SCALAR_NAMES:
            return _SCALAR_NAMES[cls]
        if getattr(cls, "_is_protocol", False) and not getattr(
            cls, "_is_runtime_protocol", False
        ):
            # isinstance() is not available for plain protocols
            raise TypeError(
                f"Unsupported type annotation {cls!r} for field "
                f"'{self.declaration.name}' of {qualified_name(self.declaration.owner)}"
            )
        name = qualified_name(cls)
        self._classes[name] = cls
        return name

    # --- Supplementary annotation ---
    def _supplementary_types(self) -> List[str]:
        names: List[str] = []
        for marker in self.declaration.supplementary:
            for entry in marker.types:
                if entry is None:
                    names.append("None")
                    continue
                if isinstance(entry, type):
                    names.append(self._class_name(entry))
                    continue
                for part in entry.split("|"):
                    part = part.strip().lstrip(".")
                    if part:
                        names.append(self._resolve_name(part))
        return names

    def _resolve_name(self, name: str) -> str:
        """Resolve a type name against the declaring class's module."""
        keyword = _KEYWORDS.get(name.lower())
        if keyword is not None:
            return keyword

        module = sys.modules.get(self.declaration.owner.__module__)
        context = vars(module) if module is not None else {}
        head, _, rest = name.partition(".")

        target: Any = None
        if head in context:
            target = context[head]
        elif hasattr(builtins, head):
            target = getattr(builtins, head)

        if target is not None:
            for attr in rest.split(".") if rest else []:
                target = getattr(target, attr, None)
                if target is None:
                    break
        elif rest:
            target = self._import_dotted(name)

        if not isinstance(target, type):
            raise NameError(
                f"Cannot resolve type '{name}' declared for "
                f"{qualified_name(self.declaration.owner)}::${self.declaration.name}"
            )
        return self._class_name(target)

    @staticmethod
    def _import_dotted(path: str) -> Any:
        module_name, _, attr = path.rpartition(".")
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
        return getattr(module, attr, None)

    def __repr__(self) -> str:
        return (
            f"TypeValidator({qualified_name(self.declaration.owner)}."
            f"{self.declaration.name}, allowed_types={self.allowed_types!r})"
        )
