"""DTO declarations shared by the test suite."""

from typing import Annotated, Any, ClassVar, Dict, List, Optional, Union

from dtolite import DataTransferObject, accepts


class Foo:
    pass


class SubFoo(Foo):
    pass


class NestedData(DataTransferObject):
    sample_prop: str


class SampleData(DataTransferObject):
    simple_prop: str
    nullable_prop: Optional[str]
    array_prop: dict
    list_prop: List[str]
    object_prop: Foo

    mixed_prop: Any

    alias_prop_int: int
    alias_prop_bool: bool
    alias_prop_float: float

    union_prop: Annotated[str, accepts("Foo|str")]
    nullable_doctype_prop: Annotated[Any, accepts("str|null")]
    mixed_case_type_prop: Annotated[Any, accepts("Boolean|Int|String")]

    nested: "NestedData"

    defaulted_prop: str = "default"


class UnionData(DataTransferObject):
    compound_property: Union[str, int]


class Person(DataTransferObject):
    name: str
    age: Optional[int]


class ChildData(NestedData):
    extra: int


class ExtrasData(DataTransferObject):
    registry_hint: ClassVar[str] = "not a field"
    _private: int

    stamp: Annotated[Any, accepts("datetime.date")]
    foo_or_none: Annotated[Any, accepts(Foo, None)]
    mapping: Dict[str, int]
    labelled: Annotated[int, "a plain metadata string"]


def qualified(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"
