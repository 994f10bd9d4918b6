"""
dtolite - Type-checked data transfer objects for Python

Declare a record shape with annotated fields, build instances from plain
mappings, have every assignment checked against the declared type(s), and
project instances back to dictionaries.

Example:
    from typing import Annotated, Any, Optional
    from dtolite import DataTransferObject, accepts

    class Person(DataTransferObject):
        name: str
        age: Optional[int]
        contact: Annotated[Any, accepts("Email|str")]

    person = Person.make({"name": "Alice"})
    person.set("age", None)
    person.to_dict()            # {'name': 'Alice', 'age': None}
    person.compact().to_dict()  # {'name': 'Alice'}
    person.age = "thirty"       # InvalidType
"""

import logging

__version__ = "1.0.0"
__author__ = "Your Name"
__email__ = "your.email@example.com"
__license__ = "MIT"

from .core import DataTransferObject, DataTransferObjectMeta
from .exceptions import (
    DataTransferObjectError,
    InvalidType,
    NonexistentProperty,
    PropertyNotInitialized,
)
from .reflection import FieldDeclaration, Schema, SchemaRegistry, default_registry
from .validation import TypeValidator, accepts, type_name

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DataTransferObject",
    "DataTransferObjectMeta",
    "DataTransferObjectError",
    "NonexistentProperty",
    "PropertyNotInitialized",
    "InvalidType",
    "FieldDeclaration",
    "Schema",
    "SchemaRegistry",
    "default_registry",
    "TypeValidator",
    "accepts",
    "type_name",
]
