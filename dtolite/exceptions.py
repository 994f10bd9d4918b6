from typing import Sequence


class DataTransferObjectError(Exception):
    """Raised when a DTO field is used against its declaration."""

    def __init__(self, message: str, type_name: str, property_name: str) -> None:
        super().__init__(message)
        self.type_name = type_name
        self.property_name = property_name

    @classmethod
    def nonexistent_property(
        cls, type_name: str, property_name: str
    ) -> "NonexistentProperty":
        return NonexistentProperty(
            f"Public property ${property_name} does not exist in class {type_name}.",
            type_name,
            property_name,
        )

    @classmethod
    def property_not_initialized(
        cls, type_name: str, property_name: str
    ) -> "PropertyNotInitialized":
        return PropertyNotInitialized(
            f"{type_name}::${property_name} must not be accessed before initialization.",  # noqa: E501
            type_name,
            property_name,
        )

    @classmethod
    def invalid_type(
        cls,
        type_name: str,
        property_name: str,
        actual_type: str,
        allowed_types: Sequence[str],
    ) -> "InvalidType":
        """Build the single-type or the union message depending on the allowed set."""
        if len(allowed_types) == 1:
            message = (
                f"{type_name}::${property_name} must be of type {allowed_types[0]}, "
                f"received a value of type {actual_type}."
            )
        else:
            message = (
                f"{type_name}::${property_name} must be one of these types: "
                f"{', '.join(allowed_types)}; received a value of type {actual_type}."
            )
        return InvalidType(
            message, type_name, property_name, actual_type, allowed_types
        )


class NonexistentProperty(DataTransferObjectError, AttributeError):
    """The field name is not declared on the DTO."""


class PropertyNotInitialized(DataTransferObjectError, AttributeError):
    """The field is declared but has never been set."""


class InvalidType(DataTransferObjectError, TypeError):
    """The value's runtime type is not one the field accepts."""

    def __init__(
        self,
        message: str,
        type_name: str,
        property_name: str,
        actual_type: str,
        allowed_types: Sequence[str],
    ) -> None:
        super().__init__(message, type_name, property_name)
        self.actual_type = actual_type
        self.allowed_types = tuple(allowed_types)
