"""Errors raised while synthesizing protobuf descriptors from an entity schema.

Every error carries the entity and the element (method, message or field name)
it was raised for, so a failure can be located in the schema.
"""


class EntpbError(ValueError):
    """Base class for all descriptor synthesis errors."""

    def __init__(self, message: str, *, entity: str | None = None, element: str | None = None) -> None:
        self.entity = entity
        self.element = element
        self.reason = message
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        location = ".".join(part for part in (self.entity, self.element) if part)
        if location:
            return f"{location}: {message}"
        return message


class MissingServiceAnnotationError(EntpbError):
    """Raised when an entity has no service configuration at all."""


class TypeMappingError(EntpbError):
    """Raised when a field type has no protobuf equivalent, or an enum lacks its value table."""


class UnknownGroupError(EntpbError):
    """Raised when a named message references a field group the entity does not declare."""


class UnknownFieldError(EntpbError):
    """Raised when a field group lists a name that is neither a field nor an edge of the entity."""


class UnsupportedIDTypeError(EntpbError):
    """Raised when List is requested on an entity whose ID type cannot be paginated."""


class DuplicateFieldNumberError(EntpbError):
    """Raised when two field definitions of one message share a field number."""


class FieldNumberCollisionError(EntpbError):
    """Raised when an extra field's number collides with a field already placed in the message."""


class MissingFieldAnnotationError(EntpbError):
    """Raised when a field or edge carries no explicit protobuf field number."""


class AnnotationDecodeError(EntpbError):
    """Raised when an annotation payload cannot be decoded into its typed configuration."""


class DuplicateFieldNameError(EntpbError):
    """Raised when two field definitions of one message share a name."""


class DuplicateMethodNameError(EntpbError):
    """Raised when an extra method reuses the name of another method of the service."""
