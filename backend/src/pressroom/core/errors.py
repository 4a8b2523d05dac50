"""Error taxonomy for the Pressroom core.

Construction-time errors (bad query, bad schema registration) fail the
whole request and carry a machine-readable code for the API layer.
Enrichment-time problems never surface as exceptions to the caller; they
degrade to null property values.
"""

from typing import Any


class PressroomError(Exception):
    """Base class for all core errors.

    Attributes:
        code: Machine-readable error code (e.g., "UNRECOGNIZED_FILTER")
        status: HTTP status the API layer should use
    """

    code = "PRESSROOM_ERROR"
    status = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.details}


class UnrecognizedFilterError(PressroomError):
    """A filter key outside the allow-list was supplied in strict mode."""

    code = "UNRECOGNIZED_FILTER"
    status = 400

    def __init__(self, entity_type: str, keys: list[str]):
        super().__init__(
            f"Unrecognized filter(s) for {entity_type}: {', '.join(keys)}",
            keys=keys,
        )
        self.entity_type = entity_type
        self.keys = keys


class InvalidFilterValueError(PressroomError):
    """A recognized filter key carried a value that cannot be coerced."""

    code = "INVALID_FILTER_VALUE"
    status = 400

    def __init__(self, key: str, value: Any, reason: str = ""):
        message = f"Invalid value for filter '{key}': {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, key=key)
        self.key = key
        self.value = value


class InvalidPaginationError(PressroomError):
    """Non-integer or out-of-range offset/count while clamping is disabled."""

    code = "INVALID_PAGINATION"
    status = 400


class HookListenerError(PressroomError):
    """A listener failed on a hook whose failures must propagate."""

    code = "HOOK_LISTENER_FAILED"
    status = 400

    def __init__(self, hook_name: str, cause: BaseException):
        super().__init__(f"Listener for '{hook_name}' failed: {cause}", hook=hook_name)
        self.hook_name = hook_name
        self.cause = cause


class MissingRelatedEntityError(PressroomError):
    """A related entity could not be resolved.

    Serialization downgrades this to a null property value; it is raised
    only inside getters and caught by the serializer.
    """

    code = "MISSING_RELATED_ENTITY"
    status = 404


class SchemaRegistrationError(PressroomError):
    """A property schema violates tier containment or is registered twice."""

    code = "INVALID_SCHEMA"


class UnknownServiceError(PressroomError):
    """No service factory is registered under the requested name."""

    code = "UNKNOWN_SERVICE"
    status = 404

    def __init__(self, name: str):
        super().__init__(f"Service '{name}' is not registered", service=name)
        self.name = name
