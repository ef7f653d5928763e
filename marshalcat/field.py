import attr
from typing import (
    Generic,
    TypeVar,
    Union,
    Tuple,
    Any,
    Callable,
    Optional as T_Optional,
)

from marshalcat.consts import omitted

FieldPath = Tuple[Union[str, int], ...]


@attr.frozen
class Error:
    msg: str
    field: FieldPath = tuple()
    cause: T_Optional[BaseException] = attr.ib(default=None, eq=False)
    """Exception raised by a hook or serialize func, if any."""

    def __str__(self) -> str:
        if self.field:
            path = ".".join(str(p) for p in self.field)
            return f"{path}: {self.msg}"
        return self.msg


class MarshalError(Exception):
    """Raised by the top-level encoding functions when encoding fails."""

    def __init__(self, error: Error):
        super().__init__(str(error))
        self.error = error


@attr.frozen
class Encoded:
    data: str
    """JSON text of the encoded value."""

    is_zero: bool = False
    """Whether the value is empty, as far as `omit_empty` is concerned."""


def wrap_error(field: FieldPath, error: Error) -> Error:
    return attr.evolve(error, field=field + error.field)


@attr.frozen
class OmitEmpty:
    """Marker for `Annotated` schema fields that are left out of the output
    when their value is empty."""


FType = TypeVar("FType")


@attr.frozen
class Field(Generic[FType]):
    serialize_to: T_Optional[str]
    """If provided overrides the name of the field during serialization."""

    serialize_func: Callable
    """Used when serializing this field. Defaults to a noop passthrough."""

    omit_empty: bool
    """Drop the field from the output when its value encodes as empty."""

    default: Any = omitted
    """Value used when a schema instance is created without this field."""

    def key(self, name: str) -> str:
        return self.serialize_to or name

    def __call__(self, serialize_func: Callable) -> "Field":
        # lets `@field(...)` decorate a serialize func
        return attr.evolve(self, serialize_func=serialize_func)


V = TypeVar("V")


def noop(value: V) -> V:
    return value


def field(
    decorated_func: T_Optional[Callable] = None,
    *,
    serialize_to: T_Optional[str] = None,
    omit_empty: bool = False,
    default: Any = omitted,
) -> Field:
    """Defines a Field.

    Args:
        decorated_func: Optionally a function that transforms the value before
            it is encoded. Defaults to noop, which passes through the value
            unchanged. Can also be given by using `field` as a decorator.
        serialize_to: The key to serialize to. Defaults to the field name on
            the schema.
        omit_empty: Leave the field out of the output when its value is empty.
            Values with a marshal hook are empty when the hook says so by
            returning `zero`; built-in values are empty when they are None,
            False, 0, "" or an empty collection.
        default: Value used when the schema is instantiated without this
            field. Defaults to `omitted`, which leaves the field out of the
            output entirely.
    """
    return Field(
        serialize_to=serialize_to,
        serialize_func=decorated_func or noop,
        omit_empty=omit_empty,
        default=default,
    )
