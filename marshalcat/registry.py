from typing import Any, Callable, Dict, Optional, Type

from marshalcat.schema_definition import RecordType, SchemaDefinition

_marshaler_registry: Dict[type, Callable[[Any], Any]] = {}
_record_registry: Dict[type, RecordType] = {}


class MarshalerNotRegistered(Exception):
    """Raised when we attempt to get a marshaler for a type that has none
    registered.
    """
    pass


def register_marshaler(cls: Type, func: Callable[[Any], Any]) -> None:
    """Attach a marshal hook to a type you can't add a method to.

    `func` takes an instance and returns the same things a `marshal_json`
    method does. For example, to drop empty `Money` values from records:

    def marshal_money(money):
        data = '"%s %s"' % (money.amount, money.currency)
        return data, zero if not money.amount else None

    register_marshaler(Money, marshal_money)

    Subclasses of `cls` use the same marshaler unless they have their own.
    """
    _marshaler_registry[cls] = func


def unregister_marshaler(cls: Type) -> None:
    _marshaler_registry.pop(cls, None)


def find_marshaler(cls: Type) -> Optional[Callable[[Any], Any]]:
    for klass in cls.__mro__:
        func = _marshaler_registry.get(klass)
        if func is not None:
            return func
    return None


def get_marshaler(cls: Type) -> Callable[[Any], Any]:
    func = find_marshaler(cls)
    if func is not None:
        return func

    raise MarshalerNotRegistered(
        '{} has no marshaler registered in the marshalcat registry.'.format(
            cls.__name__
        )
    )


def register_record(
    cls: Type,
    definition: SchemaDefinition,
    getter: Optional[Callable[[Any], Dict[str, Any]]] = None,
) -> None:
    """Encode instances of `cls` as records described by `definition`.

    By default field values are read as attributes of the instance.
    """
    _record_registry[cls] = RecordType(
        definition=definition, getter=getter or definition.values_from
    )


def unregister_record(cls: Type) -> None:
    _record_registry.pop(cls, None)


def find_record_type(cls: Type) -> Optional[RecordType]:
    for klass in cls.__mro__:
        record_type = _record_registry.get(klass)
        if record_type is not None:
            return record_type
    return None
