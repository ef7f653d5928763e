from typing import Any, Callable, Dict

import attr

from marshalcat.consts import omitted
from marshalcat.field import Field


@attr.frozen
class SchemaDefinition:
    fields: Dict[str, Field]

    def values_from(self, obj: Any) -> Dict[str, Any]:
        """Collect the value of each field from a dict or an object.

        Fields missing from `obj` come back as `omitted`.
        """
        return {name: getter(obj, name, omitted) for name in self.fields}


@attr.frozen
class RecordType:
    """How instances of a type are turned into records for encoding."""

    definition: SchemaDefinition
    getter: Callable[[Any], Dict[str, Any]]
    """Returns the field values of an instance, keyed by field name."""


def getter(dict_or_obj, field_name, default):
    if isinstance(dict_or_obj, dict):
        return dict_or_obj.get(field_name, default)
    else:
        return getattr(dict_or_obj, field_name, default)
