"""
Encoding support for attrs classes. Any attrs instance encodes as a record
whose fields are the class' attributes, in definition order. Per-attribute
options live in the attribute's metadata:

@attr.s(auto_attribs=True)
class Event:
    name: str
    starts_at: Timestamp = omit_empty_attrib(factory=Timestamp)
    owner: str = attr.ib(default="", metadata={SERIALIZE_TO: "owner_id"})
"""
import functools
from typing import Type

import attr

from marshalcat.field import Field, noop
from marshalcat.schema_definition import RecordType, SchemaDefinition

OMIT_EMPTY = "marshalcat.omit_empty"
SERIALIZE_TO = "marshalcat.serialize_to"


def omit_empty_attrib(**kwargs):
    """Like `attr.ib`, but the attribute is left out of the output when its
    value is empty."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[OMIT_EMPTY] = True
    return attr.ib(metadata=metadata, **kwargs)


def convert_attrib_to_field(attrib: attr.Attribute) -> Field:
    """Convert attr Attribute to marshalcat Field."""
    return Field(
        serialize_to=attrib.metadata.get(SERIALIZE_TO),
        serialize_func=noop,
        omit_empty=bool(attrib.metadata.get(OMIT_EMPTY, False)),
    )


@functools.lru_cache(maxsize=None)
def schema_def_from_attrs_class(attrs_class: Type) -> SchemaDefinition:
    return SchemaDefinition(
        fields={
            attr_field.name: convert_attrib_to_field(attr_field)
            for attr_field in attr.fields(attrs_class)
        }
    )


def record_type_for_attrs_class(attrs_class: Type) -> RecordType:
    definition = schema_def_from_attrs_class(attrs_class)
    return RecordType(definition=definition, getter=definition.values_from)
