"""
This module contains marshalcat helpers specific to MongoEngine. ME is not
a required dependency, hence to use these helpers, you'll have to import
them via `from marshalcat.mongo import ...`.

Importing this module registers a marshaler for `bson.ObjectId`, which is
encoded as its hex string.
"""
from typing import Collection, Type

from bson import ObjectId

from .encoder import quote
from .field import Field, noop
from .registry import register_marshaler, register_record
from .schema_definition import SchemaDefinition


def marshal_object_id(oid):
    return quote(str(oid))


register_marshaler(ObjectId, marshal_object_id)


def document_as_dict(doc):
    # Get a dict of the document's field names and values.
    if getattr(doc, 'to_dict', None):
        # MongoMallard
        return doc.to_dict()
    else:
        # Upstream MongoEngine
        return dict(doc._data)


def schema_def_from_document(doc_cls: Type,
                             omit_empty: Collection[str] = ()) -> SchemaDefinition:
    """Describe a document's fields as record fields, in definition order.

    :param doc_cls: a MongoEngine Document or EmbeddedDocument class.
    :param omit_empty: names of fields which are left out of the output when
        their value is empty.
    """
    field_names = list(doc_cls._fields_ordered)
    unknown = set(omit_empty) - set(field_names)
    if unknown:
        raise ValueError('%s has no fields named %s' % (
            doc_cls.__name__, ', '.join(sorted(unknown))
        ))

    return SchemaDefinition(fields={
        name: Field(serialize_to=None, serialize_func=noop,
                    omit_empty=name in omit_empty)
        for name in field_names
    })


def register_document(doc_cls: Type, omit_empty: Collection[str] = ()) -> None:
    """Encode instances of a MongoEngine document as JSON objects of their
    field values."""
    register_record(
        doc_cls,
        schema_def_from_document(doc_cls, omit_empty=omit_empty),
        getter=document_as_dict,
    )
