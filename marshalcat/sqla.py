"""
This module contains marshalcat helpers specific to SQLAlchemy. SQLA is not
a required dependency, hence to use these helpers, you'll have to import
them via `from marshalcat.sqla import ...`.
"""
from typing import Collection, Type

from sqlalchemy import inspect

from .field import Field, noop
from .registry import register_record
from .schema_definition import SchemaDefinition


def object_as_dict(obj):
    """Turn an SQLAlchemy model into a dict of field names and values.

    Based on https://stackoverflow.com/a/37350445/1579058
    """
    return {c.key: getattr(obj, c.key)
            for c in inspect(obj).mapper.column_attrs}


def schema_def_from_model(model_cls: Type,
                          omit_empty: Collection[str] = ()) -> SchemaDefinition:
    """Describe a model's columns as record fields, in column order.

    :param model_cls: a mapped SQLAlchemy model class.
    :param omit_empty: names of columns which are left out of the output
        when their value is empty.
    """
    column_keys = [c.key for c in inspect(model_cls).column_attrs]
    unknown = set(omit_empty) - set(column_keys)
    if unknown:
        raise ValueError('%s has no columns named %s' % (
            model_cls.__name__, ', '.join(sorted(unknown))
        ))

    return SchemaDefinition(fields={
        key: Field(serialize_to=None, serialize_func=noop,
                   omit_empty=key in omit_empty)
        for key in column_keys
    })


def register_model(model_cls: Type, omit_empty: Collection[str] = ()) -> None:
    """Encode instances of an SQLAlchemy model as JSON objects of their
    column values."""
    register_record(
        model_cls,
        schema_def_from_model(model_cls, omit_empty=omit_empty),
        getter=object_as_dict,
    )
