from marshalcat.consts import OMITTED, ZERO, omitted, zero
from marshalcat.encoder import (
    EncoderOptions, dump, dumps, encode, indent_json, marshal, quote
)
from marshalcat.field import (
    Encoded, Error, Field, MarshalError, OmitEmpty, field
)
from marshalcat.registry import (
    MarshalerNotRegistered, get_marshaler, register_marshaler,
    register_record, unregister_marshaler, unregister_record
)
from marshalcat.schema import Schema
from marshalcat.schema_definition import SchemaDefinition
from marshalcat.types import Duration, Timestamp

__version__ = '0.1.0'

__all__ = [
    'Duration', 'Encoded', 'EncoderOptions', 'Error', 'Field',
    'MarshalError', 'MarshalerNotRegistered', 'OMITTED', 'OmitEmpty',
    'Schema', 'SchemaDefinition', 'Timestamp', 'ZERO', 'dump', 'dumps',
    'encode', 'field', 'get_marshaler', 'indent_json', 'marshal', 'omitted',
    'quote', 'register_marshaler', 'register_record', 'unregister_marshaler',
    'unregister_record', 'zero'
]
