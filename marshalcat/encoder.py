import base64
import datetime
import decimal
import enum
import functools
import json
import logging
import math
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

import attr

from marshalcat.consts import omitted, zero
from marshalcat.ext.attrs import record_type_for_attrs_class
from marshalcat.field import Encoded, Error, FieldPath, MarshalError, wrap_error
from marshalcat.registry import find_marshaler, find_record_type
from marshalcat.schema_definition import RecordType, SchemaDefinition

logger = logging.getLogger(__name__)


def _indent_str(indent: Union[int, str, None]) -> Optional[str]:
    if isinstance(indent, int):
        return " " * indent
    return indent


@attr.frozen
class EncoderOptions:
    sort_keys: bool = True
    """Sort the keys of mappings. Record fields always keep their order."""

    escape_html: bool = True
    """Escape <, > and & inside strings so the output is safe to embed in
    HTML <script> tags."""

    validate_hooks: bool = True
    """Check that `marshal_json` hooks return a single valid JSON value."""

    indent: Optional[str] = attr.ib(default=None, converter=_indent_str)
    """If set, pretty-print the output using this (or this many spaces) per
    level of nesting."""

    prefix: str = ""
    """Prepended to every line after the first when indenting."""


DEFAULT_OPTIONS = EncoderOptions()

_HTML_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"}
_LINE_SEPARATORS = {"\u2028": "\\u2028", "\u2029": "\\u2029"}


def quote(text: str, escape_html: bool = True) -> str:
    """Turn `text` into a JSON string literal."""
    data = json.encoder.encode_basestring(text)
    for char, escaped in _LINE_SEPARATORS.items():
        data = data.replace(char, escaped)
    if escape_html:
        data = _escape_html(data)
    return data


def _escape_html(data: str) -> str:
    # only valid for JSON text, where these chars can only appear in strings
    for char, escaped in _HTML_ESCAPES.items():
        data = data.replace(char, escaped)
    return data


def _reject_constant(name: str) -> None:
    raise ValueError("Invalid constant %s" % name)


def _type_name(value: Any) -> str:
    return type(value).__name__


def record_type_of(value: Any) -> Optional[RecordType]:
    """Return how to encode `value` as a record, or None if it isn't one."""
    cls = type(value)
    # can't check for the Schema class here, since it imports this module
    definition = getattr(cls, "_schema_definition", None)
    if isinstance(definition, SchemaDefinition):
        return RecordType(definition=definition, getter=definition.values_from)

    record_type = find_record_type(cls)
    if record_type is not None:
        return record_type

    if attr.has(cls):
        return record_type_for_attrs_class(cls)

    return None


HookResult = Union[Tuple[str, Any], Error]


class _Encoder:
    """Encodes a single top-level value. Not reused between calls, since it
    tracks the containers currently being encoded to catch cycles."""

    def __init__(self, options: EncoderOptions):
        self.options = options
        self.markers: Dict[int, Any] = {}

    def quote(self, text: str) -> str:
        return quote(text, escape_html=self.options.escape_html)

    def encode_value(self, value: Any, path: FieldPath) -> Union[Encoded, Error]:
        marshaler = find_marshaler(type(value))
        if marshaler is not None:
            return self.encode_hook(
                functools.partial(marshaler, value),
                value,
                path,
                hook_name="registered marshaler",
            )

        marshal_json = getattr(value, "marshal_json", None)
        if callable(marshal_json):
            return self.encode_hook(
                marshal_json, value, path, hook_name="marshal_json"
            )

        marshal_text = getattr(value, "marshal_text", None)
        if callable(marshal_text):
            return self.encode_hook(
                marshal_text, value, path, hook_name="marshal_text", text=True
            )

        record_type = record_type_of(value)
        if record_type is not None:
            return self.encode_record(
                record_type.definition, record_type.getter(value), path, value
            )

        return self.encode_builtin(value, path)

    def run_hook(
        self, hook: Callable[[], Any], value: Any, path: FieldPath, hook_name: str
    ) -> HookResult:
        """Call a marshal hook and normalize what it returns to a
        (text, outcome) pair, where outcome is either None or `zero`."""
        try:
            result = hook()
        except Exception as e:
            logger.debug(
                "%s for type %s raised", hook_name, _type_name(value), exc_info=True
            )
            return Error(
                msg=f"Error calling {hook_name} for type {_type_name(value)}: {e}",
                field=path,
                cause=e,
            )

        outcome = None
        if isinstance(result, tuple):
            if len(result) != 2:
                return Error(
                    msg=f"{hook_name} for type {_type_name(value)} must return "
                    "data or a (data, outcome) pair.",
                    field=path,
                )
            result, outcome = result

        if isinstance(result, Error):
            return wrap_error(path, result)
        if isinstance(outcome, Error):
            return wrap_error(path, outcome)
        if isinstance(outcome, Exception):
            return Error(msg=str(outcome), field=path, cause=outcome)
        if outcome is not None and outcome is not zero:
            return Error(
                msg=f"Unrecognized outcome from {hook_name} for type "
                f"{_type_name(value)}: {outcome!r}",
                field=path,
            )

        if isinstance(result, (bytes, bytearray)):
            try:
                result = bytes(result).decode("utf-8")
            except UnicodeDecodeError as e:
                return Error(
                    msg=f"Invalid UTF-8 from {hook_name} for type {_type_name(value)}.",
                    field=path,
                    cause=e,
                )
        elif not isinstance(result, str):
            return Error(
                msg=f"{hook_name} for type {_type_name(value)} returned "
                f"unsupported type {_type_name(result)}.",
                field=path,
            )

        return result, outcome

    def encode_hook(
        self,
        hook: Callable[[], Any],
        value: Any,
        path: FieldPath,
        hook_name: str,
        text: bool = False,
    ) -> Union[Encoded, Error]:
        result = self.run_hook(hook, value, path, hook_name)
        if isinstance(result, Error):
            return result
        data, outcome = result

        if text:
            data = self.quote(data)
        else:
            data = data.strip()
            if self.options.validate_hooks:
                try:
                    json.loads(data, parse_constant=_reject_constant)
                except ValueError as e:
                    return Error(
                        msg=f"Invalid JSON from {hook_name} for type "
                        f"{_type_name(value)}: {e}",
                        field=path,
                        cause=e,
                    )
            if self.options.escape_html:
                data = _escape_html(data)

        return Encoded(data=data, is_zero=outcome is zero)

    def enter(self, container: Any, path: FieldPath) -> Optional[Error]:
        marker = id(container)
        if marker in self.markers:
            return Error(msg="Circular reference detected.", field=path)
        self.markers[marker] = container
        return None

    def leave(self, container: Any) -> None:
        del self.markers[id(container)]

    def encode_record(
        self,
        definition: SchemaDefinition,
        values: Dict[str, Any],
        path: FieldPath,
        container: Any,
    ) -> Union[Encoded, Error]:
        error = self.enter(container, path)
        if error:
            return error
        try:
            chunks = []
            for name, field_def in definition.fields.items():
                value = values.get(name, omitted)
                if value is omitted:
                    continue

                field_path = path + (name,)
                try:
                    value = field_def.serialize_func(value)
                except Exception as e:
                    return Error(
                        msg=f"Error serializing field: {e}",
                        field=field_path,
                        cause=e,
                    )
                if value is omitted:
                    continue

                result = self.encode_value(value, field_path)
                if isinstance(result, Error):
                    return result

                # the only place where the omission signal is acted on
                if field_def.omit_empty and result.is_zero:
                    logger.debug(
                        "Omitting empty field %s", ".".join(map(str, field_path))
                    )
                    continue

                chunks.append(self.quote(field_def.key(name)) + ":" + result.data)
        finally:
            self.leave(container)

        # records are never empty themselves
        return Encoded(data="{" + ",".join(chunks) + "}")

    def encode_builtin(self, value: Any, path: FieldPath) -> Union[Encoded, Error]:
        if value is None:
            return Encoded(data="null", is_zero=True)
        elif value is True:
            return Encoded(data="true")
        elif value is False:
            return Encoded(data="false", is_zero=True)
        elif isinstance(value, enum.Enum):
            return self.encode_value(value.value, path)
        elif isinstance(value, int):
            return Encoded(data=int.__repr__(value), is_zero=value == 0)
        elif isinstance(value, float):
            if not math.isfinite(value):
                return Error(msg=f"Unsupported float value: {value!r}", field=path)
            return Encoded(data=float.__repr__(value), is_zero=value == 0)
        elif isinstance(value, decimal.Decimal):
            if not value.is_finite():
                return Error(msg=f"Unsupported decimal value: {value}", field=path)
            return Encoded(data=str(value), is_zero=value == 0)
        elif isinstance(value, str):
            return Encoded(data=self.quote(value), is_zero=value == "")
        elif isinstance(value, (bytes, bytearray)):
            encoded = base64.b64encode(bytes(value)).decode("ascii")
            return Encoded(data=self.quote(encoded), is_zero=len(value) == 0)
        elif isinstance(value, (datetime.date, datetime.time)):
            return Encoded(data=self.quote(value.isoformat()))
        elif isinstance(value, uuid.UUID):
            return Encoded(data=self.quote(str(value)))
        elif isinstance(value, Mapping):
            return self.encode_mapping(value, path)
        elif isinstance(value, (list, tuple)):
            return self.encode_array(value, value, path)
        elif isinstance(value, (set, frozenset)):
            try:
                items = sorted(value)
            except TypeError as e:
                return Error(msg="Unable to sort set items.", field=path, cause=e)
            return self.encode_array(items, value, path)

        return Error(msg=f"Unsupported type: {_type_name(value)}", field=path)

    def encode_array(
        self, items: Iterable[Any], container: Any, path: FieldPath
    ) -> Union[Encoded, Error]:
        error = self.enter(container, path)
        if error:
            return error
        try:
            chunks = []
            for idx, item in enumerate(items):
                result = self.encode_value(item, path + (idx,))
                if isinstance(result, Error):
                    return result
                chunks.append(result.data)
        finally:
            self.leave(container)

        return Encoded(data="[" + ",".join(chunks) + "]", is_zero=not chunks)

    def map_key(self, key: Any, path: FieldPath) -> Union[str, Error]:
        if isinstance(key, enum.Enum):
            return self.map_key(key.value, path)
        elif isinstance(key, str):
            return key
        elif isinstance(key, int) and not isinstance(key, bool):
            return int.__repr__(key)

        marshal_text = getattr(key, "marshal_text", None)
        if callable(marshal_text):
            result = self.run_hook(marshal_text, key, path, hook_name="marshal_text")
            if isinstance(result, Error):
                return result
            # zero or not, a key is always written
            return result[0]

        return Error(msg=f"Unsupported map key type: {_type_name(key)}", field=path)

    def encode_mapping(self, value: Mapping, path: FieldPath) -> Union[Encoded, Error]:
        error = self.enter(value, path)
        if error:
            return error
        try:
            items = []
            seen = set()
            for key, item in value.items():
                str_key = self.map_key(key, path)
                if isinstance(str_key, Error):
                    return str_key
                # e.g. 1 and "1" both become "1"
                if str_key in seen:
                    return Error(
                        msg=f"Duplicate map key: {str_key!r}", field=path
                    )
                seen.add(str_key)
                items.append((str_key, item))
            if self.options.sort_keys:
                items.sort(key=lambda kv: kv[0])

            chunks = []
            for str_key, item in items:
                result = self.encode_value(item, path + (str_key,))
                if isinstance(result, Error):
                    return result
                chunks.append(self.quote(str_key) + ":" + result.data)
        finally:
            self.leave(value)

        return Encoded(data="{" + ",".join(chunks) + "}", is_zero=not chunks)


def indent_json(data: str, prefix: str = "", indent: str = "  ") -> str:
    """Re-indent compact JSON text. Empty objects and arrays stay on one
    line."""
    out = []
    depth = 0
    pending_newline = False
    in_string = False
    escaped = False

    def newline():
        out.append("\n" + prefix + indent * depth)

    for char in data:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char in " \t\r\n":
            continue

        if pending_newline and char not in "]}":
            pending_newline = False
            newline()

        if char == '"':
            in_string = True
            out.append(char)
        elif char in "{[":
            out.append(char)
            depth += 1
            pending_newline = True
        elif char in "]}":
            depth -= 1
            if pending_newline:
                pending_newline = False
            else:
                newline()
            out.append(char)
        elif char == ",":
            out.append(char)
            newline()
        elif char == ":":
            out.append(": ")
        else:
            out.append(char)

    return "".join(out)


def encode(
    value: Any, options: EncoderOptions = DEFAULT_OPTIONS
) -> Union[Encoded, Error]:
    """Entrypoint for encoding a value without raising on failure.

    Indentation isn't applied here, the returned data is always compact.
    """
    return _Encoder(options).encode_value(value, path=())


def dumps(value: Any, **options) -> str:
    """Encode `value` as JSON text. Raises MarshalError if it can't be
    encoded. Keyword arguments are passed on to EncoderOptions."""
    encoder_options = EncoderOptions(**options)
    result = encode(value, encoder_options)
    if isinstance(result, Error):
        raise MarshalError(result)

    # a top-level value is never omitted, whatever its is_zero says
    data = result.data
    if encoder_options.indent is not None:
        data = indent_json(data, encoder_options.prefix, encoder_options.indent)
    return data


def marshal(value: Any, **options) -> bytes:
    """Like `dumps`, but returns UTF-8 encoded bytes."""
    return dumps(value, **options).encode("utf-8")


def dump(value: Any, fp, **options) -> None:
    """Write `value` as JSON text to a file-like object, followed by a
    newline."""
    fp.write(dumps(value, **options) + "\n")
