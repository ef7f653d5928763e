import copy
import inspect
import sys
from typing import Annotated, Any, ClassVar, Dict, Optional, get_origin

import attr

from marshalcat.consts import omitted
from marshalcat.encoder import dumps, marshal
from marshalcat.field import Field, OmitEmpty, noop
from marshalcat.schema_definition import SchemaDefinition


def _is_classvar(annotation) -> bool:
    if isinstance(annotation, str):
        # postponed annotations aren't evaluated, go by the name
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _wants_omit_empty(annotation) -> bool:
    return get_origin(annotation) is Annotated and any(
        isinstance(m, OmitEmpty) for m in annotation.__metadata__
    )


def resolve_annotations(cls) -> Dict[str, Any]:
    """The class's own annotations, with string annotations (as written under
    `from __future__ import annotations`) evaluated where possible.

    Names are looked up in the class body first, then in its module. An
    annotation that can't be evaluated, e.g. one naming a class local to a
    function, is kept as its string.
    """
    annotations = dict(inspect.get_annotations(cls))
    module = sys.modules.get(cls.__module__)
    globalns = dict(vars(module)) if module else {}
    localns = dict(vars(cls))
    for name, annotation in annotations.items():
        if not isinstance(annotation, str):
            continue
        try:
            annotations[name] = eval(annotation, globalns, localns)
        except (NameError, AttributeError, SyntaxError, TypeError):
            pass
    return annotations


def field_def_from_annotation(annotation, default: Any = omitted) -> Optional[Field]:
    """Turn an annotation into an equivalent field.

    Explicitly ignores `ClassVar` annotations, returning None.
    """
    if _is_classvar(annotation):
        return None

    return Field(
        serialize_to=None,
        serialize_func=noop,
        omit_empty=_wants_omit_empty(annotation),
        default=default,
    )


class SchemaMetaclass(type):
    def __new__(cls, clsname, bases, attribs, autodef=True):
        """
        Turn a Schema subclass into a schema.

        Fields come from base schemas first, then annotated attributes in the
        order they are annotated, then any other `Field` attributes (like
        `@field()` decorated functions).

        Args:
            autodef: automatically define simple fields for annotated attributes
        """
        new_cls = super(SchemaMetaclass, cls).__new__(cls, clsname, bases, attribs)

        fields: Dict[str, Field] = {}
        for base in bases:
            # can't directly check for Schema class, since sometimes it hasn't
            # been created yet
            base_schema_def = getattr(base, "_schema_definition", None)
            if isinstance(base_schema_def, SchemaDefinition):
                fields.update(base_schema_def.fields)

        annotations = resolve_annotations(new_cls)
        for f_name, f_type in annotations.items():
            declared = attribs.get(f_name, omitted)
            if isinstance(declared, Field):
                if _wants_omit_empty(f_type):
                    declared = attr.evolve(declared, omit_empty=True)
                fields[f_name] = declared
            elif autodef:
                field_def = field_def_from_annotation(f_type, default=declared)
                if field_def:
                    fields[f_name] = field_def

        fields.update(
            {
                f_name: f
                for f_name, f in attribs.items()
                if isinstance(f, Field) and f_name not in annotations
            }
        )

        new_cls._schema_definition = SchemaDefinition(fields=fields)
        return new_cls

    def __init__(cls, clsname, bases, attribs, autodef=True):
        super().__init__(clsname, bases, attribs)


class Schema(metaclass=SchemaMetaclass):
    """
    Base Schema class. Subclass it to describe a JSON object:

        class EventSchema(Schema):
            name: str
            starts_at: Annotated[Timestamp, OmitEmpty()] = Timestamp()

            @field(serialize_to="tags", omit_empty=True)
            def tag_names(value):
                return sorted(tag.name for tag in value)

        EventSchema(name="launch", tag_names=[]).dumps()
        # '{"name":"launch"}'

    Fields which were never given a value (and have no default) are left out
    of the output. Fields with `omit_empty` are left out when their value is
    empty: None, False, 0, "", an empty collection, or a value whose marshal
    hook returned `zero`.
    """

    _schema_definition: ClassVar[SchemaDefinition]

    def __init__(self, **kwargs):
        for name, field_def in self._schema_definition.fields.items():
            if name in kwargs:
                value = kwargs[name]
            else:
                # each instance gets its own copy of a mutable default
                value = copy.copy(field_def.default)
            setattr(self, name, value)

    @classmethod
    def definition(cls) -> SchemaDefinition:
        return cls._schema_definition

    def dumps(self, **options) -> str:
        return dumps(self, **options)

    def marshal(self, **options) -> bytes:
        return marshal(self, **options)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all(
            getattr(self, name) == getattr(other, name)
            for name in self._schema_definition.fields
        )

    def __repr__(self):
        values = ", ".join(
            f"{name}={getattr(self, name)!r}"
            for name in self._schema_definition.fields
        )
        return f"{type(self).__name__}({values})"
