"""
restmount — Record Schemas
============================

What:  Resolves, once per registered model, everything the generic CRUD
       handlers need to know about a record shape.
How:   Inspects the SQLAlchemy mapper and builds two pydantic models from
       its column attributes: a read model (serialization, from_attributes)
       and a write model (decoding, every field optional so that
       `exclude_unset` yields exactly the fields a client sent).
Who:   Built by the registration engine; used by the CRUD handlers.
When:  Registration time. Nothing here is re-derived per request.

Capabilities exposed per model:
    zero_value()          → a fresh, empty instance
    identity(record)      → the primary key value
    set_identity(r, v)    → assign the primary key value
    parse_identity(raw)   → path segment → primary key value
    decode(raw_body)      → {field: value} for the fields present
    build(fields)         → zero_value() with those fields assigned
    encode(record)        → JSON-ready dict
"""

import re
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError, conint, create_model
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from restmount.exceptions import (
    DecodeFailureError,
    InvalidIdentityError,
    InvalidResourceKindError,
)

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Integer columns are signed 64-bit in every supported database
Int64 = conint(ge=INT64_MIN, le=INT64_MAX)


def parse_int64(raw: str) -> int:
    """
    Parse a base-10 signed 64-bit integer.

    Stricter than int(): surrounding whitespace, underscores and
    out-of-range values are rejected.
    """
    if raw is None or not _INT_PATTERN.match(raw):
        raise InvalidIdentityError(raw_id="" if raw is None else raw)
    value = int(raw, 10)
    if value < INT64_MIN or value > INT64_MAX:
        raise InvalidIdentityError(raw_id=raw, context={"reason": "out of range"})
    return value


def resolve_model(descriptor: Any) -> Type[Any]:
    """
    Return the mapped class behind a registration descriptor.

    Accepts a mapped class or an instance of one used as a type template.
    Anything else raises InvalidResourceKindError.
    """
    if descriptor is None:
        raise InvalidResourceKindError(descriptor)
    try:
        target = sa_inspect(descriptor)
    except NoInspectionAvailable as exc:
        raise InvalidResourceKindError(descriptor) from exc
    if isinstance(target, Mapper):
        return target.class_
    mapper = getattr(target, "mapper", None)
    if isinstance(mapper, Mapper):
        return mapper.class_
    raise InvalidResourceKindError(descriptor)


def _column_python_type(column: Any) -> Any:
    try:
        return column.type.python_type
    except NotImplementedError:
        return Any


class RecordSchema:
    """Per-model capability bundle; see module docstring."""

    def __init__(self, model: Type[Any]):
        mapper: Mapper = sa_inspect(model)
        primary_key = mapper.primary_key
        if len(primary_key) != 1:
            raise InvalidResourceKindError(
                model,
                message=(
                    f"{model.__name__} has a composite primary key; "
                    f"resources need a single identity column"
                ),
            )

        self.model = model
        self.identity_column = primary_key[0]
        self.identity_key = mapper.get_property_by_column(self.identity_column).key
        self.identity_type = _column_python_type(self.identity_column)

        fields: Dict[str, Any] = {}
        for attr in mapper.column_attrs:
            py_type = _column_python_type(attr.columns[0])
            if py_type is int:
                py_type = Int64
            fields[attr.key] = (Optional[py_type], None)
        self.field_names: List[str] = list(fields)

        self.read_model: Type[BaseModel] = create_model(
            f"{model.__name__}Record",
            __config__=ConfigDict(from_attributes=True, protected_namespaces=()),
            **fields,
        )
        self.write_model: Type[BaseModel] = create_model(
            f"{model.__name__}Payload",
            __config__=ConfigDict(protected_namespaces=()),
            **fields,
        )

    # ── Identity ──────────────────────────────────────────────────────────

    def zero_value(self) -> Any:
        return self.model()

    def identity(self, record: Any) -> Any:
        return getattr(record, self.identity_key)

    def set_identity(self, record: Any, value: Any) -> None:
        setattr(record, self.identity_key, value)

    def parse_identity(self, raw: str) -> Any:
        """
        Convert a path segment into an identity value.

        Integer keys are parsed as base-10 int64; other key types are
        coerced through their Python type (str, uuid.UUID, ...).
        """
        if self.identity_type is int:
            return parse_int64(raw)
        if self.identity_type is Any:
            return raw
        try:
            return self.identity_type(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidIdentityError(raw_id=raw) from exc

    # ── Wire format ───────────────────────────────────────────────────────

    def decode(self, raw: bytes) -> Dict[str, Any]:
        """
        Decode a JSON object body into the fields it actually contains.

        Unknown keys are ignored. Raises DecodeFailureError on malformed
        JSON, a non-object document, or an ill-typed value.
        """
        try:
            payload = self.write_model.model_validate_json(raw or b"")
        except ValidationError as exc:
            raise DecodeFailureError(
                context={
                    "model": self.model.__name__,
                    "errors": exc.error_count(),
                },
            ) from exc
        return payload.model_dump(exclude_unset=True)

    def build(self, fields: Dict[str, Any]) -> Any:
        record = self.zero_value()
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    def encode(self, record: Any) -> Dict[str, Any]:
        return self.read_model.model_validate(record).model_dump(mode="json")

    def encode_many(self, records: List[Any]) -> List[Dict[str, Any]]:
        return [self.encode(record) for record in records]
