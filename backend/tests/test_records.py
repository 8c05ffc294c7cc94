"""
restmount — Record Schema Tests
=================================

What we test:
    ✅ Model resolution from classes and template instances
    ✅ Rejection of non-models and composite keys
    ✅ Strict int64 identity parsing
    ✅ Partial decoding (only fields present in the body)
    ✅ Encoding to JSON-ready dicts
"""

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from restmount.database import Base
from restmount.exceptions import (
    DecodeFailureError,
    InvalidIdentityError,
    InvalidResourceKindError,
)
from restmount.models import Note
from restmount.records import RecordSchema, parse_int64, resolve_model


class Tag(Base):
    __tablename__ = "test_tags"

    slug: Mapped[str] = mapped_column(String(50), primary_key=True)
    label: Mapped[str] = mapped_column(String(100), default="")


class Membership(Base):
    __tablename__ = "test_memberships"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TestResolveModel:

    def test_accepts_class(self):
        assert resolve_model(Note) is Note

    def test_accepts_template_instance(self):
        assert resolve_model(Note()) is Note

    @pytest.mark.parametrize("descriptor", [None, 42, "notes", object(), dict])
    def test_rejects_non_models(self, descriptor):
        with pytest.raises(InvalidResourceKindError):
            resolve_model(descriptor)

    def test_rejects_composite_primary_key(self):
        with pytest.raises(InvalidResourceKindError) as exc_info:
            RecordSchema(Membership)
        assert "composite primary key" in exc_info.value.message


class TestParseInt64:

    @pytest.mark.parametrize("raw, expected", [("1", 1), ("-7", -7), ("+3", 3), ("007", 7)])
    def test_valid(self, raw, expected):
        assert parse_int64(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "1.5", " 1", "1_000", "9223372036854775808"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidIdentityError):
            parse_int64(raw)

    def test_bounds(self):
        assert parse_int64("9223372036854775807") == 2 ** 63 - 1
        assert parse_int64("-9223372036854775808") == -(2 ** 63)


class TestRecordSchema:

    def setup_method(self):
        self.schema = RecordSchema(Note)

    def test_identity_metadata(self):
        assert self.schema.identity_key == "id"
        assert self.schema.identity_type is int
        assert "title" in self.schema.field_names

    def test_identity_accessors(self):
        record = self.schema.zero_value()
        assert self.schema.identity(record) is None
        self.schema.set_identity(record, 9)
        assert record.id == 9

    def test_parse_identity_int_key(self):
        assert self.schema.parse_identity("12") == 12
        with pytest.raises(InvalidIdentityError):
            self.schema.parse_identity("twelve")

    def test_parse_identity_string_key(self):
        assert RecordSchema(Tag).parse_identity("python") == "python"

    def test_decode_returns_only_present_fields(self):
        assert self.schema.decode(b'{"title": "hi"}') == {"title": "hi"}

    def test_decode_ignores_unknown_keys(self):
        assert self.schema.decode(b'{"title": "hi", "colour": "red"}') == {"title": "hi"}

    def test_decode_keeps_explicit_null(self):
        assert self.schema.decode(b'{"category_id": null}') == {"category_id": None}

    def test_decode_bounds_integer_fields(self):
        """Integer columns accept exactly the signed 64-bit range."""
        assert self.schema.decode(b'{"category_id": 9223372036854775807}') == {
            "category_id": 2 ** 63 - 1
        }
        with pytest.raises(DecodeFailureError):
            self.schema.decode(b'{"category_id": 9223372036854775808}')
        with pytest.raises(DecodeFailureError):
            self.schema.decode(b'{"category_id": 1000000000000000000000000000000}')

    @pytest.mark.parametrize("body", [b"", b"{", b"[]", b'"text"', b'{"pinned": "maybe"}'])
    def test_decode_failure(self, body):
        with pytest.raises(DecodeFailureError) as exc_info:
            self.schema.decode(body)
        assert exc_info.value.message == "Failed to decode json"

    def test_build_assigns_fields_on_zero_value(self):
        record = self.schema.build({"title": "hi", "pinned": True})
        assert isinstance(record, Note)
        assert record.title == "hi"
        assert record.pinned is True
        assert record.id is None

    def test_encode(self):
        record = Note(id=3, title="hi", body="", pinned=False, category_id=None)
        encoded = self.schema.encode(record)
        assert encoded["id"] == 3
        assert encoded["title"] == "hi"
        assert encoded["created_at"] is None
        assert set(encoded) == set(self.schema.field_names)

    def test_encode_many(self):
        records = [Note(id=1, title="a"), Note(id=2, title="b")]
        assert [r["id"] for r in self.schema.encode_many(records)] == [1, 2]
