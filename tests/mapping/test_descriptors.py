"""
Tests for record introspection (iniconf_mapping.descriptors).

Verifies:
- Annotation -> FieldKind classification (closed set)
- Descriptor table order, tags and writability
- Zero-valued record allocation
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import pytest

from iniconf_mapping import FieldKind, classify, describe_record, ini_field, zero_record


@dataclass
class Inner:
    host: str
    port: int = 5432
    tags: list[str] = field(default_factory=lambda: ["primary"])


@dataclass
class Outer:
    name: str
    inner: Inner
    maybe: Inner | None = None
    years: int = ini_field("Age", default=0)
    hidden: str = ini_field("-", default="x")
    _private: str = ""
    computed: str = field(default="", init=False)


@dataclass
class Validated:
    count: int

    def __post_init__(self):
        if self.count <= 0:
            raise ValueError("count must be positive")


class TestClassify:
    """Annotation classification."""

    @pytest.mark.parametrize(
        "annotation, kind",
        [
            (str, FieldKind.TEXT),
            (bool, FieldKind.BOOLEAN),
            (int, FieldKind.INTEGER),
            (float, FieldKind.FLOAT),
            (datetime, FieldKind.TIMESTAMP),
            (list[str], FieldKind.TEXT_LIST),
            (list[datetime], FieldKind.TIMESTAMP_LIST),
            (Inner, FieldKind.RECORD),
            (Inner | None, FieldKind.OPTIONAL_RECORD),
            (Optional[Inner], FieldKind.OPTIONAL_RECORD),
        ],
    )
    def test_supported(self, annotation, kind):
        assert classify(annotation)[0] is kind

    @pytest.mark.parametrize(
        "annotation",
        [
            dict[str, str],
            list[int],
            list[list[str]],
            list,
            Decimal,
            complex,
            date,
            Any,
            int | str,
            str | None,
            Inner | Outer,
            "NotResolved",
        ],
    )
    def test_unsupported(self, annotation):
        assert classify(annotation) == (FieldKind.UNSUPPORTED, None)

    def test_record_type_returned(self):
        assert classify(Inner) == (FieldKind.RECORD, Inner)
        assert classify(Inner | None) == (FieldKind.OPTIONAL_RECORD, Inner)

    def test_bool_not_integer(self):
        assert classify(bool)[0] is FieldKind.BOOLEAN


class TestDescribeRecord:
    """Descriptor tables."""

    def test_declaration_order(self):
        names = [d.name for d in describe_record(Outer)]
        assert names == ["name", "inner", "maybe", "years", "hidden", "_private", "computed"]

    def test_tags(self):
        table = {d.name: d for d in describe_record(Outer)}
        assert table["years"].tag == "Age"
        assert table["hidden"].excluded
        assert table["name"].tag == ""
        assert not table["name"].excluded

    def test_writability(self):
        table = {d.name: d for d in describe_record(Outer)}
        assert table["name"].writable
        assert not table["_private"].writable
        assert not table["computed"].writable

    def test_nested_kinds(self):
        table = {d.name: d for d in describe_record(Outer)}
        assert table["inner"].kind is FieldKind.RECORD
        assert table["inner"].record_type is Inner
        assert table["maybe"].kind is FieldKind.OPTIONAL_RECORD
        assert table["maybe"].record_type is Inner

    def test_cached(self):
        assert describe_record(Outer) is describe_record(Outer)

    def test_not_a_dataclass(self):
        with pytest.raises(TypeError):
            describe_record(dict)

    def test_type_name(self):
        @dataclass
        class Holder:
            extra: dict[str, str] = field(default_factory=dict)

        (descriptor,) = describe_record(Holder)
        assert descriptor.type_name == "dict[str, str]"

    def test_ini_field_keeps_other_metadata(self):
        @dataclass
        class Holder:
            value: str = ini_field("v", default="", metadata={"doc": "kept"})

        (f,) = dataclasses.fields(Holder)
        assert f.metadata == {"doc": "kept", "ini": "v"}


class TestZeroRecord:
    """Allocation without __init__."""

    def test_defaults_and_zero_values(self):
        inner = zero_record(Inner)
        assert inner.host == ""
        assert inner.port == 5432
        assert inner.tags == ["primary"]

    def test_default_factory_called_per_instance(self):
        assert zero_record(Inner).tags is not zero_record(Inner).tags

    def test_nested_required_record_allocated(self):
        outer = zero_record(Outer)
        assert isinstance(outer.inner, Inner)
        assert outer.maybe is None
        assert outer.years == 0

    def test_post_init_not_called(self):
        assert zero_record(Validated).count == 0
