"""Tests for typed attributes."""

import gc

import pytest

from interfaces.errors import NonConformingObjectError
from interfaces.typed_accessors import TypedAttribute, typed_attr_accessor

from interface_fixtures import (
    ClassConformingToTestInterface,
    ClassWithTypedAttributes,
    FullyImplementedClass,
    TestInterface,
)


class TestTypedAccessor:

    def test_conforming_object_is_cast_on_assignment(self):
        instance = ClassWithTypedAttributes()
        subject = ClassConformingToTestInterface()
        instance.field1 = subject
        assert isinstance(instance.field1, TestInterface)
        assert instance.field1.method3(1) == 4

    def test_instance_of_interface_is_stored_as_is(self):
        instance = ClassWithTypedAttributes()
        value = FullyImplementedClass()
        instance.field1 = value
        assert instance.field1 is value

    def test_non_conforming_object_raises(self):
        instance = ClassWithTypedAttributes()
        with pytest.raises(NonConformingObjectError):
            instance.field1 = object()

    def test_failed_assignment_keeps_previous_value(self):
        instance = ClassWithTypedAttributes()
        previous = FullyImplementedClass()
        instance.field1 = previous
        with pytest.raises(NonConformingObjectError):
            instance.field1 = object()
        assert instance.field1 is previous

    def test_none_is_stored_without_casting(self):
        instance = ClassWithTypedAttributes()
        instance.field1 = FullyImplementedClass()
        instance.field1 = None
        assert instance.field1 is None

    def test_unassigned_reads_none(self):
        assert ClassWithTypedAttributes().field1 is None

    def test_delete_resets_to_none(self):
        instance = ClassWithTypedAttributes()
        instance.field1 = FullyImplementedClass()
        del instance.field1
        assert instance.field1 is None

    def test_fields_are_per_instance(self):
        a = ClassWithTypedAttributes()
        b = ClassWithTypedAttributes()
        a.field1 = FullyImplementedClass()
        assert b.field1 is None


class TestTypedWriter:

    def test_writer_casts_and_stores(self):
        instance = ClassWithTypedAttributes()
        instance.field2 = ClassConformingToTestInterface()
        assert isinstance(instance.__dict__["field2"], TestInterface)

    def test_writer_is_not_readable(self):
        instance = ClassWithTypedAttributes()
        instance.field2 = None
        with pytest.raises(AttributeError, match="write-only"):
            instance.field2

    def test_writer_rejects_non_conforming(self):
        instance = ClassWithTypedAttributes()
        with pytest.raises(NonConformingObjectError):
            instance.field2 = object()
        assert "field2" not in instance.__dict__


# ── Declaration forms ────────────────────────────────────────────────────────

def test_descriptor_in_class_body():
    class Holder:
        target = TypedAttribute(TestInterface)

    holder = Holder()
    holder.target = ClassConformingToTestInterface()
    assert isinstance(holder.target, TestInterface)
    assert isinstance(Holder.target, TypedAttribute)
    assert Holder.target.name == "target"


def test_accessor_from_mapping():
    @typed_attr_accessor({"target": TestInterface})
    class Holder:
        pass

    holder = Holder()
    subject = ClassConformingToTestInterface()
    holder.target = subject
    assert holder.target.method2() == 2


def test_conversion_target():
    @typed_attr_accessor(count=int)
    class Counter:
        pass

    counter = Counter()
    counter.count = "12"
    assert counter.count == 12


def test_field_does_not_keep_subject_alive():
    instance = ClassWithTypedAttributes()
    subject = ClassConformingToTestInterface()
    instance.field1 = subject
    del subject
    gc.collect()
    with pytest.raises(ReferenceError):
        instance.field1.method1()
