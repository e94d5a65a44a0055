"""Attributes that cast every assigned value to an interface.

Use the class decorators::

    @typed_attr_accessor(field1=TestInterface)
    @typed_attr_writer(field2=TestInterface)
    class Holder:
        pass

or put a ``TypedAttribute`` in the class body directly::

    class Holder:
        field1 = TypedAttribute(TestInterface)

Assigning ``None`` stores ``None``.  Any other value goes through
``cast``; if the cast fails the error propagates and the attribute keeps
its previous value.

An adapter stored in a typed attribute does not keep its subject alive;
the subject must outlive any call made through the attribute.
"""

from interfaces.castable import cast


__all__ = ["TypedAttribute", "typed_attr_accessor", "typed_attr_writer"]


class TypedAttribute:
    """Data descriptor storing ``cast(value, interface)`` on assignment."""

    def __init__(self, interface, readable=True):
        self.interface = interface
        self.readable = readable
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        if not self.readable:
            raise AttributeError(f"'{self.name}' is write-only")
        return instance.__dict__.get(self.name)

    def __set__(self, instance, value):
        if value is not None:
            value = cast(value, self.interface)
        instance.__dict__[self.name] = value

    def __delete__(self, instance):
        instance.__dict__.pop(self.name, None)


def _install(cls, fields, readable):
    for name, interface in fields.items():
        attribute = TypedAttribute(interface, readable=readable)
        setattr(cls, name, attribute)
        # setattr after class creation does not call __set_name__
        attribute.__set_name__(cls, name)
    return cls


def typed_attr_accessor(fields=None, /, **kwargs):
    """Class decorator adding a readable, typed attribute per field."""
    fields = dict(fields or {}, **kwargs)
    return lambda cls: _install(cls, fields, readable=True)


def typed_attr_writer(fields=None, /, **kwargs):
    """Class decorator adding a write-only typed attribute per field."""
    fields = dict(fields or {}, **kwargs)
    return lambda cls: _install(cls, fields, readable=False)
