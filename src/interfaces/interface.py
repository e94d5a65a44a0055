"""
Declare interfaces as classes.

An interface is a class deriving from ``Interface``.  It names the methods
a conforming object *must* expose (abstract) and the ones it *may* expose
(optional).  Names are declared either as tuples in the class body or by
decorating placeholder methods::

    class Shape(Interface):
        __abstract__ = ("area", "perimeter")
        __optional__ = ("label",)

        @abstract
        def scale(self, factor):
            \"\"\"Return a scaled copy.\"\"\"

        @optional
        def describe(self):
            ...

``Shape.abstract_methods()`` then resolves the required names across the
whole inheritance chain: a subclass that supplies a concrete body for an
inherited abstract name removes it from its own (and its descendants')
abstract set.

Interfaces can also be instantiated directly as free-standing stubs::

    square = Shape(area=4, perimeter=lambda: 8)
    square.area()        # 4
    square.scale(2)      # raises AbstractMethodInvokedError
    square.describe()    # None
"""

import functools
import types

from interfaces.errors import AbstractMethodInvokedError, InterfaceError


__all__ = ["Interface", "InterfaceMeta", "abstract", "optional"]


_ROLE = "__interface_role__"
_ABSTRACT = "abstract"
_OPTIONAL = "optional"

# Name under which an adapter keeps a reference to its subject (called to
# dereference it) in the instance dict.
SUBJECT_KEY = "_interface_subject"


# ── Declaration decorators ────────────────────────────────────────────────────

def abstract(fn):
    """Mark *fn* as an abstract method of the enclosing interface.

    The body is discarded; its name and docstring are kept on the stub
    that replaces it.
    """
    setattr(fn, _ROLE, _ABSTRACT)
    return fn


def optional(fn):
    """Mark *fn* as an optional method of the enclosing interface."""
    setattr(fn, _ROLE, _OPTIONAL)
    return fn


# ── Stub bodies ───────────────────────────────────────────────────────────────

def _abstract_stub(name, doc=None):
    def method(self, *args, **kwargs):
        raise AbstractMethodInvokedError(f"Abstract method {name} called")

    method.__name__ = name
    method.__doc__ = doc
    setattr(method, _ROLE, _ABSTRACT)
    return method


def _optional_stub(name, doc=None):
    def method(self, *args, **kwargs):
        return None

    method.__name__ = name
    method.__doc__ = doc
    setattr(method, _ROLE, _OPTIONAL)
    return method


def _names(declared) -> tuple[str, ...]:
    if isinstance(declared, str):
        return (declared,)
    return tuple(declared)


_BODY_TYPES = (types.FunctionType, types.MethodType, functools.partial)


def _override(value):
    """Turn an instance override into a method body.

    Functions, bound methods and partials are invoked with the call's
    arguments.  Anything else, classes included, is returned verbatim,
    whatever the arguments.
    """
    if isinstance(value, _BODY_TYPES):
        return value

    def constant(*args, **kwargs):
        return value

    return constant


# ── Metaclass ─────────────────────────────────────────────────────────────────

class InterfaceMeta(type):
    """Resolves the abstract and optional method sets of interface classes.

    The sets are computed once, when the class statement finishes, and
    never change afterwards.
    """

    def __new__(mcls, name, bases, namespace, **kwargs):
        parents = [b for b in bases if isinstance(b, InterfaceMeta)]
        if len(parents) > 1:
            raise InterfaceError(
                f"Interface {name} has more than one interface base: "
                + ", ".join(p.__name__ for p in parents)
            )
        parent = parents[0] if parents else None

        own_abstract, own_optional, overridden = mcls._declare(namespace)
        cls = super().__new__(mcls, name, bases, namespace, **kwargs)

        inherited_abstract = parent.abstract_methods() if parent else frozenset()
        inherited_optional = parent.optional_methods() if parent else frozenset()

        cls._own_abstract = frozenset(own_abstract)
        cls._own_optional = frozenset(own_optional)
        cls._abstract_methods = frozenset(
            own_abstract | {m for m in inherited_abstract if m not in overridden}
        )
        # optional names are never pruned by a concrete override
        cls._optional_methods = frozenset(own_optional | inherited_optional)
        return cls

    @staticmethod
    def _declare(namespace):
        """Collect declarations from a class body and install stubs.

        Returns ``(own_abstract, own_optional, overridden)`` where
        ``overridden`` holds every name with a concrete body.
        """
        own_abstract, own_optional, overridden = set(), set(), set()

        for attr, value in list(namespace.items()):
            role = getattr(value, _ROLE, None)
            if role == _ABSTRACT:
                own_abstract.add(attr)
                namespace[attr] = _abstract_stub(attr, value.__doc__)
            elif role == _OPTIONAL:
                own_optional.add(attr)
                namespace[attr] = _optional_stub(attr, value.__doc__)
            else:
                overridden.add(attr)

        for attr in _names(namespace.get("__abstract__", ())):
            own_abstract.add(attr)
            if attr not in namespace:
                namespace[attr] = _abstract_stub(attr)

        for attr in _names(namespace.get("__optional__", ())):
            own_optional.add(attr)
            if attr not in namespace:
                namespace[attr] = _optional_stub(attr)

        return own_abstract, own_optional, overridden

    def abstract_methods(cls) -> frozenset:
        """Names a conforming object must implement."""
        return cls._abstract_methods

    def optional_methods(cls) -> frozenset:
        """Names a conforming object may implement."""
        return cls._optional_methods

    def is_abstract(cls) -> bool:
        return bool(cls._abstract_methods)


# ── Root interface ────────────────────────────────────────────────────────────

class Interface(metaclass=InterfaceMeta):
    """Base class for interface declarations.

    Instantiating an interface builds a free-standing stub.  Overrides are
    given as a mapping and/or keyword arguments, one per abstract or
    optional method::

        TestInterface({"method1": 1}, method3=lambda x: x + 1)
    """

    def __init__(self, overrides=None, /, **kwargs):
        cls = type(self)
        table = dict(overrides or {}, **kwargs)
        allowed = cls.abstract_methods() | cls.optional_methods()
        for key in table:
            if key not in allowed:
                raise InterfaceError(
                    f"Attempted to assign value to method '{key}' which is "
                    f"not an abstract or optional method of {cls.__name__}"
                )
        self.__dict__.update(
            {key: _override(value) for key, value in table.items()}
        )

    def __repr__(self):
        if SUBJECT_KEY in self.__dict__:
            subject = self.__dict__[SUBJECT_KEY]()
            return f"<{type(self).__name__} adapter for {subject!r}>"
        return super().__repr__()
