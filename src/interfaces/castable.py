"""The cast/adapt engine.

``cast(subject, target)`` returns something that *is a* ``target``:

- the subject itself, if it already is one;
- an adapter, if ``target`` is an interface and the subject exposes every
  abstract method of it;
- a converted value, if ``target`` is a built-in type with a registered
  conversion the subject supports.

Adapters are cached per (subject, interface): casting the same object to
the same interface twice returns the same adapter until the subject is
collected.  Adapters do not keep their subject alive; the caller must.
"""

import logging
import threading
import weakref

from interfaces.conversions import conversions_for
from interfaces.errors import (
    InterfaceError,
    NonConformingObjectError,
    NonConvertableObjectError,
)
from interfaces.interface import SUBJECT_KEY, Interface


__all__ = [
    "AdapterCache",
    "Castable",
    "cast",
    "conforms",
    "convert_type",
    "missing_methods",
]

logger = logging.getLogger(__name__)


# ── Adapter cache ────────────────────────────────────────────────────────────

class AdapterCache:
    """Identity-keyed side table of adapters.

    A weakly referenceable subject gets one entry holding its adapters
    strongly, keyed by ``id(subject)``.  A finalizer drops the entry when
    the subject is collected, and adapters refer back to such subjects
    weakly, so the cache never keeps a subject alive.

    Subjects that cannot be weakly referenced (``str``, ``int``, ``list``,
    ...) are held strongly by their adapters instead, and their entries are
    weak references to the adapter, removed when the adapter is collected.
    """

    def __init__(self):
        self._by_subject = {}
        self._by_adapter = {}
        self._lock = threading.RLock()

    def __len__(self):
        return (sum(len(adapters) for adapters in self._by_subject.values())
                + len(self._by_adapter))

    def lookup(self, subject, interface):
        """Return the cached adapter for *subject* as *interface*, or ``None``."""
        adapters = self._by_subject.get(id(subject))
        if adapters is not None:
            adapter = adapters.get(interface)
        else:
            ref = self._by_adapter.get((id(subject), interface))
            adapter = ref() if ref is not None else None
        if adapter is not None and adapter.__dict__[SUBJECT_KEY]() is subject:
            return adapter
        return None

    def get_or_build(self, subject, interface, build):
        """Return the cached adapter, or store and return ``build()``.

        Nothing is stored if ``build`` raises.
        """
        with self._lock:
            adapter = self.lookup(subject, interface)
            if adapter is not None:
                logger.debug("adapter cache hit for %s as %s",
                             type(subject).__name__, interface.__name__)
                return adapter
            adapter = build()
            self._store(subject, interface, adapter)
            return adapter

    def clear(self):
        with self._lock:
            self._by_subject.clear()
            self._by_adapter.clear()

    def _store(self, subject, interface, adapter):
        key = id(subject)
        if key in self._by_subject:
            self._by_subject[key][interface] = adapter
            return
        try:
            finalizer = weakref.finalize(subject, self._forget, key)
        except TypeError:
            pair = (key, interface)
            self._by_adapter[pair] = weakref.ref(adapter, self._evict(pair))
            return
        finalizer.atexit = False
        self._by_subject[key] = {interface: adapter}

    def _forget(self, key):
        with self._lock:
            self._by_subject.pop(key, None)

    def _evict(self, pair):
        def callback(ref):
            with self._lock:
                if self._by_adapter.get(pair) is ref:
                    del self._by_adapter[pair]
        return callback


_cache = AdapterCache()


# ── Conformance ──────────────────────────────────────────────────────────────

def _is_interface(target) -> bool:
    return (isinstance(target, type)
            and issubclass(target, Interface)
            and target is not Interface)


def _exposes(subject, name) -> bool:
    return callable(getattr(subject, name, None))


def missing_methods(subject, interface) -> list[str]:
    """Abstract methods of *interface* that *subject* does not expose, sorted.

    Only callable attributes count; a data attribute of the same name is
    reported missing.
    """
    if not _is_interface(interface):
        raise InterfaceError(f"{interface} is not an interface")
    return sorted(m for m in interface.abstract_methods()
                  if not _exposes(subject, m))


def conforms(subject, interface) -> bool:
    """True if *subject* can be cast to *interface* without error."""
    if isinstance(subject, interface):
        return True
    return not missing_methods(subject, interface)


# ── Adapters ─────────────────────────────────────────────────────────────────

def _subject_ref(subject):
    """Weak reference to *subject*, or a strong one if it allows no other."""
    try:
        return weakref.ref(subject)
    except TypeError:
        return lambda: subject


def _delegate(ref, interface, name):
    def method(*args, **kwargs):
        subject = ref()
        if subject is None:
            raise ReferenceError(
                f"{interface.__name__} adapter outlived its subject")
        return getattr(subject, name)(*args, **kwargs)

    method.__name__ = name
    return method


def _build_adapter(subject, interface):
    missing = missing_methods(subject, interface)
    if missing:
        raise NonConformingObjectError(subject, interface, missing)

    ref = _subject_ref(subject)
    dispatch = {name: _delegate(ref, interface, name)
                for name in interface.abstract_methods()}
    dispatch.update({name: _delegate(ref, interface, name)
                     for name in interface.optional_methods()
                     if _exposes(subject, name) and name not in dispatch})

    adapter = object.__new__(interface)
    adapter.__dict__[SUBJECT_KEY] = ref
    adapter.__dict__.update(dispatch)
    logger.debug("built %s adapter for %s delegating %s",
                 interface.__name__, type(subject).__name__,
                 ", ".join(sorted(dispatch)))
    return adapter


# ── Conversions ──────────────────────────────────────────────────────────────

def convert_type(subject, target):
    """Convert *subject* to the non-interface type *target*.

    Uses the first built-in conversion for *target* whose hook the subject
    exposes.  Raises NonConvertableObjectError if there is none, or if the
    conversion itself rejects the subject.
    """
    for conversion in conversions_for(target):
        if conversion.applies_to(subject):
            logger.debug("converting %s to %s via %s",
                         type(subject).__name__, target.__name__,
                         conversion.hook)
            try:
                return conversion.convert(subject)
            except (TypeError, ValueError) as e:
                raise NonConvertableObjectError(subject, target) from e
    raise NonConvertableObjectError(subject, target)


# ── Entry point ──────────────────────────────────────────────────────────────

def cast(subject, target):
    """Cast *subject* to *target*.

    Parameters
    ----------
    subject : any object
    target : class
        An ``Interface`` subclass, or a type from the built-in
        conversion table.

    Returns the subject itself if it already is a *target*, a cached
    adapter for interfaces, or a freshly converted value otherwise.
    """
    if not isinstance(target, type):
        raise InterfaceError(f"{target} is not a class")

    if isinstance(subject, target):
        return subject

    if _is_interface(target):
        return _cache.get_or_build(
            subject, target, lambda: _build_adapter(subject, target))

    return convert_type(subject, target)


class Castable:
    """Mixin giving instances a ``cast`` method."""

    def cast(self, target):
        return cast(self, target)
