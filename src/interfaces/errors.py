"""Errors raised while declaring, instantiating and casting to interfaces.

Every error is an ``InterfaceError``, which is itself a ``TypeError``:
an object that cannot be adapted to a contract is a type mismatch.
"""


class InterfaceError(TypeError):
    """General misuse: casting to a non-class, bad instance overrides."""


class AbstractMethodInvokedError(InterfaceError, NotImplementedError):
    """An abstract method was called without an implementation."""


class NonConformingObjectError(InterfaceError):
    """The subject is missing one or more abstract methods of an interface."""

    def __init__(self, subject, interface, missing: list[str]):
        self.subject = subject
        self.interface = interface
        self.missing = list(missing)
        super().__init__(
            f"{subject} does not conform to interface {interface.__name__}.  "
            f"Expected methods not implemented: {', '.join(self.missing)}"
        )


class NonConvertableObjectError(InterfaceError):
    """No built-in conversion can turn the subject into the target type."""

    def __init__(self, subject, target):
        self.subject = subject
        self.target = target
        name = getattr(target, "__name__", target)
        super().__init__(f"Don't know how to convert {subject} to {name}")
