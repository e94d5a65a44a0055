"""Built-in conversions used when casting to a type that is not an interface.

Each row names a target type, the *hook* a subject must expose for the row
to apply, and the function that performs the conversion.  Rows for the same
target are tried in table order; the first whose hook the subject exposes
wins.
"""

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd


__all__ = ["Conversion", "BUILT_IN_CONVERSIONS", "conversions_for"]


@dataclass(frozen=True)
class Conversion:
    """One way of turning a subject into *target*."""
    target: type
    hook: str
    convert: Callable[[Any], Any]

    def applies_to(self, subject) -> bool:
        return hasattr(subject, self.hook)


# ── The table ────────────────────────────────────────────────────────────────

BUILT_IN_CONVERSIONS: tuple[Conversion, ...] = (
    # sequences
    Conversion(list, "to_list", lambda s: s.to_list()),
    Conversion(list, "tolist", lambda s: s.tolist()),
    Conversion(list, "items", lambda s: list(s.items())),
    Conversion(list, "__iter__", list),
    Conversion(tuple, "items", lambda s: tuple(s.items())),
    Conversion(tuple, "__iter__", tuple),

    # text
    Conversion(str, "__str__", str),

    # numbers; text subjects are parsed
    Conversion(int, "__int__", int),
    Conversion(int, "__index__", int),
    Conversion(int, "isdigit", int),
    Conversion(float, "__float__", float),
    Conversion(float, "__index__", float),
    Conversion(float, "isdigit", float),

    # mappings
    Conversion(dict, "to_dict", lambda s: s.to_dict()),
    Conversion(dict, "keys", dict),
    Conversion(dict, "__iter__", dict),

    # arrays and frames
    Conversion(np.ndarray, "to_numpy", lambda s: s.to_numpy()),
    Conversion(np.ndarray, "__array__", np.asarray),
    Conversion(np.ndarray, "__iter__", lambda s: np.array(list(s))),
    Conversion(pd.Series, "to_series", lambda s: s.to_series()),
    Conversion(pd.Series, "keys", pd.Series),
    Conversion(pd.DataFrame, "to_frame", lambda s: s.to_frame()),
    Conversion(pd.DataFrame, "keys", pd.DataFrame),
)


def conversions_for(target: type) -> list[Conversion]:
    """Rows registered for exactly *target*, in table order."""
    return [c for c in BUILT_IN_CONVERSIONS if c.target is target]
