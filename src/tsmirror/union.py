"""Render literal value lists as TypeScript union types."""
from __future__ import annotations

import decimal
import json
import math
import numbers
from typing import Any

from .errors import UnsupportedUnionValueError


def union_member(value: Any) -> str:
    """Render one union member: strings quoted, numbers as-is."""
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    # bool is an int subclass but not a number here
    if isinstance(value, (numbers.Real, decimal.Decimal)) and not isinstance(value, bool):
        # NaN and the infinities have no literal form
        finite = value.is_finite() if isinstance(value, decimal.Decimal) else math.isfinite(value)
        if finite:
            return str(value)
    raise UnsupportedUnionValueError(value)


def union_ts_type(*values: Any) -> str:
    """
    Render values as a union type.

      union_ts_type("a", "b") -> '"a"|"b"'
      union_ts_type(1, 2.5)   -> '1|2.5'
    """
    return "|".join(union_member(value) for value in values)
