"""
Activation functions available to perceptrons.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Union


class Activation(Enum):
    IDENTITY = "identity"
    STEP = "step"
    BIPOLAR_STEP = "bipolar_step"
    TANH = "tanh"

    def __call__(self, value: float) -> float:
        if self is Activation.IDENTITY:
            return float(value)
        if self is Activation.STEP:
            return 1.0 if value > 0 else 0.0
        if self is Activation.BIPOLAR_STEP:
            return 1.0 if value > 0 else -1.0
        return math.tanh(value)

    def derivative_factor(self, output: float) -> float:
        """
        Factor applied to a back-propagated error signal.

        Only tanh contributes its true derivative ``1 - output**2``; the
        identity and step functions use 1.
        """
        if self is Activation.TANH:
            return 1.0 - output * output
        return 1.0

    @classmethod
    def parse(cls, value: Union["Activation", str]) -> "Activation":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown activation {value!r}. Use one of: {names}") from None
