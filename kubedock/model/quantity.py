"""Parsing and canonical formatting of cluster resource quantities."""

import re
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

_NUMBER = re.compile(r"([+-]?)([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(.*)", re.DOTALL)
_EXPONENT = re.compile(r"[eE]([+-]?[0-9]+)")

_DECIMAL_SUFFIXES = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}
_BINARY_SUFFIXES = {"Ki": 1, "Mi": 2, "Gi": 3, "Ti": 4, "Pi": 5, "Ei": 6}

_SUFFIX_FOR_EXPONENT = {exp: suffix for suffix, exp in _DECIMAL_SUFFIXES.items()}
_SUFFIX_FOR_POWER = {power: suffix for suffix, power in _BINARY_SUFFIXES.items()}

_NANO = 10**9
_MAX_DECIMAL_STEPS = 9  # from nano (-9) up to exa (18)


class QuantityFormat(Enum):
    """The notation a quantity was written in, used when printing it."""

    DECIMAL_SI = "DecimalSI"
    BINARY_SI = "BinarySI"
    DECIMAL_EXPONENT = "DecimalExponent"


@dataclass(frozen=True)
class Quantity:
    """An exact amount together with the notation it is printed in."""

    value: Fraction
    format: QuantityFormat = QuantityFormat.DECIMAL_SI

    def __str__(self) -> str:
        if self.format is QuantityFormat.BINARY_SI:
            binary = self._binary_string()
            if binary is not None:
                return binary
            return self._decimal_string(exponent_notation=False)
        return self._decimal_string(
            exponent_notation=self.format is QuantityFormat.DECIMAL_EXPONENT
        )

    def _binary_string(self):
        value = self.value
        if -1024 < value < 1024 or value.denominator != 1:
            return None
        amount = value.numerator
        power = 0
        while power < 6 and amount % 1024 == 0:
            amount //= 1024
            power += 1
        return f"{amount}{_SUFFIX_FOR_POWER.get(power, '')}"

    def _decimal_string(self, exponent_notation: bool) -> str:
        negative = self.value < 0
        scaled = abs(self.value) * _NANO
        # Precision below nano is rounded away from zero.
        nanos = -((-scaled.numerator) // scaled.denominator)
        if nanos == 0:
            return "0"
        steps = 0
        while steps < _MAX_DECIMAL_STEPS and nanos % 1000 == 0:
            nanos //= 1000
            steps += 1
        exponent = -9 + 3 * steps
        if exponent_notation:
            suffix = f"e{exponent}" if exponent else ""
        else:
            suffix = _SUFFIX_FOR_EXPONENT[exponent]
        sign = "-" if negative else ""
        return f"{sign}{nanos}{suffix}"


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity such as ``500m``, ``2Gi`` or ``1e3``.

    Raises ValueError if the text is not a valid quantity.
    """
    match = _NUMBER.fullmatch(text)
    if match is None:
        raise ValueError(f"quantities must match the regular expression: {text!r}")
    sign, number, suffix = match.groups()
    if number.startswith("."):
        number = "0" + number
    if number.endswith("."):
        number += "0"
    amount = Fraction(number)
    if sign == "-":
        amount = -amount

    if suffix in _DECIMAL_SUFFIXES:
        return Quantity(amount * Fraction(10) ** _DECIMAL_SUFFIXES[suffix])
    if suffix in _BINARY_SUFFIXES:
        return Quantity(
            amount * 1024 ** _BINARY_SUFFIXES[suffix], QuantityFormat.BINARY_SI
        )
    exponent = _EXPONENT.fullmatch(suffix)
    if exponent is not None:
        return Quantity(
            amount * Fraction(10) ** int(exponent.group(1)),
            QuantityFormat.DECIMAL_EXPONENT,
        )
    raise ValueError(f"unable to parse quantity's suffix: {text!r}")