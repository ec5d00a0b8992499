"""
Amount Arithmetic Module

Checked arithmetic policies for ledger amounts and token identifiers.
A policy decides what a valid magnitude is, how to add and subtract without
wrapping, and how values are written to storage. NEVER uses float.

Two policies ship with the ledger:

- UIntArithmetic: bounded unsigned integers (u32, u64, u128, u256)
- DecimalArithmetic: fixed-precision Decimal amounts with a ceiling
"""

import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation, Context
from typing import Any, Optional

from .errors import InvalidAmount


_UINT_TEXT = re.compile(r"[0-9]+")
_DECIMAL_TEXT = re.compile(r"[0-9]+(\.[0-9]+)?")


class AmountArithmetic(ABC):
    """Non-negative magnitude with checked add/sub and a zero test"""

    name: str = "amount"

    @abstractmethod
    def zero(self) -> Any:
        """The additive identity"""

    @abstractmethod
    def validate(self, value: Any) -> Any:
        """
        Return `value` in canonical form.

        Raises:
            InvalidAmount: if `value` is negative, out of range or of the wrong type
        """

    @abstractmethod
    def maximum(self) -> Any:
        """Largest representable value"""

    @abstractmethod
    def encode(self, value: Any) -> str:
        """Storage representation"""

    @abstractmethod
    def decode(self, raw: str) -> Any:
        """Inverse of encode"""

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Validated value from user-supplied text; raises InvalidAmount"""

    def is_zero(self, value: Any) -> bool:
        return value == self.zero()

    def checked_add(self, a: Any, b: Any) -> Optional[Any]:
        """a + b, or None if the result leaves the domain"""
        total = a + b
        if total > self.maximum():
            return None
        return total

    def checked_sub(self, a: Any, b: Any) -> Optional[Any]:
        """a - b, or None if the result would be negative"""
        if b > a:
            return None
        return a - b

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class UIntArithmetic(AmountArithmetic):
    """Unsigned integers in [0, 2**bits - 1]"""

    def __init__(self, bits: int = 128):
        if bits <= 0:
            raise ValueError("bits must be positive")
        self.bits = bits
        self._max = (1 << bits) - 1
        self.name = f"u{bits}"

    def zero(self) -> int:
        return 0

    def maximum(self) -> int:
        return self._max

    def validate(self, value: Any) -> int:
        # bool is an int subclass; True is not an amount
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAmount(f"{self.name} amount must be an integer", data={"value": repr(value)})
        if value < 0:
            raise InvalidAmount(f"{self.name} amount must be non-negative", data={"value": str(value)})
        if value > self._max:
            raise InvalidAmount(f"{self.name} amount exceeds {self._max}", data={"value": str(value)})
        return value

    def encode(self, value: int) -> str:
        return str(value)

    def decode(self, raw: str) -> int:
        return int(raw)

    def parse(self, text: str) -> int:
        """Parse a decimal string coming from an outer surface"""
        text = str(text).strip()
        # int() also takes signs, underscores and non-ASCII digits
        if not _UINT_TEXT.fullmatch(text):
            raise InvalidAmount(f"not a {self.name} integer", data={"value": text})
        return self.validate(int(text, 10))


U32 = UIntArithmetic(32)
U64 = UIntArithmetic(64)
U128 = UIntArithmetic(128)
U256 = UIntArithmetic(256)


class DecimalArithmetic(AmountArithmetic):
    """
    Fixed-precision decimal amounts.

    Values carry at most `places` fractional digits. Inputs with more digits
    are rejected rather than rounded, so a transfer can never move a
    different amount than the one requested.
    """

    def __init__(self, places: int = 18, maximum: Decimal = Decimal("1e30")):
        if places < 0:
            raise ValueError("places must be non-negative")
        maximum = Decimal(str(maximum))
        if maximum <= 0:
            raise ValueError("maximum must be positive")
        self.places = places
        self._quantum = Decimal(1).scaleb(-places)
        # Enough precision for every representable value
        digits = len(str(int(maximum))) + places + 2
        self._context = Context(prec=max(digits, 28))
        self._max = maximum.quantize(self._quantum, context=self._context)
        self.name = f"decimal({places})"

    def zero(self) -> Decimal:
        return Decimal(0).quantize(self._quantum, context=self._context)

    def maximum(self) -> Decimal:
        return self._max

    def validate(self, value: Any) -> Decimal:
        if isinstance(value, float) or isinstance(value, bool):
            raise InvalidAmount("decimal amounts must not be float", data={"value": repr(value)})
        try:
            amount = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmount("not a decimal amount", data={"value": str(value)})
        if not amount.is_finite():
            raise InvalidAmount("decimal amount must be finite", data={"value": str(value)})
        if amount < 0:
            raise InvalidAmount("decimal amount must be non-negative", data={"value": str(value)})
        if amount > self._max:
            raise InvalidAmount(f"decimal amount exceeds {self._max}", data={"value": str(value)})
        quantized = amount.quantize(self._quantum, context=self._context)
        if quantized != amount:
            raise InvalidAmount(
                f"decimal amount has more than {self.places} places", data={"value": str(value)}
            )
        # -0 passes the sign check; store it as plain zero
        if quantized.is_zero():
            return self.zero()
        return quantized

    def checked_add(self, a: Decimal, b: Decimal) -> Optional[Decimal]:
        total = self._context.add(a, b)
        if total > self._max:
            return None
        return total

    def checked_sub(self, a: Decimal, b: Decimal) -> Optional[Decimal]:
        if b > a:
            return None
        return self._context.subtract(a, b)

    def encode(self, value: Decimal) -> str:
        return format(value, "f")

    def decode(self, raw: str) -> Decimal:
        return Decimal(raw)

    def parse(self, text: str) -> Decimal:
        """Parse a decimal string coming from an outer surface"""
        text = str(text).strip()
        if not _DECIMAL_TEXT.fullmatch(text):
            raise InvalidAmount("not a plain decimal string", data={"value": text})
        return self.validate(text)


def amount_from_config(config) -> AmountArithmetic:
    """Build the Amount policy selected by a LedgerConfig"""
    kind = config.amount_kind.lower()
    if kind == "uint":
        return UIntArithmetic(config.amount_bits)
    if kind == "decimal":
        return DecimalArithmetic(config.decimal_places, Decimal(config.decimal_max))
    raise ValueError(f"Unknown amount kind: {config.amount_kind}")


def token_id_from_config(config) -> UIntArithmetic:
    """Build the TokenId policy selected by a LedgerConfig"""
    return UIntArithmetic(config.token_id_bits)
