"""
Test suite for amounts module

Tests checked arithmetic for bounded unsigned integers and fixed-precision
decimals. CRITICAL: amounts never wrap, never go negative, never use float.
"""

import pytest
from decimal import Decimal

from fungible_ledger.amounts import (
    UIntArithmetic, DecimalArithmetic, U32, U128, U256,
    amount_from_config, token_id_from_config
)
from fungible_ledger.config import LedgerConfig
from fungible_ledger.errors import InvalidAmount


class TestUIntArithmetic:
    """Test bounded unsigned integer arithmetic"""

    def test_bounds(self):
        """Test the domain of common widths"""
        assert U32.maximum() == 2**32 - 1
        assert U128.maximum() == 2**128 - 1
        assert U256.maximum() == 2**256 - 1
        assert U128.zero() == 0
        assert U128.name == "u128"

    def test_invalid_width(self):
        """Test that a width must be positive"""
        with pytest.raises(ValueError):
            UIntArithmetic(0)

    def test_checked_add(self):
        """Test addition up to and past the ceiling"""
        u8 = UIntArithmetic(8)

        assert u8.checked_add(200, 55) == 255
        assert u8.checked_add(200, 56) is None
        assert u8.checked_add(0, 0) == 0

    def test_checked_sub(self):
        """Test subtraction down to and past zero"""
        assert U128.checked_sub(10, 10) == 0
        assert U128.checked_sub(10, 3) == 7
        assert U128.checked_sub(3, 10) is None

    def test_is_zero(self):
        assert U128.is_zero(0)
        assert not U128.is_zero(1)

    def test_validate_accepts_domain(self):
        """Test valid integers pass through unchanged"""
        u8 = UIntArithmetic(8)

        assert u8.validate(0) == 0
        assert u8.validate(255) == 255

    def test_validate_rejects(self):
        """Test out-of-domain and non-integer values"""
        u8 = UIntArithmetic(8)

        for bad in (-1, 256, 1.0, "5", None, True, Decimal("3")):
            with pytest.raises(InvalidAmount):
                u8.validate(bad)

    def test_parse(self):
        """Test parsing decimal strings"""
        assert U128.parse("1000") == 1000
        assert U128.parse(" 42 ") == 42
        assert U128.parse(str(2**128 - 1)) == 2**128 - 1

        for bad in ("", "1.5", "abc", "-1", str(2**128), "0x10"):
            with pytest.raises(InvalidAmount):
                U128.parse(bad)

    def test_storage_encoding(self):
        """Test that large values survive the string encoding exactly"""
        value = 2**127 + 12345
        assert U128.encode(value) == str(value)
        assert U128.decode(U128.encode(value)) == value


class TestDecimalArithmetic:
    """Test fixed-precision decimal arithmetic"""

    def setup_method(self):
        self.amounts = DecimalArithmetic(places=2, maximum=Decimal("1000"))

    def test_zero_and_maximum(self):
        assert self.amounts.zero() == Decimal("0")
        assert self.amounts.maximum() == Decimal("1000.00")
        assert self.amounts.name == "decimal(2)"

    def test_validate_quantizes(self):
        """Test that exact values are returned at the configured precision"""
        assert self.amounts.validate(Decimal("1.5")) == Decimal("1.50")
        assert self.amounts.validate("12.34") == Decimal("12.34")
        assert self.amounts.validate(7) == Decimal("7.00")

    def test_validate_rejects_float(self):
        """Test that floats never enter the ledger"""
        with pytest.raises(InvalidAmount):
            self.amounts.validate(1.5)

    def test_validate_rejects_excess_places(self):
        """Test that extra fractional digits are rejected, not rounded"""
        with pytest.raises(InvalidAmount):
            self.amounts.validate(Decimal("0.001"))

    def test_validate_rejects_out_of_range(self):
        for bad in (Decimal("-0.01"), Decimal("1000.01"), Decimal("NaN"), Decimal("Infinity"), "abc"):
            with pytest.raises(InvalidAmount):
                self.amounts.validate(bad)

    def test_checked_arithmetic(self):
        """Test ceiling and floor checks"""
        assert self.amounts.checked_add(Decimal("999.99"), Decimal("0.01")) == Decimal("1000.00")
        assert self.amounts.checked_add(Decimal("999.99"), Decimal("0.02")) is None
        assert self.amounts.checked_sub(Decimal("1.00"), Decimal("0.01")) == Decimal("0.99")
        assert self.amounts.checked_sub(Decimal("0.01"), Decimal("0.02")) is None

    def test_is_zero(self):
        assert self.amounts.is_zero(Decimal("0.00"))
        assert not self.amounts.is_zero(Decimal("0.01"))

    def test_encoding_is_plain(self):
        """Test that storage strings never use exponent notation"""
        amounts = DecimalArithmetic(places=18)
        value = amounts.validate(Decimal("1E+5"))

        assert amounts.encode(value) == "100000.000000000000000000"
        assert amounts.decode(amounts.encode(value)) == value

    def test_parse(self):
        assert self.amounts.parse(" 3.25 ") == Decimal("3.25")
        with pytest.raises(InvalidAmount):
            self.amounts.parse("3.255")

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            DecimalArithmetic(places=-1)
        with pytest.raises(ValueError):
            DecimalArithmetic(maximum=Decimal("0"))


class TestPolicyFromConfig:
    """Test building arithmetic policies from settings"""

    def test_uint_policy(self):
        config = LedgerConfig(amount_kind="uint", amount_bits=64, token_id_bits=16)

        assert amount_from_config(config).maximum() == 2**64 - 1
        assert token_id_from_config(config).maximum() == 2**16 - 1

    def test_decimal_policy(self):
        config = LedgerConfig(amount_kind="decimal", decimal_places=6, decimal_max="1000000")
        amounts = amount_from_config(config)

        assert isinstance(amounts, DecimalArithmetic)
        assert amounts.places == 6
        assert amounts.maximum() == Decimal("1000000")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            amount_from_config(LedgerConfig(amount_kind="float"))


class TestStrictParsing:
    """Test that outer surfaces only accept plain digit strings"""

    def test_uint_rejects_python_literal_forms(self):
        """Test underscores, signs and non-ASCII digits"""
        for bad in ("1_000", "+5", "١٢", "1 000", "5\n5"):
            with pytest.raises(InvalidAmount):
                U128.parse(bad)

    def test_decimal_rejects_non_plain_forms(self):
        amounts = DecimalArithmetic(places=2)

        for bad in ("1_000", "+5", "-0", "1e3", "NaN", ".5", "5."):
            with pytest.raises(InvalidAmount):
                amounts.parse(bad)
        assert amounts.parse("1000.5") == Decimal("1000.50")


class TestNegativeZero:
    """Test that signed zero never reaches storage"""

    def setup_method(self):
        self.amounts = DecimalArithmetic(places=2, maximum=Decimal("1000"))

    def test_validate_drops_sign(self):
        for value in (Decimal("-0"), "-0", "-0.00"):
            amount = self.amounts.validate(value)
            assert amount == 0
            assert not amount.is_signed()
            assert self.amounts.encode(amount) == "0.00"
