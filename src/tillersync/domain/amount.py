"""Currency amounts that keep the formatting they were read with."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from tillersync.domain.errors import ValidationError


@dataclass(frozen=True, order=True)
class AmountFormat:
    """How an amount was written: with a dollar sign, with thousands separators."""

    dollar: bool = True
    commas: bool = True


@dataclass(frozen=True, order=True)
class Amount:
    """A decimal value plus the format it was parsed from.

    Two amounts with the same value but a different format compare unequal;
    use ``value`` when comparing money.
    """

    value: Decimal = Decimal("0")
    format: AmountFormat = field(default_factory=AmountFormat)

    @classmethod
    def parse(cls, amount_str: str) -> "Amount":
        """Parse an amount string such as ``-$1,234.56``, ``$5`` or ``-4.50``.

        Args:
            amount_str: Amount string as shown in the sheet

        Returns:
            Amount with the detected format

        Raises:
            ValidationError: If the string is not a valid amount
        """
        text = amount_str.strip()
        if not text:
            return cls()

        negative = False
        dollar = False
        rest = text
        if rest.startswith("-"):
            negative = True
            rest = rest[1:]
        if rest.startswith("$"):
            dollar = True
            rest = rest[1:]
            if not negative and rest.startswith("-"):
                negative = True
                rest = rest[1:]

        commas = "," in rest
        rest = rest.replace(",", "")

        if not rest or rest[0] in "+-":
            raise ValidationError(f"Invalid amount '{amount_str}'")
        try:
            value = Decimal(rest)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount '{amount_str}'")
        if not value.is_finite():
            raise ValidationError(f"Invalid amount '{amount_str}'")

        if negative:
            value = value.copy_negate()
        return cls(value, AmountFormat(dollar=dollar, commas=commas))

    @classmethod
    def parse_optional(cls, amount_str: str) -> "Amount | None":
        """Parse an amount, treating an empty cell as no amount."""
        if not amount_str.strip():
            return None
        return cls.parse(amount_str)

    def is_zero(self) -> bool:
        return self.value.is_zero()

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def __str__(self) -> str:
        sign = "-" if self.value.is_signed() else ""
        dollar = "$" if self.format.dollar else ""
        magnitude = self.value.copy_abs()
        if self.format.commas:
            digits = format(magnitude, ",.2f")
        else:
            digits = str(magnitude)
        return f"{sign}{dollar}{digits}"

    def is_default(self) -> bool:
        """True for the amount an empty cell parses to, as opposed to a typed zero."""
        return self.format == AmountFormat() and self.value.as_tuple() == _EMPTY.as_tuple()

    def to_text(self) -> str:
        """Return the stored form: empty for the default amount, else the display text."""
        if self.is_default():
            return ""
        return str(self)


_EMPTY = Decimal("0")
