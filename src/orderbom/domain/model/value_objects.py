"""Value Objects shared across the domain.

Quantities travel as decimal strings at rest.  Inside the domain every sum
goes through ``ScaledQuantity``: the value is multiplied by a fixed power of
ten, rounded half-up once, and accumulated as a plain integer, so repeated
additions of non-exact decimals never drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from orderbom.domain.exceptions import ValidationError

# Material usage is aggregated at 4 decimals; reservation rows are kept at 2.
QTY_SCALE = 10_000
RESERVATION_SCALE = 100

# Magnitudes past the double range (~1.8e308) are treated as non-finite.
MAX_EXPONENT = 308


def parse_decimal(value: object) -> Decimal | None:
    """Coerce a loosely-typed quantity to a finite Decimal, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # str() of a float is its shortest round-trip form ("1.1", not 1.1000000000000000888)
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite() or (result and result.adjusted() > MAX_EXPONENT):
        return None
    return result


@dataclass(frozen=True)
class ScaledQuantity:
    """A decimal quantity stored as an integer count of ``1/scale`` units."""

    units: int
    scale: int = QTY_SCALE

    def __post_init__(self) -> None:
        if not isinstance(self.units, int):
            raise ValidationError(
                f"Scaled units must be an integer, got {type(self.units).__name__}"
            )
        if self.scale < 1 or str(self.scale).rstrip("0") != "1":
            raise ValidationError(f"Scale must be a power of ten, got {self.scale}")

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(value: object, scale: int = QTY_SCALE) -> ScaledQuantity:
        """Parse *value* and round it half-up to the given scale.

        Unparseable, non-finite or out-of-range input yields zero rather than
        an error; callers drop zero quantities.
        """
        parsed = parse_decimal(value)
        if parsed is None:
            return ScaledQuantity(0, scale)
        units = (parsed * scale).to_integral_value(rounding=ROUND_HALF_UP)
        return ScaledQuantity(int(units), scale)

    @staticmethod
    def zero(scale: int = QTY_SCALE) -> ScaledQuantity:
        return ScaledQuantity(0, scale)

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: ScaledQuantity) -> ScaledQuantity:
        if self.scale != other.scale:
            raise ValidationError(
                f"Cannot add quantities with scales {self.scale} and {other.scale}"
            )
        return ScaledQuantity(self.units + other.units, self.scale)

    @property
    def is_zero(self) -> bool:
        return self.units == 0

    @property
    def is_positive(self) -> bool:
        return self.units > 0

    # --- Display --------------------------------------------------------------

    @property
    def places(self) -> int:
        return len(str(self.scale)) - 1

    def to_decimal(self) -> Decimal:
        return Decimal(self.units).scaleb(-self.places)

    def to_fixed(self) -> str:
        """Render with exactly ``places`` decimals, e.g. ``"3.30"``."""
        return format(self.to_decimal(), f".{self.places}f")

    def to_display(self) -> str:
        """Render with trailing zeros trimmed, e.g. ``"3.3"`` or ``"3"``."""
        fixed = self.to_fixed()
        if "." in fixed:
            fixed = fixed.rstrip("0").rstrip(".")
        return fixed

    def __str__(self) -> str:
        return self.to_display()


def normalize_decimal_string(value: object, places: int = 2) -> str:
    """Round any quantity-like value to a fixed-decimals string (``"0.00"`` if invalid)."""
    return ScaledQuantity.of(value, 10**places).to_fixed()
