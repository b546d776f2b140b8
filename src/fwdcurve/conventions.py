"""
Schedule conventions for fixed income instruments.

Supported Frequencies:
- ANNUAL: One payment per year
- SEMI_ANNUAL: Two payments per year
- QUARTERLY: Four payments per year
- MONTHLY: Twelve payments per year

Times throughout the library are year fractions from the valuation
date, so a frequency is all that is needed to lay out a schedule.
"""

from enum import Enum


class Frequency(Enum):
    """Payment frequency enumeration (payments per year)."""
    ANNUAL = 1
    SEMI_ANNUAL = 2
    QUARTERLY = 4
    MONTHLY = 12
    
    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        """Parse frequency from string representation."""
        mapping = {
            "ANNUAL": cls.ANNUAL,
            "A": cls.ANNUAL,
            "1Y": cls.ANNUAL,
            "SEMI": cls.SEMI_ANNUAL,
            "SEMIANNUAL": cls.SEMI_ANNUAL,
            "SEMI_ANNUAL": cls.SEMI_ANNUAL,
            "S": cls.SEMI_ANNUAL,
            "6M": cls.SEMI_ANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "Q": cls.QUARTERLY,
            "3M": cls.QUARTERLY,
            "MONTHLY": cls.MONTHLY,
            "M": cls.MONTHLY,
            "1M": cls.MONTHLY,
        }
        key = s.upper().replace(" ", "").replace("-", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown payment frequency: {s}")
    
    @property
    def period(self) -> float:
        """Year fraction between consecutive payments."""
        return 1.0 / self.value


__all__ = [
    "Frequency",
]
