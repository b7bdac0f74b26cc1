from enum import Enum


class Currency(str, Enum):
    INR = "INR"

    @property
    def minor_unit_factor(self) -> int:
        """Number of minor units (paise) per major unit."""
        return 100
