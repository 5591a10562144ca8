from __future__ import annotations

from enum import Enum


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "H"

    @property
    def label(self) -> str:
        return "Macho" if self is Sex.MALE else "Hembra"

    def min_breeding_months(self) -> int:
        return 18 if self is Sex.MALE else 15

    @classmethod
    def parse(cls, value: str | Sex | None) -> Sex | None:
        if value is None or value == "":
            return None
        try:
            return cls(value)
        except ValueError:
            return None
