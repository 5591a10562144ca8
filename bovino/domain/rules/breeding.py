from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Protocol

from bovino.domain.value_objects.sex import Sex

FEMALE_MIN_MONTHS = 15
MALE_MIN_MONTHS = 18
# Bovine gestation, used to suggest the expected calving date
GESTATION_DAYS = 283


class BreedingCandidate(Protocol):
    sexo: str | None
    fecha_nacimiento: date | None
    deleted_at: object


def months_between(birth: date, on: date) -> int:
    """Whole months of age on `on` for an animal born on `birth`.

    `year diff * 12 + month diff`, minus one while the birthday's day of month
    has not been reached yet.
    """
    months = (on.year - birth.year) * 12 + (on.month - birth.month)
    if on.day < birth.day:
        months -= 1
    return months


def eligible_as_female(birth: date, on: date) -> bool:
    return months_between(birth, on) >= FEMALE_MIN_MONTHS


def eligible_as_male(birth: date, on: date) -> bool:
    return months_between(birth, on) >= MALE_MIN_MONTHS


def is_breeding_eligible(sex: Sex | str | None, birth: date | None, on: date) -> bool:
    sex = Sex.parse(sex)
    if sex is None or birth is None:
        return False
    if sex is Sex.FEMALE:
        return eligible_as_female(birth, on)
    return eligible_as_male(birth, on)


def _eligible(animals: Iterable[BreedingCandidate], sex: Sex, on: date) -> list:
    return [
        a
        for a in animals
        if a.deleted_at is None
        and Sex.parse(a.sexo) is sex
        and is_breeding_eligible(sex, a.fecha_nacimiento, on)
    ]


def eligible_females(animals: Iterable[BreedingCandidate], on: date) -> list:
    return _eligible(animals, Sex.FEMALE, on)


def eligible_males(animals: Iterable[BreedingCandidate], on: date) -> list:
    return _eligible(animals, Sex.MALE, on)


def expected_calving_date(on: date) -> date:
    return on + timedelta(days=GESTATION_DAYS)
