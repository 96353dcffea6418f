"""Host agents and places.

Minimal reference implementations of the collaborators an Infection talks
to. A simulation may substitute its own classes as long as they offer the
same attributes and methods:

  Host:  id, age, real_age, x, y, household, has_chronic_condition,
         become_infectious / become_symptomatic / become_asymptomatic /
         recover / become_unsusceptible (each takes the disease),
         is_infectious(disease_id), is_symptomatic(disease_id),
         get_exposure_date(disease_id),
         get_num_past_infections(disease_id), get_past_infection(disease_id, i)
  Place: id, type_code, subtype_code, size, latitude, longitude, census_tract

Infectors and places are referenced, never owned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from epitraj.types import GROUP_QUARTERS_SUBTYPE, NO_PLACE_CODE


@dataclass
class Place:
    """A location where exposure happens, or a household."""
    id: int
    type_code: str = 'H'                 # H=household, S=school, W=workplace, ...
    group_quarters: Optional[str] = None  # 'college', 'prison', 'nursing_home', 'military_base'
    size: int = 1
    latitude: float = 0.0
    longitude: float = 0.0
    census_tract: Optional[int] = None

    @property
    def subtype_code(self) -> str:
        """Group-quarters subtype letter, 'X' for ordinary places."""
        if self.group_quarters is None:
            return NO_PLACE_CODE
        return GROUP_QUARTERS_SUBTYPE.get(self.group_quarters, NO_PLACE_CODE)


@dataclass
class PastInfection:
    """Record of a finished episode, kept for strain bookkeeping."""
    strains: List[int]
    recovery_date: Optional[int]
    age_at_exposure: int


@dataclass
class DiseaseStatus:
    """Per-disease flags maintained by the notification methods."""
    infectious: bool = False
    symptomatic: bool = False
    recovered: bool = False
    immune: bool = False
    exposure_date: Optional[int] = None


@dataclass
class Person:
    """A host agent."""
    id: int
    real_age: float
    x: float = 0.0
    y: float = 0.0
    household: Optional[Place] = None
    has_chronic_condition: bool = False
    status: Dict[int, DiseaseStatus] = field(default_factory=dict)
    past_infections: Dict[int, List[PastInfection]] = field(default_factory=dict)

    @property
    def age(self) -> int:
        """Age in whole years."""
        return int(self.real_age)

    def _status(self, disease) -> DiseaseStatus:
        return self.status.setdefault(disease.id, DiseaseStatus())

    # ── Notifications from the infection ──────────────────────────────

    def become_exposed(self, disease, day: int) -> None:
        st = self._status(disease)
        st.exposure_date = day
        st.recovered = False

    def become_infectious(self, disease) -> None:
        self._status(disease).infectious = True

    def become_symptomatic(self, disease) -> None:
        self._status(disease).symptomatic = True

    def become_asymptomatic(self, disease) -> None:
        self._status(disease).symptomatic = False

    def recover(self, disease) -> None:
        st = self._status(disease)
        st.infectious = False
        st.symptomatic = False
        st.recovered = True

    def become_unsusceptible(self, disease) -> None:
        self._status(disease).immune = True

    # ── Queries ───────────────────────────────────────────────────────

    def is_infectious(self, disease_id: int) -> bool:
        st = self.status.get(disease_id)
        return st is not None and st.infectious

    def is_symptomatic(self, disease_id: int) -> bool:
        st = self.status.get(disease_id)
        return st is not None and st.symptomatic

    def get_exposure_date(self, disease_id: int) -> Optional[int]:
        st = self.status.get(disease_id)
        return None if st is None else st.exposure_date

    # ── Infection history ─────────────────────────────────────────────

    def add_past_infection(self, disease_id: int, past: PastInfection) -> None:
        self.past_infections.setdefault(disease_id, []).append(past)

    def get_num_past_infections(self, disease_id: int) -> int:
        return len(self.past_infections.get(disease_id, []))

    def get_past_infection(self, disease_id: int, i: int) -> PastInfection:
        return self.past_infections[disease_id][i]
