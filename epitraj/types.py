"""Core data types for epitraj.

This module is the SINGLE SOURCE OF TRUTH for:
  - ProgressionKind, TransitionEvent enumerations
  - Reporting sentinels (NO_ID, NO_COORD, NO_PLACE_CODE)
  - Group-quarters subtype codes
  - Inter-module data transfer objects (TrajectoryPoint, TransitionDates)

Dates are integer day-numbers on the shared simulation calendar. A date
that never happens is None, never a magic integer.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class ProgressionKind(IntEnum):
    """How an infection advances from day to day.

    TRAJECTORY: dates derived from the infectivity/symptom curve
    CHRONIC:    always-infectious variant; becomes infectious a few days
                after exposure and ignores the curve
    """
    TRAJECTORY = 0
    CHRONIC    = 1


PROGRESSION_KINDS = {
    'trajectory': ProgressionKind.TRAJECTORY,
    'chronic': ProgressionKind.CHRONIC,
}


class TransitionEvent(IntEnum):
    """One-shot host notifications, in the order they are checked each day."""
    INFECTIOUS    = 0   # infectious_start_date → host.become_infectious
    SYMPTOMATIC   = 1   # symptoms_start_date   → host.become_symptomatic
    ASYMPTOMATIC  = 2   # symptoms_end_date     → host.become_asymptomatic
    RECOVERED     = 3   # infectious_end_date   → host.recover
    UNSUSCEPTIBLE = 4   # immunity_end_date     → host.become_unsusceptible


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

# Days after exposure before a chronic infection turns infectious
CHRONIC_LATENT_DAYS = 3

# Reporting sentinels
NO_ID = -1            # missing infector / place / census tract
NO_COORD = -999       # missing place coordinates
NO_PLACE_CODE = 'X'   # missing place type or subtype

# Group-quarters subtype codes for reporting
GROUP_QUARTERS_SUBTYPE = {
    'college': 'D',
    'prison': 'J',
    'nursing_home': 'L',
    'military_base': 'B',
}


# ═══════════════════════════════════════════════════════════════════════
# DATA TRANSFER OBJECTS
# ═══════════════════════════════════════════════════════════════════════

class TrajectoryPoint(NamedTuple):
    """Infectivity and symptom severity on one day of an episode."""
    infectivity: float
    symptomaticity: float


ZERO_POINT = TrajectoryPoint(0.0, 0.0)


@dataclass(frozen=True)
class TransitionDates:
    """Snapshot of everything the transition-date derivation produces."""
    exposure_date: int
    infectious_start_date: Optional[int]
    infectious_end_date: Optional[int]
    symptoms_start_date: Optional[int]
    symptoms_end_date: Optional[int]
    asymptomatic_date: Optional[int]
    immunity_end_date: Optional[int]
    asymptomatic_period: int
    symptomatic_period: int
    will_be_symptomatic: bool


def format_date(date: Optional[int]) -> int:
    """Render a possibly-unset date for text output (-1 = never)."""
    return NO_ID if date is None else date
