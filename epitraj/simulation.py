"""Driver utilities around the infection core.

Implements:
  - run_single_episode:      one host, one disease, optional daily recording
  - daily_infection_update:  advance many infections by one day, collect
                             fatal ones, flush the reporter
  - seed_infections:         create seed infections and advance them by
                             per-host offsets so the epidemic starts mid-course

Population, contact and transmission modeling live outside this package;
these helpers only drive infections that already exist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from epitraj.config import SimulationSection
from epitraj.host import Person
from epitraj.infection import Infection
from epitraj.types import TransitionDates, TransitionEvent

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# DAILY UPDATE
# ═══════════════════════════════════════════════════════════════════════

def daily_infection_update(
    infections: Iterable[Infection],
    day: int,
    reporter=None,
) -> List[Infection]:
    """Advance every infection to `day`.

    Args:
        infections: Active infections (each advanced exactly once).
        day: Current simulation day.
        reporter: Optional InfectionReporter, flushed after all updates.

    Returns:
        Infections whose host dies from them today.
    """
    fatal = []
    for infection in infections:
        infection.update(day)
        if infection.infection_is_fatal_today:
            fatal.append(infection)
    if reporter is not None:
        reporter.flush()
    if fatal:
        logger.info("Day %d: %d fatal infections", day, len(fatal))
    return fatal


# ═══════════════════════════════════════════════════════════════════════
# SEEDING
# ═══════════════════════════════════════════════════════════════════════

def seed_infections(
    disease,
    hosts: Sequence,
    day: int,
    offsets: Optional[Sequence[int]] = None,
    rng: Optional[np.random.Generator] = None,
    max_offset: int = 0,
    sim: Optional[SimulationSection] = None,
    reporter=None,
) -> List[Infection]:
    """Infect `hosts` on `day`, each shifted back by its advancement offset.

    Offsets are taken from `offsets` if given, otherwise drawn uniformly
    from [0, max_offset] with `rng` (the 'seeding' stream), otherwise 0.
    Transitions reached by the epidemic offset day are notified at once.

    Args:
        disease: Disease to seed.
        hosts: Hosts to infect.
        day: Nominal exposure day.
        offsets: Days to advance each host's infection.
        rng: Generator used when offsets are not given.
        max_offset: Upper bound (inclusive) for drawn offsets.
        sim: Run-wide switches passed to every infection.
        reporter: Optional InfectionReporter.

    Returns:
        The new infections, in host order.

    Raises:
        ValueError: If offsets and hosts differ in length, or an offset is negative.
    """
    n = len(hosts)
    if offsets is None:
        if rng is not None and max_offset > 0:
            offsets = rng.integers(0, max_offset + 1, size=n)
        else:
            offsets = np.zeros(n, dtype=np.int64)
    if len(offsets) != n:
        raise ValueError(
            f"offsets must have one entry per host, got {len(offsets)} for {n} hosts"
        )

    infections = []
    for host, offset in zip(hosts, offsets):
        offset = int(offset)
        if offset < 0:
            raise ValueError(f"advancement offset must be >= 0, got {offset}")
        infection = Infection(disease, None, host, None, day, sim=sim, reporter=reporter)
        host.become_exposed(disease, day - offset)
        if offset > 0:
            infection.advance_seed_infection(offset)
        infection.report_infection(day)
        infections.append(infection)

    if reporter is not None:
        reporter.flush()
    logger.info(
        "Seeded %d infections of disease %d on day %d", n, disease.id, day,
    )
    return infections


# ═══════════════════════════════════════════════════════════════════════
# SINGLE-EPISODE RUN (standalone, for testing / inspection)
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class EpisodeResult:
    """Results from a single-host episode."""
    days: int = 0
    exposure_date: int = 0
    dates: Optional[TransitionDates] = None
    events: List[Tuple[int, TransitionEvent]] = field(default_factory=list)
    fatal_day: Optional[int] = None
    daily_infectivity: Optional[np.ndarray] = None
    daily_symptoms: Optional[np.ndarray] = None


def run_single_episode(
    disease,
    host=None,
    exposure_day: int = 0,
    n_days: int = 30,
    sim: Optional[SimulationSection] = None,
    reporter=None,
    record_daily: bool = False,
    intervention: Optional[Callable[[Infection, int], None]] = None,
) -> EpisodeResult:
    """Run one infection in one host from exposure for `n_days` days.

    Args:
        disease: Disease to simulate.
        host: Host to infect; a 30-year-old Person if None.
        exposure_day: Day of exposure (first simulated day).
        n_days: Number of days to simulate.
        sim: Run-wide switches.
        reporter: Optional InfectionReporter, flushed once per day.
        record_daily: If True, record live infectivity and symptoms.
        intervention: Called as intervention(infection, day) before each
            daily update.

    Returns:
        EpisodeResult. The run stops early on the day the infection is fatal.
    """
    if host is None:
        host = Person(id=0, real_age=30.0)

    infection = Infection(disease, None, host, None, exposure_day, sim=sim, reporter=reporter)
    host.become_exposed(disease, exposure_day)
    infection.report_infection(exposure_day)

    if record_daily:
        daily_infectivity = np.zeros(n_days, dtype=np.float64)
        daily_symptoms = np.zeros(n_days, dtype=np.float64)
    else:
        daily_infectivity = daily_symptoms = None

    fatal_day = None
    days_run = 0
    for i in range(n_days):
        day = exposure_day + i
        if intervention is not None:
            intervention(infection, day)
        infection.update(day)
        days_run = i + 1

        if record_daily:
            daily_infectivity[i] = infection.infectivity * infection.infectivity_multp
            daily_symptoms[i] = infection.symptoms

        if reporter is not None:
            reporter.flush()

        if infection.infection_is_fatal_today:
            fatal_day = day
            break

    return EpisodeResult(
        days=days_run,
        exposure_date=infection.exposure_date,
        dates=infection.transition_dates(),
        events=list(infection.history),
        fatal_day=fatal_day,
        daily_infectivity=daily_infectivity,
        daily_symptoms=daily_symptoms,
    )
