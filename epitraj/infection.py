"""Infection — one disease episode in one host.

Implements:
  - Transition-date derivation from the episode's trajectory:
      infectious start/end, symptoms start/end, asymptomatic onset,
      immunity end, asymptomatic/symptomatic day counts
  - Daily advancement: live infectivity/symptoms, one-shot host
    notifications on transition dates, case-fatality check
  - Chronic (always-infectious) variant, dispatched once at construction
  - Interventions that reshape the trajectory and re-derive every date
  - Seed-infection time shift
  - Strain mutation bookkeeping

Dates are calendar days; offsets into the trajectory are days since
exposure. A date that never happens is None. The derivation is
idempotent: it resets every date and counter before scanning.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

import numpy as np

from epitraj.config import SimulationSection
from epitraj.host import PastInfection
from epitraj.trajectory import Trajectory
from epitraj.types import (
    CHRONIC_LATENT_DAYS,
    ProgressionKind,
    TransitionDates,
    TransitionEvent,
    format_date,
)

logger = logging.getLogger(__name__)


class PreconditionError(RuntimeError):
    """Caller logic error: no trajectory available, undated seed infection."""


class InvalidModificationError(ValueError):
    """Intervention rejected: negative multiplier or span already elapsed.

    Raised before anything is touched, so the infection is unchanged.
    """


# Host method called for each transition
HOST_CALLBACKS = {
    TransitionEvent.INFECTIOUS: 'become_infectious',
    TransitionEvent.SYMPTOMATIC: 'become_symptomatic',
    TransitionEvent.ASYMPTOMATIC: 'become_asymptomatic',
    TransitionEvent.RECOVERED: 'recover',
    TransitionEvent.UNSUSCEPTIBLE: 'become_unsusceptible',
}


# ═══════════════════════════════════════════════════════════════════════
# TRANSITION-DATE DERIVATION
# ═══════════════════════════════════════════════════════════════════════

def derive_transition_dates(
    infectivity: np.ndarray,
    symptomaticity: np.ndarray,
    exposure_date: int,
    infectivity_threshold: float,
    symptomaticity_threshold: float,
    days_recovered: Optional[int],
) -> TransitionDates:
    """Scan a trajectory's curves and compute every transition date.

    Per day offset t:
      infective    = infectivity[t] > infectivity_threshold
      symptomatic  = symptomaticity[t] > symptomaticity_threshold
      asymptomatic = infective and not symptomatic

    infectious_start: first infective day
    asymptomatic_date: infectious_start if that day is asymptomatic
    infectious_end:   one past the last infective day
    symptoms_start:   first symptomatic day
    symptoms_end:     one past the last symptomatic day
    immunity_end:     infectious_end + days_recovered (None if either is None)

    Args:
        infectivity: Summed infectivity per offset.
        symptomaticity: Symptom severity per offset.
        exposure_date: Calendar day of offset 0.
        infectivity_threshold: Strict threshold for infective days.
        symptomaticity_threshold: Strict threshold for symptomatic days.
        days_recovered: Immunity waning duration; None = never wanes.

    Returns:
        TransitionDates for this curve.
    """
    infective = np.asarray(infectivity) > infectivity_threshold
    symptomatic = np.asarray(symptomaticity) > symptomaticity_threshold
    asymptomatic = infective & ~symptomatic

    infectious_start = infectious_end = asymptomatic_date = None
    inf_days = np.flatnonzero(infective)
    if len(inf_days) > 0:
        first = int(inf_days[0])
        infectious_start = exposure_date + first
        infectious_end = exposure_date + int(inf_days[-1]) + 1
        if asymptomatic[first]:
            asymptomatic_date = infectious_start

    symptoms_start = symptoms_end = None
    symp_days = np.flatnonzero(symptomatic)
    if len(symp_days) > 0:
        symptoms_start = exposure_date + int(symp_days[0])
        symptoms_end = exposure_date + int(symp_days[-1]) + 1

    if days_recovered is not None and infectious_end is not None:
        immunity_end = infectious_end + days_recovered
    else:
        immunity_end = None

    return TransitionDates(
        exposure_date=exposure_date,
        infectious_start_date=infectious_start,
        infectious_end_date=infectious_end,
        symptoms_start_date=symptoms_start,
        symptoms_end_date=symptoms_end,
        asymptomatic_date=asymptomatic_date,
        immunity_end_date=immunity_end,
        asymptomatic_period=int(np.sum(asymptomatic)),
        symptomatic_period=int(np.sum(symptomatic)),
        will_be_symptomatic=symptoms_start is not None,
    )


# ═══════════════════════════════════════════════════════════════════════
# INFECTION
# ═══════════════════════════════════════════════════════════════════════

class Infection:
    """One episode of `disease` in `host`, exposed on `day`.

    The infection exclusively owns its trajectory: reshaping goes through
    the modify_* methods, which always end by re-deriving the dates.

    Args:
        disease: Disease parameter provider.
        infector: Infecting host, or None for seed infections.
        host: Infected host.
        place: Place of exposure, or None.
        day: Exposure day.
        sim: Run-wide switches (epidemic offset, chronic-condition modeling).
        reporter: Optional InfectionReporter receiving one record per
            notified transition.

    Raises:
        PreconditionError: If the disease has no trajectory for the host's age.
    """

    def __init__(
        self,
        disease,
        infector,
        host,
        place,
        day: int,
        sim: Optional[SimulationSection] = None,
        reporter=None,
    ):
        self.disease = disease
        self.infector = infector
        self.host = host
        self.place = place
        self.sim = sim if sim is not None else SimulationSection()
        self.reporter = reporter
        self.infectee_count = 0
        self.is_susceptible = True

        self.infectivity_multp = 1.0
        self.infectivity = 0.0
        self.susceptibility = 0.0
        self.symptoms = 0.0

        self.asymptomatic_period = 0
        self.symptomatic_period = 0

        self.exposure_date = day
        self.infectious_start_date: Optional[int] = None
        self.infectious_end_date: Optional[int] = None
        self.symptoms_start_date: Optional[int] = None
        self.symptoms_end_date: Optional[int] = None
        self.asymptomatic_date: Optional[int] = None
        self.immunity_end_date: Optional[int] = None

        self.will_be_symptomatic = False
        self.infection_is_fatal_today = False
        self.history: List[Tuple[int, TransitionEvent]] = []
        self._fired: Set[TransitionEvent] = set()

        self.immune_response = disease.generates_immunity(host.real_age)

        trajectory = disease.get_trajectory(host.age)
        if trajectory is None:
            raise PreconditionError(
                f"no trajectory for disease {disease.id} at age {host.age}"
            )
        self.trajectory: Optional[Trajectory] = trajectory

        if disease.progression_kind is ProgressionKind.CHRONIC:
            self._advance = self._chronic_update
        else:
            self._advance = self._trajectory_update

        self.set_transition_dates()

    # ── Derivation ────────────────────────────────────────────────────

    def set_transition_dates(self) -> None:
        """Re-derive every date and counter from the current trajectory."""
        infectivity, symptomaticity = self.trajectory.curves()
        dates = derive_transition_dates(
            infectivity,
            symptomaticity,
            self.exposure_date,
            self.disease.infectivity_threshold,
            self.disease.symptomaticity_threshold,
            self.disease.days_recovered,
        )
        self.infectious_start_date = dates.infectious_start_date
        self.infectious_end_date = dates.infectious_end_date
        self.symptoms_start_date = dates.symptoms_start_date
        self.symptoms_end_date = dates.symptoms_end_date
        self.asymptomatic_date = dates.asymptomatic_date
        self.immunity_end_date = dates.immunity_end_date
        self.asymptomatic_period = dates.asymptomatic_period
        self.symptomatic_period = dates.symptomatic_period
        self.will_be_symptomatic = dates.will_be_symptomatic

    def transition_dates(self) -> TransitionDates:
        """Snapshot of the current dates and counters."""
        return TransitionDates(
            exposure_date=self.exposure_date,
            infectious_start_date=self.infectious_start_date,
            infectious_end_date=self.infectious_end_date,
            symptoms_start_date=self.symptoms_start_date,
            symptoms_end_date=self.symptoms_end_date,
            asymptomatic_date=self.asymptomatic_date,
            immunity_end_date=self.immunity_end_date,
            asymptomatic_period=self.asymptomatic_period,
            symptomatic_period=self.symptomatic_period,
            will_be_symptomatic=self.will_be_symptomatic,
        )

    def set_trajectory(self, trajectory: Trajectory) -> None:
        """Attach a new trajectory and re-derive the dates."""
        if trajectory is None:
            raise PreconditionError("cannot attach a missing trajectory")
        self.trajectory = trajectory
        self.set_transition_dates()

    # ── Daily advancement ─────────────────────────────────────────────

    def update(self, today: int) -> None:
        """Advance the infection to `today`. Call once per simulated day."""
        self._advance(today)

    def _notify(self, event: TransitionEvent, day: int) -> None:
        # Each transition reaches the host at most once per episode
        if event in self._fired:
            return
        self._fired.add(event)
        getattr(self.host, HOST_CALLBACKS[event])(self.disease)
        self.history.append((day, event))
        if self.reporter is not None:
            self.reporter.record_event(self, day, event)

    def _trajectory_update(self, today: int) -> None:
        self.infection_is_fatal_today = False
        if self.trajectory is None:
            return

        point = self.trajectory.get_data_point(today - self.exposure_date)
        self.infectivity = point.infectivity
        self.symptoms = point.symptomaticity

        if today == self.infectious_start_date:
            self._notify(TransitionEvent.INFECTIOUS, today)

        if today == self.symptoms_start_date:
            self._notify(TransitionEvent.SYMPTOMATIC, today)

        # Symptoms ending on the recovery day are covered by recover()
        if (today == self.symptoms_end_date
                and self.symptoms_end_date != self.infectious_end_date):
            self._notify(TransitionEvent.ASYMPTOMATIC, today)

        if today == self.infectious_end_date:
            self._notify(TransitionEvent.RECOVERED, today)

        if today == self.immunity_end_date:
            self._notify(TransitionEvent.UNSUSCEPTIBLE, today)
            self.is_susceptible = False

        if (self.disease.case_fatality_enabled
                and self.is_symptomatic()
                and self.symptoms_start_date is not None):
            days_symptomatic = today - self.symptoms_start_date
            if self.sim.enable_chronic_condition:
                fatal = self.disease.is_fatal(self.host, self.symptoms, days_symptomatic)
            else:
                fatal = self.disease.is_fatal(
                    self.host.real_age, self.symptoms, days_symptomatic,
                )
            if fatal:
                self.set_fatal_infection()
                logger.info(
                    "Fatal infection: disease %d host %s day %d (%d days symptomatic)",
                    self.disease.id, self.host.id, today, days_symptomatic,
                )
                return

    def _chronic_update(self, today: int) -> None:
        # Ignores the trajectory and thresholds entirely
        if (today - self.exposure_date > CHRONIC_LATENT_DAYS
                and not self.host.is_infectious(self.disease.id)):
            self._notify(TransitionEvent.INFECTIOUS, today)

    def set_fatal_infection(self) -> None:
        self.infection_is_fatal_today = True

    # ── Queries ───────────────────────────────────────────────────────

    def is_infectious(self) -> bool:
        """Live infectivity above threshold (not date based)."""
        return self.infectivity > self.disease.infectivity_threshold

    def is_symptomatic(self) -> bool:
        """Live symptoms above threshold (not date based)."""
        return self.symptoms > self.disease.symptomaticity_threshold

    def get_infectivity(self, day: int) -> float:
        """Trajectory infectivity on `day`, scaled by the multiplier."""
        point = self.trajectory.get_data_point(day - self.exposure_date)
        return point.infectivity * self.infectivity_multp

    def get_symptoms(self, day: int) -> float:
        """Trajectory symptom severity on `day` (unscaled)."""
        point = self.trajectory.get_data_point(day - self.exposure_date)
        return point.symptomaticity

    def add_infectee(self) -> None:
        self.infectee_count += 1

    # ── Seed infections ───────────────────────────────────────────────

    def advance_seed_infection(self, days_to_advance: int) -> None:
        """Move exposure back by `days_to_advance` days.

        Transitions already reached by the epidemic offset day are
        notified immediately.

        Raises:
            PreconditionError: If the infection never becomes infectious.
        """
        if self.infectious_end_date is None:
            raise PreconditionError(
                "only fully dated seed infections can be advanced"
            )
        self.exposure_date -= days_to_advance
        self.set_transition_dates()

        baseline = self.sim.epidemic_offset
        for event, date in (
            (TransitionEvent.INFECTIOUS, self.infectious_start_date),
            (TransitionEvent.SYMPTOMATIC, self.symptoms_start_date),
            (TransitionEvent.RECOVERED, self.infectious_end_date),
            (TransitionEvent.UNSUSCEPTIBLE, self.immunity_end_date),
        ):
            if date is not None and date <= baseline:
                self._notify(event, baseline)
                if event is TransitionEvent.UNSUSCEPTIBLE:
                    self.is_susceptible = False

    # ── Interventions ─────────────────────────────────────────────────

    def _offset(self, day: int) -> int:
        return day - self.exposure_date

    @staticmethod
    def _check_multiplier(multp: float) -> None:
        if multp < 0:
            raise InvalidModificationError(
                f"cannot modify: negative multiplier {multp}"
            )

    def modify_symptomatic_period(self, multp: float, today: int) -> None:
        """Scale the symptomatic span by `multp`.

        Before onset the whole span is scaled; during it, the days left
        until recovery are scaled from today, keeping at least one.

        Raises:
            InvalidModificationError: multp < 0, or today is at or past
                the end of the infectious period.
        """
        self._check_multiplier(multp)
        if self.infectious_end_date is None or today >= self.infectious_end_date:
            raise InvalidModificationError("cannot modify: past symptomatic period")

        end = self._offset(self.infectious_end_date)
        if self.symptoms_start_date is None:
            logger.debug(
                "Host %s: no symptomatic period to modify for disease %d",
                self.host.id, self.disease.id,
            )
        elif today < self.symptoms_start_date:
            self.trajectory.modify_symp_period(
                self._offset(self.symptoms_start_date),
                end,
                int(self.symptomatic_period * multp),
            )
        else:
            days_left = max(1, int((self.infectious_end_date - today) * multp))
            self.trajectory.modify_symp_period(self._offset(today), end, days_left)
        self.set_transition_dates()

    def modify_asymptomatic_period(self, multp: float, today: int) -> None:
        """Scale the pre-symptomatic infectious span by `multp`.

        The span runs from infectious start to symptom onset (or to the
        end of infectiousness when the episode never turns symptomatic).

        Raises:
            InvalidModificationError: multp < 0, the episode is never
                infectious, or today is at or past the end of the span.
        """
        self._check_multiplier(multp)
        span_end = (self.symptoms_start_date
                    if self.symptoms_start_date is not None
                    else self.infectious_end_date)
        if (self.infectious_start_date is None
                or span_end is None
                or today >= span_end):
            logger.debug(
                "Host %s: rejected asymptomatic modification on day %d "
                "(span end %s)", self.host.id, today, span_end,
            )
            raise InvalidModificationError("cannot modify: past asymptomatic period")

        end = self._offset(span_end)
        if today < self.infectious_start_date:
            length = int((span_end - self.infectious_start_date) * multp)
            self.trajectory.modify_asymp_period(
                self._offset(self.infectious_start_date), end, length,
            )
        else:
            days_left = max(1, int((span_end - today) * multp))
            self.trajectory.modify_asymp_period(self._offset(today), end, days_left)
        self.set_transition_dates()

    def modify_infectious_period(self, multp: float, today: int) -> None:
        """Scale the whole infectious period: asymptomatic leg, then symptomatic leg.

        Raises:
            InvalidModificationError: multp < 0, or today is at or past
                the end of the infectious period.
        """
        self._check_multiplier(multp)
        if self.infectious_end_date is None or today >= self.infectious_end_date:
            raise InvalidModificationError("cannot modify: past infectious period")

        if self.symptoms_start_date is None or today < self.symptoms_start_date:
            self.modify_asymptomatic_period(multp, today)

        # The asymptomatic leg may have removed every infective day
        if self.infectious_end_date is not None and today < self.infectious_end_date:
            self.modify_symptomatic_period(multp, today)

    def modify_develops_symptoms(self, symptoms: bool, today: int) -> None:
        """Force (True) or forbid (False) symptom development.

        Forced symptoms start at the later of today and infectious start
        and last the disease's baseline symptomatic duration, cut short
        at the end of the infectious period.

        Raises:
            InvalidModificationError: today is at or past infectious end,
                or past symptom onset of an episode that has an
                asymptomatic-infective phase.
        """
        if (self.infectious_end_date is None
                or today >= self.infectious_end_date
                or (self.symptoms_start_date is not None
                    and today >= self.symptoms_start_date
                    and self.asymptomatic_date is not None)):
            raise InvalidModificationError("cannot modify: past symptomatic period")

        if self.will_be_symptomatic == symptoms:
            return

        if symptoms:
            onset = max(today, self.infectious_start_date)
            # Symptoms never outlast infectiousness
            self.symptomatic_period = min(
                self.disease.days_symptomatic, self.infectious_end_date - onset,
            )
        else:
            onset = max(today, self.symptoms_start_date)
            self.symptomatic_period = 0
        self.trajectory.modify_develops_symp(self._offset(onset), self.symptomatic_period)
        self.set_transition_dates()
        logger.debug(
            "Host %s: symptoms %s for disease %d from day %d",
            self.host.id, "forced" if symptoms else "suppressed",
            self.disease.id, onset,
        )

    # ── Strains & history ─────────────────────────────────────────────

    def get_strains(self) -> List[int]:
        return self.trajectory.get_all_strains()

    def mutate(self, old_strain: int, new_strain: int, day: int) -> None:
        """Replace old_strain by new_strain from calendar `day` onward."""
        self.trajectory.mutate(old_strain, new_strain, self._offset(day))
        self.set_transition_dates()

    def get_num_past_infections(self) -> int:
        return self.host.get_num_past_infections(self.disease.id)

    def get_past_infection(self, i: int) -> PastInfection:
        return self.host.get_past_infection(self.disease.id, i)

    def to_past_infection(self) -> PastInfection:
        """Summary record for the host's infection history."""
        return PastInfection(
            strains=self.get_strains(),
            recovery_date=self.infectious_end_date,
            age_at_exposure=self.host.age,
        )

    # ── Reporting ─────────────────────────────────────────────────────

    def report_infection(self, day: int) -> None:
        """Emit the exposure record, if a reporter is attached."""
        if self.reporter is not None:
            self.reporter.report_infection(self, day)

    def __str__(self) -> str:
        return (
            f"INF: disease {self.disease.id} in host {self.host.id} "
            f"dates: exposed {self.exposure_date}, "
            f"infectious {format_date(self.infectious_start_date)}, "
            f"symptomatic {format_date(self.symptoms_start_date)}, "
            f"recovered {format_date(self.infectious_end_date)}, "
            f"susceptible {format_date(self.immunity_end_date)} "
            f"will have symp? {int(self.will_be_symptomatic)}, "
            f"suscept: {self.susceptibility:.3f} "
            f"infectivity: {self.infectivity:.3f} "
            f"infectivity_multp: {self.infectivity_multp:.3f} "
            f"symptoms: {self.symptoms:.3f}"
        )
