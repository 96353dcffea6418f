"""Disease parameter provider.

Implements:
  - Infectivity / symptomaticity thresholds
  - Immunity waning duration after recovery (None = never)
  - Immune-memory generation, age-banded Bernoulli draw
  - Age-banded trajectory selection (shared views of cached templates)
  - Daily case-fatality hazard:
        p = prob_by_day[d] × age_factor(age) × (chronic hazard if applicable)
  - Progression kind, mapped once from the configured string

All stochastic decisions draw from the disease's own RNG stream.
"""

from __future__ import annotations

import numbers
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from epitraj.config import DiseaseSection, SimulationConfig
from epitraj.rng import get_disease_rng
from epitraj.trajectory import Trajectory, step_trajectory
from epitraj.types import PROGRESSION_KINDS, ProgressionKind


# ═══════════════════════════════════════════════════════════════════════
# PARAMETER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════

def age_band_value(
    breaks: Sequence[float],
    values: Sequence[float],
    age: float,
) -> float:
    """Look up a per-age-band value.

    Band i covers breaks[i-1] <= age < breaks[i]; values has one more
    entry than breaks.
    """
    idx = int(np.searchsorted(np.asarray(breaks, dtype=np.float64), age, side='right'))
    return float(values[idx])


def daily_fatality_probability(
    cfg: DiseaseSection,
    age: float,
    symptoms: float,
    days_symptomatic: int,
    chronic_condition: bool = False,
) -> float:
    """Probability of dying today from this disease.

    Zero when case fatality is disabled, when symptoms do not exceed
    min_symptoms_for_death, or when days_symptomatic falls outside the
    per-day table.

    Args:
        cfg: Disease configuration section.
        age: Host's continuous age (years).
        symptoms: Current symptom severity.
        days_symptomatic: Days since symptom onset (0 on onset day).
        chronic_condition: Host carries a chronic condition.

    Returns:
        Daily death probability (may exceed 1 for extreme multipliers;
        callers treat it as certain death).
    """
    if not cfg.case_fatality_enabled:
        return 0.0
    if symptoms <= cfg.min_symptoms_for_death:
        return 0.0
    table = cfg.case_fatality_prob_by_day
    if days_symptomatic < 0 or days_symptomatic >= len(table):
        return 0.0
    p = table[days_symptomatic] * age_band_value(
        cfg.case_fatality_age_breaks, cfg.case_fatality_age_factors, age,
    )
    if chronic_condition:
        p *= cfg.chronic_condition_hazard
    return p


def template_from_band(band: Dict) -> Trajectory:
    """Build a trajectory from one configured age band."""
    return Trajectory(band['infectivity'], band['symptomaticity'])


# ═══════════════════════════════════════════════════════════════════════
# DISEASE
# ═══════════════════════════════════════════════════════════════════════

class Disease:
    """Parameters and stochastic policies for one disease.

    Trajectory templates are built once; every infection receives a shared
    view that is copied on its first reshape.
    """

    def __init__(
        self,
        cfg: DiseaseSection,
        rng: Optional[np.random.Generator] = None,
    ):
        self.cfg = cfg
        self.id = cfg.id
        self.name = cfg.name
        self.progression_kind: ProgressionKind = PROGRESSION_KINDS[cfg.progression]
        self.rng = rng if rng is not None else np.random.default_rng(cfg.id)

        self._templates: List[Tuple[float, Trajectory]] = [
            (float(band['max_age']), template_from_band(band))
            for band in cfg.trajectories
        ]
        self._default_template: Optional[Trajectory] = None
        if not self._templates:
            self._default_template = step_trajectory(
                cfg.days_latent,
                cfg.days_asymptomatic,
                cfg.days_symptomatic,
                asymptomatic_infectivity=cfg.asymptomatic_infectivity,
                infectivity_level=cfg.infectivity_level,
                symptom_level=cfg.symptom_level,
            )

    # ── Thresholds & durations ────────────────────────────────────────

    @property
    def infectivity_threshold(self) -> float:
        return self.cfg.infectivity_threshold

    @property
    def symptomaticity_threshold(self) -> float:
        return self.cfg.symptomaticity_threshold

    @property
    def days_recovered(self) -> Optional[int]:
        """Days from recovery until immunity wanes; None = never."""
        return self.cfg.days_recovered

    @property
    def days_symptomatic(self) -> int:
        """Baseline symptomatic duration used when symptoms are forced on."""
        return self.cfg.days_symptomatic

    @property
    def case_fatality_enabled(self) -> bool:
        return self.cfg.case_fatality_enabled

    # ── Policies ──────────────────────────────────────────────────────

    def generates_immunity(self, real_age: float) -> bool:
        """Does an episode at this age leave immune memory?"""
        p = age_band_value(
            self.cfg.immunity_age_breaks, self.cfg.immunity_prob_by_age, real_age,
        )
        return bool(self.rng.random() < p)

    def get_trajectory(self, age: int) -> Optional[Trajectory]:
        """Trajectory for a host of the given (integer) age.

        Returns None when age bands are configured but none covers `age`.
        """
        if self._default_template is not None:
            return self._default_template.share()
        for max_age, template in self._templates:
            if age < max_age:
                return template.share()
        return None

    def is_fatal(self, host_or_age, symptoms: float, days_symptomatic: int) -> bool:
        """Draw whether the host dies today.

        Args:
            host_or_age: Either the host (its real_age and chronic condition
                are used) or a continuous age.
            symptoms: Current symptom severity.
            days_symptomatic: Days since symptom onset.
        """
        if isinstance(host_or_age, numbers.Real):
            age = float(host_or_age)
            chronic = False
        else:
            age = host_or_age.real_age
            chronic = bool(host_or_age.has_chronic_condition)
        p = daily_fatality_probability(
            self.cfg, age, symptoms, days_symptomatic, chronic_condition=chronic,
        )
        if p <= 0.0:
            return False
        return bool(self.rng.random() < p)

    def __repr__(self) -> str:
        return (
            f"Disease(id={self.id}, name={self.name!r}, "
            f"progression={self.progression_kind.name})"
        )


def build_diseases(
    config: SimulationConfig,
    rngs: Dict[str, np.random.Generator],
) -> Dict[int, Disease]:
    """Instantiate every configured disease on its own RNG stream."""
    return {
        d.id: Disease(d, rng=get_disease_rng(rngs, d.id))
        for d in config.diseases
    }
