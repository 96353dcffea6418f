"""Configuration system for epitraj.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → scenario override → sweep overrides

Run-wide switches that the infection core needs (epidemic offset,
chronic-condition modeling) live in SimulationSection and are handed to
each Infection explicitly. Nothing is read from module-level globals.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from epitraj.types import PROGRESSION_KINDS


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class SimulationSection:
    """Top-level simulation timing and run-wide switches."""
    seed: int = 42
    start_day: int = 0
    n_days: int = 240
    epidemic_offset: int = 0               # Baseline day for seed-infection advancement
    enable_chronic_condition: bool = False  # Fatality uses host state instead of age


@dataclass
class DiseaseSection:
    """Disease parameters consumed by the infection core.

    progression: "trajectory" — dates derived from the infectivity/symptom curve
                 "chronic"    — always-infectious variant, curve ignored

    Trajectories are chosen by age band: the first entry of `trajectories`
    with age < max_age wins. With no bands configured, every host gets the
    step curve built from the days_* / *_level fields.
    """
    id: int = 0
    name: str = "influenza"
    progression: str = "trajectory"

    # Thresholds (strictly greater than → infective / symptomatic)
    infectivity_threshold: float = 0.0
    symptomaticity_threshold: float = 0.0

    # Immunity waning after recovery (days); None = immunity never wanes
    days_recovered: Optional[int] = None

    # Step-curve defaults
    days_latent: int = 2
    days_asymptomatic: int = 1
    days_symptomatic: int = 4            # Also the baseline for forced symptoms
    asymptomatic_infectivity: float = 0.5
    infectivity_level: float = 1.0
    symptom_level: float = 1.0

    # Explicit age-banded curves: [{max_age, infectivity, symptomaticity}, ...]
    trajectories: List[Dict[str, Any]] = field(default_factory=list)

    # Probability that the episode leaves immune memory, by age band
    immunity_age_breaks: List[float] = field(default_factory=list)
    immunity_prob_by_age: List[float] = field(default_factory=lambda: [1.0])

    # Case fatality
    case_fatality_enabled: bool = False
    case_fatality_prob_by_day: List[float] = field(
        default_factory=lambda: [0.0, 0.0005, 0.001, 0.001, 0.0005]
    )
    case_fatality_age_breaks: List[float] = field(
        default_factory=lambda: [5.0, 65.0]
    )
    case_fatality_age_factors: List[float] = field(
        default_factory=lambda: [2.0, 1.0, 5.0]
    )
    min_symptoms_for_death: float = 0.0
    chronic_condition_hazard: float = 2.0   # Fatality multiplier with a chronic condition


@dataclass
class OutputSection:
    """Output control.

    track_infection_events: 0 = no infection records
                            1 = standard records
                            2 = extended records (distance, census tract, live values)
    """
    directory: str = "results/"
    infection_file: Optional[str] = None
    track_infection_events: int = 1


@dataclass
class SimulationConfig:
    """Complete configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level
    keys; `diseases` is a top-level list of disease records.
    """
    simulation: SimulationSection = field(default_factory=SimulationSection)
    output: OutputSection = field(default_factory=OutputSection)
    diseases: List[DiseaseSection] = field(
        default_factory=lambda: [DiseaseSection()]
    )


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced (lists included)
    - Keys in override but not base are added

    Args:
        base: Base dictionary (modified in place).
        override: Override dictionary.

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict) -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys."""
    import dataclasses
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return section_cls(**filtered)


def _yaml_to_config(data: Dict) -> SimulationConfig:
    """Convert a merged YAML dict to a SimulationConfig."""
    sections = {}
    section_map = {
        'simulation': SimulationSection,
        'output': OutputSection,
    }
    for key, cls in section_map.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _dict_to_section(cls, data[key])
        else:
            sections[key] = cls()

    # Diseases (top-level list, not a section)
    if 'diseases' in data and isinstance(data['diseases'], list):
        diseases = []
        for d_dict in data['diseases']:
            if isinstance(d_dict, dict):
                d_dict = copy.deepcopy(d_dict)  # don't mutate original
                diseases.append(_dict_to_section(DiseaseSection, d_dict))
        sections['diseases'] = diseases

    return SimulationConfig(**sections)


def _validate_trajectory_band(i: int, j: int, band: Dict[str, Any]) -> None:
    prefix = f"diseases[{i}].trajectories[{j}]"
    if not isinstance(band, dict):
        raise ValueError(f"{prefix} must be a mapping, got {type(band).__name__}")
    for key in ('max_age', 'infectivity', 'symptomaticity'):
        if key not in band:
            raise ValueError(f"{prefix} missing '{key}'")
    if len(band['infectivity']) == 0 and len(band['symptomaticity']) == 0:
        raise ValueError(f"{prefix} has an empty curve")
    if any(v < 0 for v in band['infectivity']) or any(v < 0 for v in band['symptomaticity']):
        raise ValueError(f"{prefix} curve values must be >= 0")


def validate_disease(i: int, d: DiseaseSection) -> None:
    """Validate one disease record. Raises ValueError on failure."""
    if d.progression not in PROGRESSION_KINDS:
        raise ValueError(
            f"diseases[{i}].progression must be one of "
            f"{set(PROGRESSION_KINDS)}, got '{d.progression}'"
        )
    if d.days_recovered is not None and d.days_recovered < 0:
        raise ValueError(
            f"diseases[{i}].days_recovered must be >= 0 or null, "
            f"got {d.days_recovered}"
        )
    for name in ('days_latent', 'days_asymptomatic', 'days_symptomatic'):
        if getattr(d, name) < 0:
            raise ValueError(f"diseases[{i}].{name} must be >= 0")
    if d.id < 0:
        raise ValueError(f"diseases[{i}].id must be non-negative, got {d.id}")
    if any(not (0.0 <= p <= 1.0) for p in d.immunity_prob_by_age):
        raise ValueError(
            f"diseases[{i}].immunity_prob_by_age entries must be in [0, 1]"
        )
    if len(d.immunity_prob_by_age) != len(d.immunity_age_breaks) + 1:
        raise ValueError(
            f"diseases[{i}].immunity_prob_by_age must have one more "
            f"element than immunity_age_breaks"
        )
    if any(not (0.0 <= p <= 1.0) for p in d.case_fatality_prob_by_day):
        raise ValueError(
            f"diseases[{i}].case_fatality_prob_by_day entries must be in [0, 1]"
        )
    if len(d.case_fatality_age_factors) != len(d.case_fatality_age_breaks) + 1:
        raise ValueError(
            f"diseases[{i}].case_fatality_age_factors must have one more "
            f"element than case_fatality_age_breaks, got "
            f"{len(d.case_fatality_age_factors)} vs "
            f"{len(d.case_fatality_age_breaks)}"
        )
    if list(d.case_fatality_age_breaks) != sorted(d.case_fatality_age_breaks):
        raise ValueError(
            f"diseases[{i}].case_fatality_age_breaks must be ascending"
        )
    if d.chronic_condition_hazard < 0:
        raise ValueError(
            f"diseases[{i}].chronic_condition_hazard must be >= 0"
        )
    max_ages = []
    for j, band in enumerate(d.trajectories):
        _validate_trajectory_band(i, j, band)
        max_ages.append(band['max_age'])
    if max_ages != sorted(max_ages):
        raise ValueError(
            f"diseases[{i}].trajectories must be ordered by ascending max_age"
        )


def validate_config(config: SimulationConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Checks:
      - Run-wide timing is consistent
      - Output verbosity tier is known
      - Every disease record is internally consistent
      - Disease ids are unique
    """
    if config.simulation.seed < 0:
        raise ValueError("simulation.seed must be non-negative")
    if config.simulation.n_days < 1:
        raise ValueError(
            f"simulation.n_days must be >= 1, got {config.simulation.n_days}"
        )
    if config.simulation.epidemic_offset < 0:
        raise ValueError("simulation.epidemic_offset must be non-negative")

    if config.output.track_infection_events not in (0, 1, 2):
        raise ValueError(
            f"output.track_infection_events must be 0, 1 or 2, "
            f"got {config.output.track_infection_events}"
        )
    if config.output.infection_file is not None:
        import os
        import warnings
        if not os.path.isdir(config.output.directory):
            warnings.warn(
                f"output.directory '{config.output.directory}' does not "
                f"exist. Infection records cannot be written.",
                UserWarning,
                stacklevel=2,
            )

    if len(config.diseases) == 0:
        raise ValueError("at least one disease must be configured")
    for i, d in enumerate(config.diseases):
        validate_disease(i, d)
    ids = [d.id for d in config.diseases]
    if len(set(ids)) != len(ids):
        raise ValueError(f"disease ids must be unique, got {ids}")


def load_config(
    base_path: Union[str, Path],
    scenario_path: Optional[Union[str, Path]] = None,
    sweep_overrides: Optional[Dict] = None,
) -> SimulationConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → scenario → sweep overrides.
    Each layer overrides only the fields it specifies.

    Args:
        base_path: Path to base configuration YAML.
        scenario_path: Optional scenario override YAML.
        sweep_overrides: Optional dict of parameter sweep overrides.

    Returns:
        Validated SimulationConfig.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If validation fails.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    with open(base_path) as f:
        config_dict = yaml.safe_load(f) or {}

    if scenario_path is not None:
        scenario_path = Path(scenario_path)
        if scenario_path.exists():
            with open(scenario_path) as f:
                scenario = yaml.safe_load(f) or {}
            deep_merge(config_dict, scenario)

    if sweep_overrides is not None:
        deep_merge(config_dict, sweep_overrides)

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> SimulationConfig:
    """Return a SimulationConfig with all default values."""
    config = SimulationConfig()
    validate_config(config)
    return config
