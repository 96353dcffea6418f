"""Disease trajectories — day-indexed infectivity and symptom curves.

A Trajectory stores one infectivity array per pathogen strain and one
symptomaticity array, all padded to a common duration. Day offsets are
counted from exposure (offset 0 = exposure day). Queries outside
[0, duration) return the zero point, so an episode that has run past its
curve is simply over.

Trajectories are templated per age band by the Disease and handed out as
shared views (`share()`). Every reshaping operation copies a shared
view's arrays before touching them, so one host's intervention never
leaks into another host's curve.

Reshaping operations (all offsets are days since exposure):
  - modify_symp_period:   resize the symptomatic span, curve ends after it
  - modify_asymp_period:  resize the pre-symptomatic span, later days shift
  - modify_develops_symp: force or suppress symptoms from a given day
  - mutate:               move infectivity from one strain to another
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Tuple, Union

import numpy as np

from epitraj.types import ZERO_POINT, TrajectoryPoint


# Symptom value written when symptoms are forced on
FORCED_SYMPTOM_LEVEL = 1.0

# Strain id for curves built without explicit strain information
DEFAULT_STRAIN = 0


ArrayLike = Union[np.ndarray, List[float], Tuple[float, ...]]


def _fit(arr: np.ndarray, n: int) -> np.ndarray:
    """Return a new float64 array of exactly length n (zero-padded or cut)."""
    out = np.zeros(n, dtype=np.float64)
    m = min(n, len(arr))
    out[:m] = arr[:m]
    return out


def _resize_segment(
    arr: np.ndarray,
    start: int,
    end: int,
    length: int,
    keep_tail: bool,
) -> np.ndarray:
    """Resize arr[start:end] to `length` days.

    Shrinking drops the last days of the segment; extending repeats its
    last value. With keep_tail the days after `end` follow the resized
    segment, otherwise the curve ends with it.
    """
    n = len(arr)
    start = min(start, n)
    end = min(max(end, start), n)
    segment = arr[start:end]
    if length <= len(segment):
        segment = segment[:length]
    else:
        if len(segment) > 0:
            fill = segment[-1]
        elif start > 0:
            fill = arr[start - 1]
        else:
            fill = 0.0
        segment = np.concatenate(
            [segment, np.full(length - len(segment), fill, dtype=np.float64)]
        )
    parts = [arr[:start], segment]
    if keep_tail:
        parts.append(arr[end:])
    return np.concatenate(parts).astype(np.float64)


class Trajectory:
    """Infectivity (per strain) and symptomaticity over days since exposure."""

    def __init__(
        self,
        infectivity: Union[ArrayLike, Mapping[int, ArrayLike]],
        symptomaticity: ArrayLike,
    ):
        if not isinstance(infectivity, Mapping):
            infectivity = {DEFAULT_STRAIN: infectivity}
        curves = {
            int(strain): np.asarray(values, dtype=np.float64).ravel()
            for strain, values in infectivity.items()
        }
        symp = np.asarray(symptomaticity, dtype=np.float64).ravel()
        duration = max([len(symp)] + [len(c) for c in curves.values()])

        self._infectivity: Dict[int, np.ndarray] = {
            strain: _fit(c, duration) for strain, c in curves.items()
        }
        self._symptomaticity: np.ndarray = _fit(symp, duration)
        self._shared = False

    # ── Sharing ───────────────────────────────────────────────────────

    def share(self) -> 'Trajectory':
        """Return a view over the same arrays, copied on first reshape.

        Both this trajectory and the view are marked shared.
        """
        view = Trajectory.__new__(Trajectory)
        view._infectivity = dict(self._infectivity)
        view._symptomaticity = self._symptomaticity
        view._shared = True
        self._shared = True
        return view

    def copy(self) -> 'Trajectory':
        """Deep copy with private arrays."""
        return Trajectory(
            {s: c.copy() for s, c in self._infectivity.items()},
            self._symptomaticity.copy(),
        )

    @property
    def is_shared(self) -> bool:
        return self._shared

    def _own(self) -> None:
        if self._shared:
            self._infectivity = {s: c.copy() for s, c in self._infectivity.items()}
            self._symptomaticity = self._symptomaticity.copy()
            self._shared = False

    # ── Queries ───────────────────────────────────────────────────────

    @property
    def duration(self) -> int:
        """Number of days covered by the curve."""
        return len(self._symptomaticity)

    def __len__(self) -> int:
        return self.duration

    def get_data_point(self, t: int) -> TrajectoryPoint:
        """Infectivity (summed over strains) and symptoms at offset t."""
        if t < 0 or t >= self.duration:
            return ZERO_POINT
        infectivity = sum(float(c[t]) for c in self._infectivity.values())
        return TrajectoryPoint(infectivity, float(self._symptomaticity[t]))

    def curves(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (summed infectivity, symptomaticity) as new arrays."""
        if self._infectivity:
            infectivity = np.sum(
                np.vstack(list(self._infectivity.values())), axis=0
            )
        else:
            infectivity = np.zeros(self.duration, dtype=np.float64)
        return infectivity, self._symptomaticity.copy()

    def strain_curve(self, strain: int) -> np.ndarray:
        """Infectivity curve of one strain (copy)."""
        return self._infectivity[strain].copy()

    def __iter__(self) -> Iterator[Tuple[int, TrajectoryPoint]]:
        infectivity, symptomaticity = self.curves()
        for t in range(self.duration):
            yield t, TrajectoryPoint(float(infectivity[t]), float(symptomaticity[t]))

    def get_all_strains(self) -> List[int]:
        """Ids of every strain that has ever been part of this episode."""
        return sorted(self._infectivity)

    # ── Reshaping ─────────────────────────────────────────────────────

    def _map_arrays(self, fn) -> None:
        self._own()
        self._symptomaticity = fn(self._symptomaticity)
        for strain in list(self._infectivity):
            self._infectivity[strain] = fn(self._infectivity[strain])

    def modify_symp_period(self, start: int, end: int, length: int) -> None:
        """Make the span [start, end) last `length` days; the curve ends after it."""
        start = max(0, int(start))
        length = max(0, int(length))
        self._map_arrays(
            lambda a: _resize_segment(a, start, int(end), length, keep_tail=False)
        )

    def modify_asymp_period(self, start: int, end: int, length: int) -> None:
        """Make the span [start, end) last `length` days; later days shift."""
        start = max(0, int(start))
        length = max(0, int(length))
        self._map_arrays(
            lambda a: _resize_segment(a, start, int(end), length, keep_tail=True)
        )

    def modify_develops_symp(self, start: int, length: int) -> None:
        """Clear symptoms from `start` on, then force `length` symptomatic days.

        length = 0 suppresses symptoms for the rest of the episode.
        """
        start = max(0, int(start))
        end = start + max(0, int(length))
        if end > self.duration:
            self._map_arrays(lambda a: _fit(a, end))
        else:
            self._own()
        symptomaticity = self._symptomaticity.copy()
        symptomaticity[start:] = 0.0
        symptomaticity[start:end] = FORCED_SYMPTOM_LEVEL
        self._symptomaticity = symptomaticity

    def mutate(self, old_strain: int, new_strain: int, t: int) -> None:
        """Move old_strain's infectivity from offset t onward to new_strain.

        Raises:
            KeyError: If old_strain is not part of this trajectory.
        """
        if old_strain not in self._infectivity:
            raise KeyError(f"Strain {old_strain} not present in trajectory")
        if old_strain == new_strain:
            return
        self._own()
        t = max(0, int(t))
        old = self._infectivity[old_strain].copy()
        new = self._infectivity.get(
            new_strain, np.zeros(self.duration, dtype=np.float64)
        ).copy()
        new[t:] += old[t:]
        old[t:] = 0.0
        self._infectivity[old_strain] = old
        self._infectivity[new_strain] = new

    def __repr__(self) -> str:
        return (
            f"Trajectory(duration={self.duration}, "
            f"strains={self.get_all_strains()}, shared={self._shared})"
        )


def step_trajectory(
    days_latent: int,
    days_asymptomatic: int,
    days_symptomatic: int,
    asymptomatic_infectivity: float = 0.5,
    infectivity_level: float = 1.0,
    symptom_level: float = 1.0,
) -> Trajectory:
    """Build a latent → asymptomatic → symptomatic step curve.

    Infectivity is `asymptomatic_infectivity` during the asymptomatic
    days and `infectivity_level` during the symptomatic days; symptoms
    are `symptom_level` during the symptomatic days only.
    """
    n = days_latent + days_asymptomatic + days_symptomatic
    onset = days_latent + days_asymptomatic
    infectivity = np.zeros(n, dtype=np.float64)
    symptomaticity = np.zeros(n, dtype=np.float64)
    infectivity[days_latent:onset] = asymptomatic_infectivity
    infectivity[onset:] = infectivity_level
    symptomaticity[onset:] = symptom_level
    return Trajectory(infectivity, symptomaticity)
