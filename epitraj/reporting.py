"""Buffered infection-event reporting.

One text record per exposure and per notified transition. Records are
buffered and written once per simulated day by `flush()`, so infections
processed in parallel never contend for the output file.

Verbosity tiers (OutputSection.track_infection_events):
  0 — off, every method is a no-op
  1 — standard record
  2 — extended record: host–infector distance, census tract, live values

Usage:
    reporter = InfectionReporter.from_config(config.output)

    # In simulation loop:
    infection.update(day)        # records transitions
    reporter.flush()             # end of day

Missing optional data is rendered with sentinels: -1 for ids, dates and
tracts, -999 for coordinates, 'X' for place codes.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import List, Optional, Union

from epitraj.config import OutputSection
from epitraj.types import (
    NO_COORD,
    NO_ID,
    NO_PLACE_CODE,
    TransitionEvent,
    format_date,
)

logger = logging.getLogger(__name__)


EXPOSED = 'exposed'


def _event_name(event: Optional[TransitionEvent]) -> str:
    return EXPOSED if event is None else event.name.lower()


def format_infection_record(
    infection,
    day: int,
    event: Optional[TransitionEvent] = None,
    extended: bool = False,
) -> str:
    """Render one infection record as a single line (no newline).

    Args:
        infection: The Infection being reported.
        day: Simulation day of the record.
        event: Transition being reported; None for the exposure itself.
        extended: Append distance, census tract and live values.
    """
    host = infection.host
    infector = infection.infector
    place = infection.place
    disease_id = infection.disease.id

    if infector is None:
        infector_id = infector_symp = infector_exp = NO_ID
        infector_age_str = str(NO_ID)
    else:
        infector_id = infector.id
        infector_age_str = f"{infector.real_age:.3f}"
        infector_symp = int(infector.is_symptomatic(disease_id))
        infector_exp = format_date(infector.get_exposure_date(disease_id))

    if place is None:
        place_type, place_id, subtype, size = NO_PLACE_CODE, NO_ID, NO_PLACE_CODE, NO_ID
    else:
        place_type, place_id = place.type_code, place.id
        subtype, size = place.subtype_code, place.size

    if place_type != NO_PLACE_CODE:
        lat, lon = f"{place.latitude:.3f}", f"{place.longitude:.3f}"
    else:
        lat, lon = str(NO_COORD), str(NO_COORD)

    household = host.household
    if household is not None:
        home_lat, home_lon = f"{household.latitude:.3f}", f"{household.longitude:.3f}"
    else:
        home_lat, home_lon = str(NO_COORD), str(NO_COORD)

    fields = [
        f"day {day}",
        f"event {_event_name(event)}",
        f"dis {disease_id}",
        f"host {host.id}",
        f"age {host.real_age:.3f}",
        f"infector {infector_id}",
        f"inf_age {infector_age_str}",
        f"inf_sympt {infector_symp}",
        f"at {place_type}",
        f"place {place_id}",
        f"subtype {subtype}",
        f"size {size}",
        f"lat {lat}",
        f"lon {lon}",
        f"home_lat {home_lat}",
        f"home_lon {home_lon}",
        f"infector_exp_date {infector_exp}",
        "|",
        "DATES",
        f"exp {format_date(infection.exposure_date)}",
        f"inf {format_date(infection.infectious_start_date)}",
        f"symp {format_date(infection.symptoms_start_date)}",
        f"rec {format_date(infection.infectious_end_date)}",
        f"sus {format_date(infection.immunity_end_date)}",
    ]

    if extended:
        if place_type != NO_PLACE_CODE and infector is not None:
            dist = math.hypot(host.x - infector.x, host.y - infector.y)
            fields.append(f"dist {dist:.3f}")
        else:
            fields.append(f"dist {NO_ID}")

        tract = None
        if infector is not None and infector.household is not None:
            tract = infector.household.census_tract
        fields.append(f"census_tract {NO_ID if tract is None else tract}")

        fields.extend([
            "|",
            f"will_be_symp? {int(infection.will_be_symptomatic)}",
            f"sucs {infection.susceptibility:.3f}",
            f"infect {infection.infectivity:.3f}",
            f"inf_multp {infection.infectivity_multp:.3f}",
            f"sympts {infection.symptoms:.3f}",
        ])

    return " ".join(fields)


class InfectionReporter:
    """Collects infection records and writes them at end of day.

    When verbosity is 0, all methods are no-ops.

    Args:
        path: Output file (appended to). None keeps flushed records in
            `records` instead.
        verbosity: 0 = off, 1 = standard, 2 = extended.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        verbosity: int = 1,
    ):
        if verbosity not in (0, 1, 2):
            raise ValueError(f"verbosity must be 0, 1 or 2, got {verbosity}")
        self.path = Path(path) if path is not None else None
        self.verbosity = verbosity
        self.records: List[str] = []
        self._buffer: List[str] = []

    @classmethod
    def from_config(cls, output: OutputSection) -> 'InfectionReporter':
        """Reporter writing to output.directory/output.infection_file, if set."""
        path = None
        if output.infection_file is not None:
            path = Path(output.directory) / output.infection_file
        return cls(path=path, verbosity=output.track_infection_events)

    @property
    def enabled(self) -> bool:
        return self.verbosity > 0

    @property
    def pending(self) -> int:
        """Number of buffered, unflushed records."""
        return len(self._buffer)

    def report_infection(self, infection, day: int) -> None:
        """Buffer the exposure record for `infection`."""
        if not self.enabled:
            return
        self._buffer.append(format_infection_record(
            infection, day, extended=self.verbosity > 1,
        ))

    def record_event(self, infection, day: int, event: TransitionEvent) -> None:
        """Buffer a record for a notified transition."""
        if not self.enabled:
            return
        self._buffer.append(format_infection_record(
            infection, day, event=event, extended=self.verbosity > 1,
        ))

    def flush(self) -> int:
        """Write buffered records. Returns the number written."""
        if not self._buffer:
            return 0
        n = len(self._buffer)
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a') as f:
                f.write("\n".join(self._buffer) + "\n")
        else:
            self.records.extend(self._buffer)
        self._buffer = []
        logger.debug("Flushed %d infection records", n)
        return n
