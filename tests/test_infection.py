"""Tests for epitraj.infection — date derivation, daily advancement,
interventions, seed advancement, and strain bookkeeping.

Reference episode (exposure on day 100):
  offset:         0    1    2    3    4    5    6
  infectivity:    0    0   0.5  0.5   1    1    1
  symptomaticity: 0    0    0    0    1    1    1

  infectious 102, asymptomatic 102, symptoms 104,
  symptoms end 107, recovered 107, immunity ends 107 + days_recovered
"""

import numpy as np
import pytest

from epitraj.config import DiseaseSection, SimulationSection
from epitraj.disease import Disease
from epitraj.host import PastInfection, Person
from epitraj.infection import (
    Infection,
    InvalidModificationError,
    PreconditionError,
    derive_transition_dates,
)
from epitraj.reporting import InfectionReporter
from epitraj.trajectory import Trajectory
from epitraj.types import TransitionEvent

E = TransitionEvent


# ═══════════════════════════════════════════════════════════════════════
# FIXTURES & HELPERS
# ═══════════════════════════════════════════════════════════════════════

REF_INFECTIVITY = [0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0]
REF_SYMPTOMATICITY = [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0]


def make_disease(infectivity=None, symptomaticity=None, **kwargs) -> Disease:
    """Disease whose only age band is the given curve."""
    if infectivity is None:
        infectivity = REF_INFECTIVITY
    if symptomaticity is None:
        symptomaticity = REF_SYMPTOMATICITY
    kwargs.setdefault('days_recovered', 30)
    cfg = DiseaseSection(
        trajectories=[{
            'max_age': 200,
            'infectivity': list(infectivity),
            'symptomaticity': list(symptomaticity),
        }],
        **kwargs,
    )
    return Disease(cfg, rng=np.random.default_rng(0))


def run_days(infection: Infection, first: int, last: int) -> None:
    for day in range(first, last + 1):
        infection.update(day)


@pytest.fixture
def host() -> Person:
    return Person(id=1, real_age=30.0)


@pytest.fixture
def disease() -> Disease:
    return make_disease()


@pytest.fixture
def infection(disease, host) -> Infection:
    return Infection(disease, None, host, None, 100)


# ═══════════════════════════════════════════════════════════════════════
# TRANSITION-DATE DERIVATION
# ═══════════════════════════════════════════════════════════════════════

class TestDeriveTransitionDates:
    def test_reference_episode(self):
        d = derive_transition_dates(
            np.array(REF_INFECTIVITY), np.array(REF_SYMPTOMATICITY),
            100, 0.0, 0.0, 30,
        )
        assert d.infectious_start_date == 102
        assert d.asymptomatic_date == 102
        assert d.symptoms_start_date == 104
        assert d.symptoms_end_date == 107
        assert d.infectious_end_date == 107
        assert d.immunity_end_date == 137
        assert d.asymptomatic_period == 2
        assert d.symptomatic_period == 3
        assert d.will_be_symptomatic is True

    def test_trailing_zero_points(self):
        d = derive_transition_dates(
            np.array(REF_INFECTIVITY + [0.0] * 3), np.array(REF_SYMPTOMATICITY + [0.0] * 3),
            100, 0.0, 0.0, 5,
        )
        assert d.infectious_end_date == 107
        assert d.symptoms_end_date == 107
        assert d.immunity_end_date == 112

    def test_thresholds_are_strict(self):
        d = derive_transition_dates(
            np.array(REF_INFECTIVITY), np.array(REF_SYMPTOMATICITY),
            0, 0.5, 1.0, None,
        )
        assert d.infectious_start_date == 4
        assert d.asymptomatic_date == 4
        assert d.symptoms_start_date is None
        assert d.will_be_symptomatic is False

    def test_never_infectious(self):
        d = derive_transition_dates(np.zeros(5), np.zeros(5), 10, 0.0, 0.0, 30)
        assert d.infectious_start_date is None
        assert d.infectious_end_date is None
        assert d.asymptomatic_date is None
        assert d.immunity_end_date is None
        assert d.asymptomatic_period == 0
        assert d.symptomatic_period == 0

    def test_immunity_never_wanes(self):
        d = derive_transition_dates(
            np.array(REF_INFECTIVITY), np.array(REF_SYMPTOMATICITY),
            100, 0.0, 0.0, None,
        )
        assert d.infectious_end_date == 107
        assert d.immunity_end_date is None

    def test_symptomatic_first_day_not_asymptomatic(self):
        d = derive_transition_dates(
            np.array([0.0, 1.0, 1.0]), np.array([0.0, 1.0, 0.0]), 0, 0.0, 0.0, 0,
        )
        assert d.infectious_start_date == 1
        assert d.asymptomatic_date is None
        assert d.asymptomatic_period == 1
        assert d.immunity_end_date == d.infectious_end_date == 3

    def test_empty_curve(self):
        d = derive_transition_dates(np.zeros(0), np.zeros(0), 5, 0.0, 0.0, 10)
        assert d.infectious_start_date is None
        assert d.will_be_symptomatic is False


class TestConstruction:
    def test_reference_dates(self, infection):
        assert infection.exposure_date == 100
        assert infection.infectious_start_date == 102
        assert infection.symptoms_start_date == 104
        assert infection.infectious_end_date == 107
        assert infection.immunity_end_date == 137
        assert infection.will_be_symptomatic

    def test_neutral_defaults(self, infection):
        assert infection.infectivity == 0.0
        assert infection.symptoms == 0.0
        assert infection.infectivity_multp == 1.0
        assert infection.infectee_count == 0
        assert infection.is_susceptible is True
        assert infection.infection_is_fatal_today is False
        assert infection.history == []

    def test_immune_response_drawn(self, infection):
        assert infection.immune_response is True

    def test_no_trajectory_for_age(self, host):
        cfg = DiseaseSection(trajectories=[
            {'max_age': 10, 'infectivity': [1.0], 'symptomaticity': [0.0]},
        ])
        with pytest.raises(PreconditionError):
            Infection(Disease(cfg), None, host, None, 0)

    def test_derivation_is_idempotent(self, infection):
        before = infection.transition_dates()
        infection.set_transition_dates()
        infection.set_transition_dates()
        assert infection.transition_dates() == before

    def test_set_trajectory_rederives(self, infection):
        infection.set_trajectory(Trajectory([0.0, 1.0], [0.0, 0.0]))
        assert infection.infectious_start_date == 101
        assert infection.infectious_end_date == 102
        assert infection.symptoms_start_date is None
        assert infection.will_be_symptomatic is False

    def test_set_trajectory_none(self, infection):
        with pytest.raises(PreconditionError):
            infection.set_trajectory(None)


# ═══════════════════════════════════════════════════════════════════════
# DAILY ADVANCEMENT
# ═══════════════════════════════════════════════════════════════════════

class TestDailyUpdate:
    def test_reference_notifications(self, infection, host):
        run_days(infection, 100, 140)
        st = host.status[0]
        assert st.recovered and st.immune
        assert not st.infectious and not st.symptomatic
        assert infection.history == [
            (102, E.INFECTIOUS),
            (104, E.SYMPTOMATIC),
            (107, E.RECOVERED),
            (137, E.UNSUSCEPTIBLE),
        ]

    def test_recovery_day_supersedes_symptom_end(self, infection, host):
        run_days(infection, 100, 107)
        assert E.ASYMPTOMATIC not in [e for _, e in infection.history]
        assert host.status[0].recovered
        assert not host.is_symptomatic(0)

    def test_symptoms_end_before_recovery(self, host):
        disease = make_disease([0.0, 1.0, 1.0, 1.0, 1.0], [0.0, 1.0, 1.0, 0.0, 0.0])
        inf = Infection(disease, None, host, None, 100)
        run_days(inf, 100, 106)
        assert inf.history == [
            (101, E.INFECTIOUS),
            (101, E.SYMPTOMATIC),
            (103, E.ASYMPTOMATIC),
            (105, E.RECOVERED),
        ]

    def test_each_transition_fires_once(self, infection):
        run_days(infection, 90, 200)
        events = [e for _, e in infection.history]
        assert sorted(events) == sorted(set(events))

    def test_live_values(self, infection):
        infection.update(102)
        assert infection.infectivity == 0.5
        assert infection.symptoms == 0.0
        assert infection.is_infectious()
        assert not infection.is_symptomatic()
        infection.update(105)
        assert infection.is_symptomatic()

    def test_past_curve_is_zero(self, infection):
        infection.update(150)
        assert infection.infectivity == 0.0
        assert infection.symptoms == 0.0
        assert not infection.is_infectious()

    def test_immunity_loss_clears_susceptible(self, infection):
        run_days(infection, 100, 136)
        assert infection.is_susceptible
        infection.update(137)
        assert infection.is_susceptible is False

    def test_zero_immunity_same_day(self, host):
        inf = Infection(make_disease(days_recovered=0), None, host, None, 100)
        inf.update(107)
        assert inf.history == [(107, E.RECOVERED), (107, E.UNSUSCEPTIBLE)]

    def test_never_wanes(self, host):
        inf = Infection(make_disease(days_recovered=None), None, host, None, 100)
        run_days(inf, 100, 400)
        assert E.UNSUSCEPTIBLE not in [e for _, e in inf.history]
        assert inf.is_susceptible


class TestQueries:
    def test_infectivity_scaled_by_multiplier(self, infection):
        infection.infectivity_multp = 2.0
        assert infection.get_infectivity(104) == 2.0
        assert infection.get_infectivity(102) == 1.0

    def test_exposure_day_is_offset_zero(self, host):
        inf = Infection(make_disease([0.25, 1.0], [0.0, 0.0]), None, host, None, 100)
        inf.infectivity_multp = 4.0
        assert inf.get_infectivity(100) == 1.0
        assert inf.get_infectivity(99) == 0.0

    def test_symptoms_unscaled(self, infection):
        infection.infectivity_multp = 2.0
        assert infection.get_symptoms(104) == 1.0

    def test_outside_episode(self, infection):
        assert infection.get_infectivity(99) == 0.0
        assert infection.get_symptoms(200) == 0.0

    def test_add_infectee(self, infection):
        infection.add_infectee()
        infection.add_infectee()
        assert infection.infectee_count == 2


class TestCaseFatality:
    def test_certain_death_on_onset(self, host):
        disease = make_disease(case_fatality_enabled=True, case_fatality_prob_by_day=[1.0])
        inf = Infection(disease, None, host, None, 100)
        inf.update(103)
        assert inf.infection_is_fatal_today is False
        inf.update(104)
        assert inf.infection_is_fatal_today is True
        # Symptom-onset notification precedes the fatality check
        assert inf.history[-1] == (104, E.SYMPTOMATIC)

    def test_flag_reset_each_day(self, host):
        disease = make_disease(case_fatality_enabled=True, case_fatality_prob_by_day=[1.0])
        inf = Infection(disease, None, host, None, 100)
        inf.update(104)
        inf.update(105)   # day 1 of symptoms is past the table
        assert inf.infection_is_fatal_today is False

    def test_disabled(self, infection):
        run_days(infection, 100, 110)
        assert infection.infection_is_fatal_today is False

    def test_age_passed_without_chronic_switch(self, host):
        disease = make_disease(case_fatality_enabled=True)
        calls = []
        disease.is_fatal = lambda h, s, d: calls.append((h, s, d)) or False
        inf = Infection(disease, None, host, None, 100)
        inf.update(105)
        assert calls == [(30.0, 1.0, 1)]

    def test_host_passed_with_chronic_switch(self, host):
        disease = make_disease(case_fatality_enabled=True)
        calls = []
        disease.is_fatal = lambda h, s, d: calls.append(h) or False
        sim = SimulationSection(enable_chronic_condition=True)
        inf = Infection(disease, None, host, None, 100, sim=sim)
        inf.update(104)
        assert calls == [host]

    def test_chronic_condition_hazard(self):
        disease = make_disease(
            case_fatality_enabled=True,
            case_fatality_prob_by_day=[0.5],
            case_fatality_age_breaks=[],
            case_fatality_age_factors=[1.0],
            chronic_condition_hazard=2.0,
        )
        sick = Person(id=2, real_age=40.0, has_chronic_condition=True)
        sim = SimulationSection(enable_chronic_condition=True)
        inf = Infection(disease, None, sick, None, 100, sim=sim)
        inf.update(104)
        assert inf.infection_is_fatal_today is True


class TestChronicProgression:
    def test_infectious_after_latency(self, host):
        disease = make_disease(progression='chronic')
        inf = Infection(disease, None, host, None, 100)
        run_days(inf, 100, 103)
        assert not host.is_infectious(0)
        inf.update(104)
        assert host.is_infectious(0)
        run_days(inf, 105, 120)
        assert inf.history == [(104, E.INFECTIOUS)]

    def test_ignores_trajectory(self, host):
        disease = make_disease(
            [0.0] * 3, [0.0] * 3, progression='chronic',
            case_fatality_enabled=True, case_fatality_prob_by_day=[1.0],
        )
        inf = Infection(disease, None, host, None, 0)
        inf.update(10)
        assert inf.infectivity == 0.0
        assert inf.infection_is_fatal_today is False
        assert inf.history == [(10, E.INFECTIOUS)]


# ═══════════════════════════════════════════════════════════════════════
# SEED INFECTIONS
# ═══════════════════════════════════════════════════════════════════════

class TestAdvanceSeedInfection:
    def test_partial_advance(self, disease, host):
        sim = SimulationSection(epidemic_offset=100)
        inf = Infection(disease, None, host, None, 100, sim=sim)
        inf.advance_seed_infection(3)
        assert inf.exposure_date == 97
        assert inf.infectious_start_date == 99
        assert inf.symptoms_start_date == 101
        assert inf.history == [(100, E.INFECTIOUS)]
        assert host.is_infectious(0)

    def test_advance_past_recovery(self, disease, host):
        sim = SimulationSection(epidemic_offset=100)
        inf = Infection(disease, None, host, None, 100, sim=sim)
        inf.advance_seed_infection(8)
        assert inf.infectious_end_date == 99
        assert [e for _, e in inf.history] == [E.INFECTIOUS, E.SYMPTOMATIC, E.RECOVERED]
        assert inf.is_susceptible

    def test_advance_past_immunity(self, host):
        sim = SimulationSection(epidemic_offset=100)
        inf = Infection(make_disease(days_recovered=0), None, host, None, 100, sim=sim)
        inf.advance_seed_infection(7)
        assert inf.immunity_end_date == 100
        assert inf.history[-1] == (100, E.UNSUSCEPTIBLE)
        assert inf.is_susceptible is False

    def test_no_shift_before_baseline(self, disease, host):
        sim = SimulationSection(epidemic_offset=0)
        inf = Infection(disease, None, host, None, 100, sim=sim)
        inf.advance_seed_infection(1)
        assert inf.exposure_date == 99
        assert inf.history == []

    def test_daily_loop_after_advance_does_not_renotify(self):
        calls = []

        class CountingPerson(Person):
            def become_infectious(self, disease):
                calls.append(disease.id)
                super().become_infectious(disease)

        counted = CountingPerson(id=3, real_age=30.0)
        disease = make_disease([0.0, 0.0, 1.0, 1.0, 1.0], [0.0, 0.0, 0.0, 1.0, 1.0],
                               days_recovered=5)
        inf = Infection(disease, None, counted, None, 0,
                        sim=SimulationSection(epidemic_offset=0))
        inf.advance_seed_infection(2)
        assert inf.history == [(0, E.INFECTIOUS)]
        run_days(inf, 0, 19)
        assert calls == [0]
        assert [e for _, e in inf.history] == [
            E.INFECTIOUS, E.SYMPTOMATIC, E.RECOVERED, E.UNSUSCEPTIBLE,
        ]

    def test_never_infectious_rejected(self, host):
        inf = Infection(make_disease([0.0, 0.0], [0.0, 0.0]), None, host, None, 100)
        with pytest.raises(PreconditionError):
            inf.advance_seed_infection(2)
        assert inf.exposure_date == 100


# ═══════════════════════════════════════════════════════════════════════
# INTERVENTIONS
# ═══════════════════════════════════════════════════════════════════════

class TestNegativeMultiplier:
    @pytest.mark.parametrize("method", [
        "modify_symptomatic_period",
        "modify_asymptomatic_period",
        "modify_infectious_period",
    ])
    def test_rejected_without_change(self, infection, method):
        before = infection.transition_dates()
        with pytest.raises(InvalidModificationError, match="negative"):
            getattr(infection, method)(-0.5, 100)
        assert infection.transition_dates() == before


class TestModifySymptomaticPeriod:
    def test_before_onset_scales_whole_span(self, infection):
        infection.modify_symptomatic_period(2.0, 101)
        assert infection.symptoms_start_date == 104
        assert infection.symptoms_end_date == 110
        assert infection.infectious_end_date == 110
        assert infection.immunity_end_date == 140
        assert infection.symptomatic_period == 6

    def test_zero_before_onset_removes_symptoms(self, infection):
        infection.modify_symptomatic_period(0.0, 101)
        assert infection.will_be_symptomatic is False
        assert infection.symptoms_start_date is None
        assert infection.infectious_end_date == 104

    def test_during_scales_remaining_days(self, infection):
        infection.modify_symptomatic_period(0.5, 105)
        assert infection.symptoms_start_date == 104
        assert infection.infectious_end_date == 106

    def test_during_keeps_one_day(self, infection):
        infection.modify_symptomatic_period(0.0, 106)
        assert infection.infectious_end_date == 107

    def test_past_infectious_end(self, infection):
        before = infection.transition_dates()
        with pytest.raises(InvalidModificationError):
            infection.modify_symptomatic_period(2.0, 107)
        assert infection.transition_dates() == before

    def test_never_symptomatic_unchanged(self, host):
        inf = Infection(make_disease([0.0, 1.0, 1.0], [0.0, 0.0, 0.0]), None, host, None, 100)
        before = inf.transition_dates()
        inf.modify_symptomatic_period(3.0, 100)
        assert inf.transition_dates() == before

    def test_does_not_leak_to_other_hosts(self, disease, host):
        other = Person(id=2, real_age=30.0)
        a = Infection(disease, None, host, None, 100)
        b = Infection(disease, None, other, None, 100)
        a.modify_symptomatic_period(2.0, 101)
        assert b.infectious_end_date == 107
        assert Infection(disease, None, other, None, 100).infectious_end_date == 107


class TestModifyAsymptomaticPeriod:
    def test_before_infectious_start(self, infection):
        infection.modify_asymptomatic_period(2.0, 100)
        assert infection.infectious_start_date == 102
        assert infection.symptoms_start_date == 106
        assert infection.infectious_end_date == 109
        assert infection.asymptomatic_period == 4

    def test_during(self, infection):
        infection.modify_asymptomatic_period(3.0, 103)
        assert infection.symptoms_start_date == 106
        assert infection.infectious_end_date == 109

    def test_shrink_to_nothing(self, infection):
        infection.modify_asymptomatic_period(0.0, 100)
        assert infection.infectious_start_date == 102
        assert infection.asymptomatic_date is None
        assert infection.symptoms_start_date == 102
        assert infection.infectious_end_date == 105

    def test_past_symptom_onset(self, infection):
        with pytest.raises(InvalidModificationError):
            infection.modify_asymptomatic_period(2.0, 104)

    def test_never_symptomatic_span_ends_at_recovery(self, host):
        inf = Infection(make_disease([0.0, 1.0, 1.0], [0.0, 0.0, 0.0]), None, host, None, 100)
        inf.modify_asymptomatic_period(2.0, 100)
        assert inf.infectious_end_date == 105
        with pytest.raises(InvalidModificationError):
            inf.modify_asymptomatic_period(2.0, 105)

    def test_never_infectious(self, host):
        inf = Infection(make_disease([0.0, 0.0], [0.0, 1.0]), None, host, None, 100)
        with pytest.raises(InvalidModificationError):
            inf.modify_asymptomatic_period(2.0, 100)


class TestModifyInfectiousPeriod:
    def test_before_infectious_start_scales_both_legs(self, infection):
        infection.modify_infectious_period(2.0, 100)
        assert infection.infectious_start_date == 102
        assert infection.symptoms_start_date == 106
        assert infection.infectious_end_date == 112
        assert infection.asymptomatic_period == 4
        assert infection.symptomatic_period == 6

    def test_during_symptoms_only_symptomatic_leg(self, infection):
        infection.modify_infectious_period(0.5, 105)
        assert infection.symptoms_start_date == 104
        assert infection.infectious_end_date == 106

    def test_past_infectious_end(self, infection):
        with pytest.raises(InvalidModificationError):
            infection.modify_infectious_period(2.0, 107)

    def test_never_symptomatic(self, host):
        inf = Infection(make_disease([0.0, 1.0, 1.0], [0.0, 0.0, 0.0]), None, host, None, 100)
        inf.modify_infectious_period(2.0, 100)
        assert inf.infectious_start_date == 101
        assert inf.infectious_end_date == 105


class TestModifyDevelopsSymptoms:
    def test_suppress_before_onset(self, infection):
        infection.modify_develops_symptoms(False, 101)
        assert infection.will_be_symptomatic is False
        assert infection.symptoms_start_date is None
        assert infection.symptomatic_period == 0
        assert infection.infectious_end_date == 107
        assert infection.asymptomatic_period == 5

    def test_force_on_asymptomatic_episode(self, host):
        disease = make_disease([0.0, 0.0, 1.0, 1.0, 1.0, 1.0], [0.0] * 6, days_symptomatic=4)
        inf = Infection(disease, None, host, None, 100)
        inf.modify_develops_symptoms(True, 103)
        assert inf.will_be_symptomatic is True
        assert inf.symptoms_start_date == 103
        assert inf.symptoms_end_date == 106
        assert inf.infectious_end_date == 106
        assert inf.symptomatic_period == 3

    def test_forced_symptoms_end_by_recovery(self, host):
        disease = make_disease([0.0, 0.0, 1.0, 1.0], [0.0] * 4, days_symptomatic=4)
        inf = Infection(disease, None, host, None, 100)
        inf.modify_develops_symptoms(True, 100)
        assert inf.symptoms_start_date == 102
        assert inf.infectious_end_date == 104
        assert inf.symptoms_end_date <= inf.infectious_end_date
        run_days(inf, 100, 110)
        assert [e for _, e in inf.history] == [
            E.INFECTIOUS, E.SYMPTOMATIC, E.RECOVERED,
        ]
        assert not host.is_symptomatic(0)

    def test_forced_onset_not_before_infectious_start(self, host):
        disease = make_disease([0.0, 0.0, 1.0, 1.0], [0.0] * 4, days_symptomatic=2)
        inf = Infection(disease, None, host, None, 100)
        inf.modify_develops_symptoms(True, 100)
        assert inf.symptoms_start_date == 102

    def test_same_flag_noop(self, infection):
        before = infection.transition_dates()
        infection.modify_develops_symptoms(True, 101)
        assert infection.transition_dates() == before

    def test_past_onset_with_asymptomatic_phase(self, infection):
        with pytest.raises(InvalidModificationError):
            infection.modify_develops_symptoms(False, 105)

    def test_past_onset_without_asymptomatic_phase(self, host):
        disease = make_disease([0.0, 1.0, 1.0, 1.0], [0.0, 1.0, 1.0, 1.0])
        inf = Infection(disease, None, host, None, 100)
        assert inf.asymptomatic_date is None
        inf.modify_develops_symptoms(False, 102)
        assert inf.symptoms_start_date == 101
        assert inf.symptoms_end_date == 102

    def test_past_infectious_end(self, infection):
        with pytest.raises(InvalidModificationError):
            infection.modify_develops_symptoms(False, 107)


# ═══════════════════════════════════════════════════════════════════════
# STRAINS & HISTORY
# ═══════════════════════════════════════════════════════════════════════

class TestStrains:
    def test_mutate(self, infection):
        before = infection.transition_dates()
        infection.mutate(0, 5, 104)
        assert infection.get_strains() == [0, 5]
        np.testing.assert_array_equal(
            infection.trajectory.strain_curve(5), [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0],
        )
        assert infection.transition_dates() == before

    def test_mutate_unknown_strain(self, infection):
        with pytest.raises(KeyError):
            infection.mutate(9, 5, 104)

    def test_past_infections_delegate_to_host(self, infection, host):
        past = PastInfection(strains=[0], recovery_date=50, age_at_exposure=29)
        host.add_past_infection(0, past)
        assert infection.get_num_past_infections() == 1
        assert infection.get_past_infection(0) is past

    def test_to_past_infection(self, infection):
        infection.mutate(0, 3, 105)
        past = infection.to_past_infection()
        assert past.strains == [0, 3]
        assert past.recovery_date == 107
        assert past.age_at_exposure == 30


class TestReportingHooks:
    def test_events_recorded(self, disease, host):
        reporter = InfectionReporter(verbosity=1)
        inf = Infection(disease, None, host, None, 100, reporter=reporter)
        inf.report_infection(100)
        run_days(inf, 100, 107)
        reporter.flush()
        assert len(reporter.records) == 4
        assert "event exposed" in reporter.records[0]
        assert "event recovered" in reporter.records[-1]

    def test_str(self, host):
        inf = Infection(make_disease(days_recovered=None), None, host, None, 100)
        s = str(inf)
        assert s.startswith("INF: disease 0 in host 1")
        assert "susceptible -1" in s
