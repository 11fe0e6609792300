"""
Tests for Summary Log emission.

Covers the reported flag (one summary per prescription per cycle, plus the
repeat summaries that precede it) and the slot clearing that follows the
last harvest of a repeat sequence.
"""
import numpy as np
import pandas as pd
import pytest

from pyharvest.prescription_totals import StandHarvestTotals
from pyharvest.summary_emitter import SummaryEmitter


def stand_totals(site_count, damaged_sites, biomass_removed, cohorts=(1, 0, 0)):
    return StandHarvestTotals(
        site_count=site_count,
        damaged_sites=damaged_sites,
        cohorts_damaged=damaged_sites,
        cohorts_killed=2 * damaged_sites,
        biomass_removed=biomass_removed,
        species_cohorts=np.array(cohorts, dtype=np.int64),
        species_biomass=np.array([biomass_removed, 0.0, 0.0]),
    )


@pytest.fixture
def emitter(summary_log):
    return SummaryEmitter(summary_log)


@pytest.fixture
def clearcut(unit):
    return unit.applied_prescriptions[0]


class TestInitialSummary:
    """Tests for the summary of an initial harvest pass."""

    def test_nothing_harvested(self, emitter, unit, clearcut, totals, summary_log):
        assert emitter.emit(unit, clearcut, totals, current_time=10) is None
        assert len(summary_log) == 0
        assert not totals.is_reported(0)

    def test_single_stand_summary(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(2, 1, 0.135))
        row = emitter.emit(unit, clearcut, totals, current_time=10)

        assert row.time == 10
        assert row.management_area == 1
        assert row.prescription == 'MaxAgeClearcut'
        assert row.harvested_sites == 1
        assert row.total_biomass_harvested == pytest.approx(0.135)
        assert row.cohorts_partial_harvest == 1
        assert row.cohorts_complete_harvest == 2
        assert row.species_cohorts == (1, 0, 0)
        assert totals.is_reported(0)

    def test_reported_once_per_cycle(self, emitter, unit, clearcut, totals, summary_log):
        totals.accumulate(0, stand_totals(2, 1, 0.135))
        emitter.emit(unit, clearcut, totals, current_time=10)
        assert emitter.emit(unit, clearcut, totals, current_time=10) is None
        assert len(summary_log) == 1

    def test_stand_with_no_damage_still_summarized(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(3, 0, 0.0, cohorts=(0, 0, 0)))
        row = emitter.emit(unit, clearcut, totals, current_time=10)
        assert row is not None
        assert row.harvested_sites == 0

    def test_row_written_to_summary_log(self, emitter, unit, clearcut, totals, summary_log):
        totals.accumulate(0, stand_totals(2, 1, 0.135))
        emitter.emit(unit, clearcut, totals, current_time=10)

        df = pd.read_csv(summary_log.path)
        assert list(df['Prescription']) == ['MaxAgeClearcut']
        assert df.loc[0, 'TotalBiomassHarvested'] == pytest.approx(0.135)
        assert df.loc[0, 'CohortsHarvested_abiebals'] == 1


class TestRepeatSummaries:
    """Tests for summaries of repeat-harvest passes."""

    def test_repeat_then_initial(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(2, 1, 0.5))

        repeat_row = emitter.emit(unit, clearcut, totals, current_time=10, repeat_number=2)
        assert repeat_row.prescription == 'MaxAgeClearcut(2)'
        assert not totals.is_reported(0)

        initial_row = emitter.emit(unit, clearcut, totals, current_time=10)
        assert initial_row.prescription == 'MaxAgeClearcut'
        assert totals.is_reported(0)

    def test_last_harvest_sums_passes_then_clears(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(2, 2, 0.2))
        totals.accumulate(0, stand_totals(3, 1, 0.3))

        row = emitter.emit(unit, clearcut, totals, current_time=10, repeat_number=1, last_harvest=True)

        assert row.harvested_sites == 3
        assert row.total_biomass_harvested == pytest.approx(0.5)
        assert row.cohorts_partial_harvest == 3
        assert row.cohorts_complete_harvest == 6
        assert row.species_cohorts == (2, 0, 0)

        slot = totals.slot(0)
        assert slot['total_sites'] == 5
        assert slot['total_damaged_sites'] == 0
        assert slot['total_biomass_removed'] == 0.0
        assert slot['total_cohorts_damaged'] == 0
        assert slot['total_cohorts_killed'] == 0
        assert not slot['species_cohorts'].any()
        assert not slot['species_biomass'].any()
        assert not totals.is_reported(0)

    def test_expired_last_harvest_marks_reported(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(2, 1, 0.2))

        row = emitter.emit(unit, clearcut, totals, current_time=110, repeat_number=3, last_harvest=True)

        assert row.prescription == 'MaxAgeClearcut(3)'
        assert totals.is_reported(0)
        assert emitter.emit(unit, clearcut, totals, current_time=110) is None

    def test_expired_without_last_harvest_not_reported(self, emitter, unit, clearcut, totals):
        totals.accumulate(0, stand_totals(2, 1, 0.2))
        emitter.emit(unit, clearcut, totals, current_time=110, repeat_number=1)
        assert not totals.is_reported(0)
        assert totals.total_damaged_sites[0] == 1
