"""
Tests for stand-level harvest aggregation.

Biomass arrives in g m-2; with a 0.09 ha cell, 150 g m-2 on one site is
150 / 100 * 0.09 = 0.135 Mg.
"""
import numpy as np
import pandas as pd
import pytest

from pyharvest.exceptions import IndexSpaceError, StandError
from pyharvest.stand_aggregator import StandAggregator, summarize_stand

CELL_AREA = 0.09


@pytest.fixture
def aggregator(collector, event_log):
    return StandAggregator(collector, CELL_AREA, event_log)


@pytest.fixture
def harvested_stand(unit, collector, landscape, prescriptions, species):
    """Stand 10 with one damaged site, as the harvest selection leaves it."""
    stand = unit.stands[0]
    stand.harvested = True
    stand.last_prescription = prescriptions[0]
    stand.event_id = 7
    stand.harvested_rank = 3.0
    stand.record_cohort_damage(species.index_of('abiebals'), 2)
    stand.record_cohort_damage(species.index_of('pinubank'), 1)
    collector.record_site_harvest(landscape.site_at(0, 0), prescriptions[0], [100.0, 0.0, 50.0], 2, 5)
    return stand


class TestSummarizeStand:
    """Tests for rolling site deltas into stand totals."""

    def test_single_damaged_site(self, harvested_stand, collector):
        totals = summarize_stand(harvested_stand, collector, CELL_AREA)

        assert totals.site_count == 2
        assert totals.damaged_sites == 1
        assert totals.cohorts_damaged == 2
        assert totals.cohorts_killed == 3
        assert totals.biomass_removed == pytest.approx(0.135)
        np.testing.assert_allclose(totals.species_biomass, [0.09, 0.0, 0.045])
        np.testing.assert_array_equal(totals.species_cohorts, [2, 0, 1])

    def test_stamps_harvested_sites_only(self, harvested_stand, collector, landscape):
        summarize_stand(harvested_stand, collector, CELL_AREA, current_time=20)

        cut = landscape.site_at(0, 0)
        uncut = landscape.site_at(0, 1)
        assert cut.prescription_name == 'MaxAgeClearcut'
        assert cut.time_of_last_event == 20
        assert uncut.prescription_name is None
        assert uncut.time_of_last_event is None

    def test_no_stamping_without_time(self, harvested_stand, collector, landscape):
        summarize_stand(harvested_stand, collector, CELL_AREA)
        assert landscape.site_at(0, 0).prescription_name is None

    def test_damage_table_length_checked(self, harvested_stand, collector):
        harvested_stand.damage_table = np.zeros(2, dtype=np.int64)
        with pytest.raises(IndexSpaceError):
            summarize_stand(harvested_stand, collector, CELL_AREA)


class TestStandAggregator:
    """Tests for Event Log rows and prescription totals."""

    def test_event_row(self, aggregator, unit, harvested_stand, totals):
        row = aggregator.aggregate(unit, harvested_stand, totals, current_time=10)

        assert row.time == 10
        assert row.management_area == 1
        assert row.prescription == 'MaxAgeClearcut'
        assert row.stand == 10
        assert row.event_id == 7
        assert row.stand_age == 40
        assert row.stand_rank == 3
        assert row.number_of_sites == 2
        assert row.harvested_sites == 1
        assert row.biomass_removed == pytest.approx(0.135)
        assert row.biomass_removed_per_damaged_ha == pytest.approx(1.5)
        assert row.cohorts_partial_harvest == 2
        assert row.cohorts_complete_harvest == 3
        assert row.species_cohorts == (2, 0, 1)
        assert row.species_biomass == pytest.approx((0.09, 0.0, 0.045))

    def test_totals_accumulated(self, aggregator, unit, harvested_stand, totals):
        aggregator.aggregate(unit, harvested_stand, totals, current_time=10)
        slot = totals.slot(0)
        assert slot['total_sites'] == 2
        assert slot['total_damaged_sites'] == 1
        assert slot['total_biomass_removed'] == pytest.approx(0.135)
        assert slot['total_cohorts_killed'] == 3
        assert totals.total_sites[1] == 0

    def test_row_written_to_event_log(self, aggregator, unit, harvested_stand, totals, event_log):
        aggregator.aggregate(unit, harvested_stand, totals, current_time=10)

        df = pd.read_csv(event_log.path)
        assert len(df) == 1
        assert df.loc[0, 'Stand'] == 10
        assert df.loc[0, 'MgBiomassRemoved'] == pytest.approx(0.135)
        assert df.loc[0, 'CohortsHarvested_pinubank'] == 1
        assert df.loc[0, 'BiomassHarvestedMg_abiebals'] == pytest.approx(0.09)

    def test_damage_table_cleared(self, aggregator, unit, harvested_stand, totals):
        aggregator.aggregate(unit, harvested_stand, totals, current_time=10)
        assert not harvested_stand.damage_table.any()

    def test_second_aggregation_adds_no_cohorts(self, aggregator, unit, harvested_stand, totals):
        aggregator.aggregate(unit, harvested_stand, totals, current_time=10)
        row = aggregator.aggregate(unit, harvested_stand, totals, current_time=10)

        assert row.species_cohorts == (0, 0, 0)
        assert row.harvested_sites == 0
        assert row.biomass_removed == 0.0
        assert row.cohorts_partial_harvest == 0
        assert row.cohorts_complete_harvest == 0
        np.testing.assert_array_equal(totals.total_species_cohorts[0], [2, 0, 1])
        slot = totals.slot(0)
        assert slot['total_damaged_sites'] == 1
        assert slot['total_biomass_removed'] == pytest.approx(0.135)
        assert slot['total_cohorts_damaged'] == 2
        assert slot['total_cohorts_killed'] == 3

    def test_repeat_passes_report_new_damage_only(self, aggregator, unit, totals, collector,
                                                   landscape, prescriptions):
        stand = unit.stands[0]
        stand.last_prescription = prescriptions[0]

        collector.record_site_harvest(landscape.site_at(0, 0), prescriptions[0], [100.0, 0.0, 0.0], 0, 1)
        first = aggregator.aggregate(unit, stand, totals, current_time=10, repeat_number=1)
        collector.record_site_harvest(landscape.site_at(0, 1), prescriptions[0], [50.0, 0.0, 0.0], 0, 1)
        second = aggregator.aggregate(unit, stand, totals, current_time=10, repeat_number=2)

        assert first.harvested_sites == 1
        assert first.biomass_removed == pytest.approx(0.09)
        assert second.prescription == 'MaxAgeClearcut(2)'
        assert second.harvested_sites == 1
        assert second.biomass_removed == pytest.approx(0.045)
        assert totals.total_damaged_sites[0] == 2
        assert totals.total_biomass_removed[0] == pytest.approx(0.135)
        assert totals.total_cohorts_killed[0] == 2
        assert len(collector) == 0

    def test_repeat_pass_name(self, aggregator, unit, harvested_stand, totals):
        row = aggregator.aggregate(unit, harvested_stand, totals, current_time=10, repeat_number=2)
        assert row.prescription == 'MaxAgeClearcut(2)'

    def test_undamaged_stand(self, aggregator, unit, totals, prescriptions):
        stand = unit.stands[1]
        stand.last_prescription = prescriptions[1]
        row = aggregator.aggregate(unit, stand, totals, current_time=10)

        assert row.number_of_sites == 3
        assert row.harvested_sites == 0
        assert row.biomass_removed == 0.0
        assert row.biomass_removed_per_damaged_ha == 0.0
        assert totals.total_sites[1] == 3

    def test_damaged_without_biomass(self, aggregator, unit, totals, prescriptions, collector, landscape):
        stand = unit.stands[1]
        stand.last_prescription = prescriptions[2]
        collector.record_site_harvest(landscape.site_at(1, 1), prescriptions[2], [0.0, 0.0, 0.0], 1, 1)
        row = aggregator.aggregate(unit, stand, totals, current_time=10)

        assert row.harvested_sites == 1
        assert row.biomass_removed_per_damaged_ha == 0.0

    def test_stand_without_prescription(self, aggregator, unit, totals):
        with pytest.raises(StandError):
            aggregator.aggregate(unit, unit.stands[1], totals, current_time=10)
