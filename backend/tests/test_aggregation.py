"""
Tests for aggregation.py - monthly stats, age bands, departments and period comparison
"""
import pytest
from conftest import make_record
from aggregation import (
    aggregate_by_age_band,
    aggregate_by_department,
    aggregate_monthly,
    compare_monthly_stats,
    get_department_list,
    month_over_month,
    round_one_decimal,
    visit_rates,
)
from logic import classify_records
from models import FIRST_VISIT, FOLLOW_UP, UNKNOWN_CATEGORY, UNKNOWN_VISIT, MonthlyStat
from settings import ClassifierConfig


@pytest.fixture
def seeded_stats(seeded_records, config):
    return aggregate_monthly(classify_records(seeded_records, config), config)


class TestAggregateMonthly:
    """Monthly KPI rollup"""

    def test_empty(self, config):
        assert aggregate_monthly([], config) == []

    def test_scenario_a_stat(self, config):
        records = [make_record("2025-01-10", FIRST_VISIT, n) for n in (1, 2, 3)]
        stats = aggregate_monthly(classify_records(records, config), config)
        assert len(stats) == 1
        stat = stats[0]
        assert stat.month == "2025-01"
        assert stat.totalPatients == 3
        assert stat.pureFirstVisits == 3
        assert stat.returningFirstVisits == 0
        assert stat.revisitCount == 0
        assert stat.averageAge is None

    def test_seed_months_ascending(self, seeded_stats):
        assert [s.month for s in seeded_stats] == ["2025-01", "2025-02", "2025-03"]

    def test_seed_counts(self, seeded_stats):
        jan, feb, mar = seeded_stats
        assert (jan.totalPatients, jan.pureFirstVisits, jan.returningFirstVisits, jan.revisitCount) == (5, 5, 0, 0)
        assert (feb.totalPatients, feb.pureFirstVisits, feb.returningFirstVisits, feb.revisitCount) == (5, 3, 1, 1)
        assert (mar.totalPatients, mar.pureFirstVisits, mar.returningFirstVisits, mar.revisitCount) == (4, 1, 1, 1)

    def test_seed_endoscopy(self, seeded_stats):
        assert [s.endoscopyCount for s in seeded_stats] == [1, 0, 1]

    def test_seed_average_age(self, seeded_stats):
        # Jan: (44 + 32 + 69 + 14) / 4 = 39.75; Feb: 217 / 5; Mar: 165 / 4 = 41.25
        assert [s.averageAge for s in seeded_stats] == [39.8, 43.4, 41.3]

    def test_categories_plus_unknown_equal_total(self, seeded_records, config):
        classified = classify_records(seeded_records, config)
        for stat in aggregate_monthly(classified, config):
            unknown = sum(1 for r in classified if r.monthKey == stat.month and r.category == UNKNOWN_CATEGORY)
            assert stat.pureFirstVisits + stat.returningFirstVisits + stat.revisitCount + unknown == stat.totalPatients

    def test_average_age_null_iff_no_valid_age(self, config):
        records = [
            make_record("2025-01-10", FOLLOW_UP, 1, birthDateIso="bad"),
            make_record("2025-01-11", FOLLOW_UP, 2, birthDateIso="1800-01-01"),
            make_record("2025-02-10", FOLLOW_UP, 3, birthDateIso="1800-01-01"),
            make_record("2025-02-11", FOLLOW_UP, 4, birthDateIso="2000-02-11"),
        ]
        stats = aggregate_monthly(classify_records(records, config), config)
        assert stats[0].averageAge is None
        assert stats[1].averageAge == 25.0

    def test_endoscopy_keywords_configurable(self):
        config = ClassifierConfig(endoscopyKeywords=["gi lab"])
        records = [
            make_record("2025-01-10", FOLLOW_UP, 1, department="GI Lab"),
            make_record("2025-01-11", FOLLOW_UP, 2, department="Endoscopy"),
        ]
        stats = aggregate_monthly(classify_records(records, config), config)
        assert stats[0].endoscopyCount == 1

    def test_malformed_visit_date_still_counted(self, config):
        records = [make_record("2025-01-xx", UNKNOWN_VISIT, None, birthDateIso="1990-01-01")]
        stats = aggregate_monthly(classify_records(records, config), config)
        assert stats[0].totalPatients == 1
        assert stats[0].averageAge is None


class TestRounding:

    @pytest.mark.parametrize("value, expected", [
        (41.25, 41.3), (39.75, 39.8), (2.04, 2.0), (37.666666, 37.7), (-6.25, -6.2), (-66.666666, -66.7),
    ])
    def test_halves_round_up(self, value, expected):
        assert round_one_decimal(value) == expected


class TestAgeBands:
    """Age-band series with optional department filter"""

    def test_all_departments(self, seeded_records):
        jan = aggregate_by_age_band(seeded_records)[0]
        assert jan.month == "2025-01"
        assert jan.total == 5
        assert jan.ageBands["<20"] == 1
        assert jan.ageBands["30-39"] == 1
        assert jan.ageBands["40-49"] == 1
        assert jan.ageBands["60-69"] == 1
        assert jan.ageBands["unknown"] == 1
        assert sum(jan.ageBands.values()) == jan.total

    def test_every_band_present(self, seeded_records):
        for stat in aggregate_by_age_band(seeded_records):
            assert len(stat.ageBands) == 9

    def test_department_filter(self, seeded_records):
        stats = aggregate_by_age_band(seeded_records, "Endoscopy")
        assert [s.month for s in stats] == ["2025-01", "2025-03"]
        assert stats[0].ageBands["60-69"] == 1
        assert stats[1].ageBands["50-59"] == 1

    def test_unassigned_department_filter(self):
        records = [make_record("2025-01-10", department=None), make_record("2025-01-11", department="  ")]
        stats = aggregate_by_age_band(records, "unassigned")
        assert stats[0].total == 2
        assert stats[0].ageBands["unknown"] == 2

    def test_empty(self):
        assert aggregate_by_age_band([]) == []


class TestDepartments:

    def test_department_list(self, seeded_records):
        assert get_department_list(seeded_records) == [
            "all",
            "General Medicine",
            "Internal Medicine",
            "Endoscopy",
            "Telemedicine (Self-Pay)",
            "Fever Clinic",
            "Foreign Patient Self-Pay",
            "Health Checkup (Course B)",
        ]

    def test_department_list_empty(self):
        assert get_department_list([]) == ["all"]

    def test_department_breakdown(self, seeded_records, config):
        stats = aggregate_by_department(classify_records(seeded_records, config))
        general = stats[0]
        assert general.department == "General Medicine"
        assert (general.total, general.pureFirst, general.returningFirst, general.revisit) == (4, 2, 1, 1)
        assert (general.pureRate, general.returningRate, general.revisitRate) == (50.0, 25.0, 25.0)
        assert general.averageAge == 44.0

        internal = stats[1]
        assert internal.department == "Internal Medicine"
        assert internal.pureRate == 66.7
        assert internal.returningRate == 33.3
        assert internal.averageAge == 37.7


class TestPeriodComparison:

    def test_month_over_month(self):
        assert month_over_month(120, 100) == {"value": 20, "percentage": 20.0}
        assert month_over_month(80, 100) == {"value": -20, "percentage": -20.0}

    def test_negative_half_percentage(self):
        assert month_over_month(15, 16) == {"value": -1, "percentage": -6.2}

    def test_no_baseline(self):
        assert month_over_month(5, 0) is None
        assert month_over_month(5, None) is None

    def test_compare_seed_latest(self, seeded_stats):
        _, feb, mar = seeded_stats
        comparison = compare_monthly_stats(mar, feb)
        assert comparison["totalPatients"] == {"value": -1, "percentage": -20.0}
        assert comparison["pureFirstVisits"] == {"value": -2, "percentage": -66.7}
        assert comparison["returningFirstVisits"] == {"value": 0, "percentage": 0.0}
        assert comparison["endoscopyCount"] is None

    def test_compare_without_previous(self, seeded_stats):
        comparison = compare_monthly_stats(seeded_stats[0], None)
        assert all(value is None for value in comparison.values())

    def test_visit_rates(self, seeded_stats):
        assert visit_rates(seeded_stats[2]) == {"pureRate": 25.0, "returningRate": 25.0, "revisitRate": 25.0}

    def test_visit_rates_empty_month(self):
        assert visit_rates(MonthlyStat(month="2025-01")) == {
            "pureRate": None, "returningRate": None, "revisitRate": None,
        }
