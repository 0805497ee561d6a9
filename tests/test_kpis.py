"""Tests for period aggregation and derived KPIs."""

import random
from datetime import date, datetime

import pytest

from kolonnen_dashboard.kpis import (
    add_daily_to_totals,
    aggregate_period,
    calculate_kpis,
    init_totals,
    is_date_in_range,
    record_has_entries,
)
from kolonnen_dashboard.models import DateRange, PeriodTotals

from conftest import make_record

JANUARY = DateRange(date(2025, 1, 1), date(2025, 1, 31))


class TestRecordHasEntries:
    def test_planned_revenue_counts(self):
        assert record_has_entries(make_record(planned_revenue=100, actual_revenue=0, employees_count=0))

    def test_actual_revenue_counts(self):
        assert record_has_entries(make_record(planned_revenue=0, actual_revenue=100, employees_count=0))

    def test_employees_count(self):
        assert record_has_entries(make_record(planned_revenue=0, actual_revenue=0, employees_count=3))

    def test_all_zero_has_no_entries(self):
        assert not record_has_entries(make_record(planned_revenue=0, actual_revenue=0, employees_count=0))

    def test_missing_values_have_no_entries(self):
        assert not record_has_entries(
            make_record(planned_revenue=None, actual_revenue=None, employees_count=None)
        )

    def test_explicit_false_wins_over_values(self):
        assert not record_has_entries(make_record(has_entries=False, actual_revenue=5000))

    def test_explicit_true_wins_over_zeros(self):
        assert record_has_entries(
            make_record(has_entries=True, planned_revenue=0, actual_revenue=0, employees_count=0)
        )


class TestIsDateInRange:
    def test_bounds_are_inclusive(self):
        assert is_date_in_range("2025-01-01", JANUARY)
        assert is_date_in_range("2025-01-31", JANUARY)
        assert not is_date_in_range("2025-02-01", JANUARY)

    def test_time_of_day_is_ignored(self):
        rng = DateRange(datetime(2025, 1, 15, 18, 0), datetime(2025, 1, 15, 6, 0))
        assert is_date_in_range("2025-01-15T23:59:00", rng)

    def test_inverted_range_matches_nothing(self):
        rng = DateRange(date(2025, 1, 31), date(2025, 1, 1))
        assert not is_date_in_range("2025-01-15", rng)

    def test_unparseable_date_is_outside(self):
        assert not is_date_in_range("kein Datum", JANUARY)

    def test_missing_bound_matches_nothing(self):
        assert not is_date_in_range("2025-01-15", DateRange(None, date(2025, 1, 31)))
        assert not is_date_in_range("2025-01-15", DateRange(date(2025, 1, 1), "kein Datum"))


class TestTotals:
    def test_init_is_zero(self):
        totals = init_totals()
        assert totals == PeriodTotals(0, 0, 0, 0, 0, 0, 0)

    def test_hours_are_products(self):
        record = make_record(employees_count=4, hours_per_employee=7.5, employees_plan=5, hours_plan=8)
        totals = add_daily_to_totals(init_totals(), record)
        assert totals.total_hours == 30
        assert totals.total_hours_plan == 40
        assert totals.record_count == 1

    def test_folding_does_not_mutate(self):
        start = init_totals()
        add_daily_to_totals(start, make_record())
        assert start.record_count == 0


class TestAggregatePeriod:
    def test_missing_bound_gives_empty_aggregation(self):
        result = aggregate_period([make_record()], DateRange(None, date(2025, 1, 31)))

        assert result.totals == init_totals()
        assert result.contributing_crews_count == 0

    def test_excludes_records_outside_range(self):
        records = [
            make_record(date="2025-01-10", kolonne_id="crew-1"),
            make_record(date="2025-01-15", kolonne_id="crew-2"),
            make_record(date="2025-01-20", kolonne_id="crew-3"),
        ]
        result = aggregate_period(records, DateRange(date(2025, 1, 14), date(2025, 1, 16)))

        assert result.contributing_crews_count == 1
        assert result.contributing_crew_ids == {"crew-2"}

    def test_excludes_records_without_entries(self):
        records = [
            make_record(kolonne_id="crew-1", planned_revenue=100),
            make_record(kolonne_id="crew-2", planned_revenue=0, actual_revenue=0, employees_count=0),
        ]
        result = aggregate_period(records, JANUARY)

        assert result.contributing_crew_ids == {"crew-1"}
        assert result.totals.record_count == 1

    def test_counts_unique_crews(self):
        records = [
            make_record(date="2025-01-10", kolonne_id="crew-1"),
            make_record(date="2025-01-11", kolonne_id="crew-1"),
            make_record(date="2025-01-12", kolonne_id="crew-2"),
        ]
        result = aggregate_period(records, JANUARY)

        assert result.contributing_crews_count == 2
        assert result.totals.record_count == 3

    def test_sums_totals(self):
        records = [
            make_record(kolonne_id="crew-1", planned_revenue=1000, actual_revenue=1200,
                        employees_count=5, hours_per_employee=8),
            make_record(kolonne_id="crew-2", planned_revenue=2000, actual_revenue=1800,
                        employees_count=3, hours_per_employee=10),
        ]
        totals = aggregate_period(records, JANUARY).totals

        assert totals.total_planned == 3000
        assert totals.total_actual == 3000
        assert totals.total_employees == 8
        assert totals.total_hours == 5 * 8 + 3 * 10
        assert totals.record_count == 2

    def test_out_of_range_and_empty_records_give_no_crews(self):
        records = [
            make_record(kolonne_id="A", date="2025-01-10", planned_revenue=100,
                        actual_revenue=0, employees_count=0),
            make_record(kolonne_id="B", date="2025-01-15", planned_revenue=0,
                        actual_revenue=0, employees_count=0),
        ]
        result = aggregate_period(records, DateRange(date(2025, 1, 14), date(2025, 1, 16)))

        assert result.contributing_crews_count == 0
        assert result.totals == init_totals()

    def test_accepts_store_rows(self):
        rows = [
            {"id": "1", "date": "2025-01-03", "kolonne_id": "K1", "employees_count": 2,
             "hours_per_employee": None, "planned_revenue": "150,5", "actual_revenue": None,
             "has_entries": None},
        ]
        totals = aggregate_period(rows, JANUARY).totals

        assert totals.total_planned == pytest.approx(150.5)
        assert totals.total_actual == 0
        assert totals.total_hours == 0

    def test_totals_match_filtered_sum_regardless_of_order(self):
        rnd = random.Random(7)
        records = [
            make_record(
                id=str(i),
                date=f"2025-01-{rnd.randint(1, 28):02d}",
                kolonne_id=f"crew-{rnd.randint(1, 4)}",
                planned_revenue=rnd.choice([0, 500, 900]),
                actual_revenue=rnd.choice([0, 450, 1000]),
                employees_count=rnd.choice([0, 3, 6]),
                has_entries=rnd.choice([None, True, False]),
            )
            for i in range(60)
        ]
        rng = DateRange(date(2025, 1, 8), date(2025, 1, 21))
        expected = [r for r in records if is_date_in_range(r.date, rng) and record_has_entries(r)]

        result = aggregate_period(records, rng)
        shuffled = aggregate_period(list(reversed(records)), rng)

        assert result.totals.total_planned == sum(r.planned_revenue for r in expected)
        assert result.totals.record_count == len(expected)
        assert result.contributing_crew_ids == {r.kolonne_id for r in expected}
        assert result.contributing_crews_count == len(result.contributing_crew_ids)
        assert shuffled.totals == result.totals

    def test_repeated_runs_are_identical(self):
        records = [make_record(actual_revenue=0.1 * i, kolonne_id=f"c{i % 3}") for i in range(20)]
        assert aggregate_period(records, JANUARY) == aggregate_period(records, JANUARY)


class TestCalculateKPIs:
    def test_revenue_kpis(self):
        totals = PeriodTotals(total_planned=1000, total_actual=1200,
                              total_employees=4, total_hours=40)
        kpis = calculate_kpis(totals)

        assert kpis["delta"] == 200
        assert kpis["delta_positive"] is True
        assert kpis["avg_rev_per_employee"] == 300
        assert kpis["avg_rev_per_hour"] == 30

    def test_zero_delta_is_positive(self):
        assert calculate_kpis(PeriodTotals(total_planned=50, total_actual=50))["delta_positive"]

    def test_negative_delta(self):
        kpis = calculate_kpis(PeriodTotals(total_planned=100, total_actual=40))
        assert kpis["delta"] == -60
        assert kpis["delta_positive"] is False

    def test_plan_fulfillment(self):
        totals = PeriodTotals(total_employees=9, total_employees_plan=10,
                              total_hours=72, total_hours_plan=80)
        kpis = calculate_kpis(totals)

        assert kpis["employees_delta"] == -1
        assert kpis["employees_fulfillment"] == pytest.approx(90)
        assert kpis["hours_delta"] == -8
        assert kpis["hours_fulfillment"] == pytest.approx(90)

    def test_empty_totals_give_zero_ratios(self):
        kpis = calculate_kpis(init_totals())
        assert kpis["avg_rev_per_employee"] == 0
        assert kpis["avg_rev_per_hour"] == 0
        assert kpis["employees_fulfillment"] == 0
        assert kpis["hours_fulfillment"] == 0
