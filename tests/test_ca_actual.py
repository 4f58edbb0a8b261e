"""Tests for actual revenue imports."""

import pytest
from datetime import date, time
from decimal import Decimal

from restops.domain.errors import ValidationError


def test_parse_revenue_file(actual_service, revenue_setup, fixtures_dir):
    """Test rows are resolved to restaurants, dates and normalised hours."""
    lines = actual_service.parse(str(fixtures_dir / "ventes_par01.csv"))

    assert len(lines) == 5
    assert all(line.error is None for line in lines)
    assert lines[0].restaurant_id == revenue_setup["restaurant_id"]
    assert lines[0].sale_date == date(2026, 3, 3)
    assert [line.hour for line in lines] == ["12:15", "12:15", "13:00", "20:30", "00:45"]
    assert lines[0].amount_incl_tax == Decimal("22.00")


def test_parse_and_simulate_errors(actual_service, revenue_setup, fixtures_dir):
    """Test unresolvable rows carry an error message."""
    lines = actual_service.simulate(actual_service.parse(str(fixtures_dir / "ventes_errors.csv")))

    assert lines[0].error is None
    assert lines[1].error == 'Restaurant "LYO99" not found'
    assert lines[2].error == 'Invalid date "31/02/2026"'
    assert lines[3].error == "No service type found for hour 16:30"


def test_parse_missing_columns(actual_service, revenue_setup, tmp_path):
    """Test a file without the expected columns is rejected."""
    path = tmp_path / "bad.csv"
    path.write_text("entite;date\nPAR01;03/03/2026\n", encoding="utf-8")

    with pytest.raises(ValidationError, match="Missing columns in file"):
        actual_service.parse(str(path))


def test_parse_empty_file(actual_service, tmp_path):
    """Test an empty file is rejected."""
    path = tmp_path / "empty.csv"
    path.write_text("entite;date;heure;document;pu_ht;pu_ttc;montant_ht;montant_ttc\n", encoding="utf-8")

    with pytest.raises(ValidationError, match="empty"):
        actual_service.parse(str(path))


def test_simulate_assigns_services(actual_service, revenue_setup, fixtures_dir):
    """Test sales are assigned to the service whose slot contains their hour."""
    lines = actual_service.simulate(actual_service.parse(str(fixtures_dir / "ventes_par01.csv")))

    assert [line.service_type_id for line in lines] == [
        revenue_setup["lunch_id"],
        revenue_setup["lunch_id"],
        revenue_setup["lunch_id"],
        revenue_setup["dinner_id"],
        revenue_setup["dinner_id"],
    ]
    assert {line.category_id for line in lines} == {revenue_setup["category_id"]}
    totals = actual_service.totals(lines)
    assert totals["amount_excl_tax"] == Decimal("108.00")
    assert totals["amount_incl_tax"] == Decimal("118.80")


def test_simulate_service_without_subcategory(actual_service, budget_service, revenue_setup, fixtures_dir):
    """Test a service type without subcategory cannot be booked."""
    budget_service.create_service_type(
        revenue_setup["restaurant_id"], "GOUTER", "Afternoon", time(15, 30), time(17, 0)
    )
    lines = actual_service.simulate(actual_service.parse(str(fixtures_dir / "ventes_errors.csv")))

    assert lines[3].error == "Service type GOUTER has no flow category"


def test_import_lines(actual_service, revenue_setup, fixtures_dir, temp_db):
    """Test daily, per-service and hourly records are written."""
    lines = actual_service.simulate(actual_service.parse(str(fixtures_dir / "ventes_par01.csv")))

    result = actual_service.import_lines(lines)

    assert result.actuals == 1
    assert result.details == 2
    assert result.hourly == 4
    assert result.errors == []

    actuals = actual_service.list_actuals(restaurant_id=revenue_setup["restaurant_id"])
    assert len(actuals) == 1
    assert actuals[0].amount_excl_tax == Decimal("108.00")
    assert actuals[0].amount_incl_tax == Decimal("118.80")

    details = temp_db.list_ca_actual_details(actuals[0].id)
    by_service = {d.service_type_id: d for d in details}
    assert by_service[revenue_setup["lunch_id"]].amount_excl_tax == Decimal("40.00")
    assert by_service[revenue_setup["dinner_id"]].amount_incl_tax == Decimal("74.80")

    hourly = temp_db.list_ca_actual_hourly(by_service[revenue_setup["lunch_id"]].id)
    first = next(h for h in hourly if h.hour == "12:15")
    assert first.document == "T001"
    assert first.amount_excl_tax == Decimal("25.00")
    assert first.unit_price_excl_tax == Decimal("10.00")


def test_import_lines_twice_replaces_amounts(actual_service, revenue_setup, fixtures_dir):
    """Test importing the same sales twice gives the same records."""
    path = str(fixtures_dir / "ventes_par01.csv")
    actual_service.import_lines(actual_service.simulate(actual_service.parse(path)))
    actual_service.import_lines(actual_service.simulate(actual_service.parse(path)))

    actuals = actual_service.list_actuals()
    assert len(actuals) == 1
    assert actuals[0].amount_excl_tax == Decimal("108.00")


def test_import_lines_refuses_errors(actual_service, revenue_setup, fixtures_dir):
    """Test nothing is written when a line has an error."""
    lines = actual_service.simulate(actual_service.parse(str(fixtures_dir / "ventes_errors.csv")))

    with pytest.raises(ValidationError, match="3 line\\(s\\) with errors"):
        actual_service.import_lines(lines)
    assert actual_service.list_actuals() == []


def test_import_falls_back_to_excl_tax(actual_service, revenue_setup, tmp_path):
    """Test daily revenue incl. tax falls back to excl. tax when missing."""
    path = tmp_path / "ht_only.csv"
    path.write_text(
        "entite;date;heure;document;pu_ht;pu_ttc;montant_ht;montant_ttc\n"
        "PAR01;04/03/2026;12:00;T1;10,00;;10,00;\n",
        encoding="utf-8",
    )

    actual_service.import_lines(actual_service.simulate(actual_service.parse(str(path))))

    actual = actual_service.list_actuals()[0]
    assert actual.amount_incl_tax == Decimal("10.00")
