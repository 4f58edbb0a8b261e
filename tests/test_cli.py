"""End-to-end tests of the command line interface."""

from sqlalchemy.exc import SQLAlchemyError

from restops.cli.main import cli
from restops.database.sqlalchemy_db import SQLAlchemyDatabase
from restops.domain.entities import ImportStatus


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_restaurant_create_and_list(cli_runner, temp_db):
    """Test creating and listing restaurants."""
    result = run(cli_runner, temp_db, "restaurant", "create", "par01", "Paris Bastille")
    assert result.exit_code == 0
    assert "Created restaurant 'PAR01' (ID:" in result.output

    result = run(cli_runner, temp_db, "restaurant", "list")
    assert result.exit_code == 0
    assert "PAR01" in result.output
    assert "Paris Bastille" in result.output


def test_restaurant_duplicate_exits_with_error(cli_runner, temp_db, sample_restaurant):
    """Test domain errors are reported with exit code 1."""
    result = run(cli_runner, temp_db, "restaurant", "create", "PAR01", "Again")

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "already exists" in result.output


def test_account_create_for_restaurant(cli_runner, temp_db, sample_restaurant):
    """Test creating an account linked to a restaurant."""
    result = run(
        cli_runner,
        temp_db,
        "account",
        "create",
        "SG1",
        "Societe Generale",
        "--iban",
        "FR76 3000 3000 1111 2222 3333 444",
        "--restaurant",
        "PAR01",
    )
    assert result.exit_code == 0
    assert "Created bank account 'SG1' (ID:" in result.output

    result = run(cli_runner, temp_db, "account", "list")
    assert "SG1" in result.output


def test_account_create_missing_iban_value(cli_runner, temp_db):
    """Test the field errors of a rejected account are listed."""
    result = run(cli_runner, temp_db, "account", "create", "SG1", "Societe Generale", "--iban", " ")

    assert result.exit_code == 1
    assert "iban" in result.output


def test_format_create_and_list(cli_runner, temp_db):
    """Test creating an import format from the command line."""
    result = run(
        cli_runner,
        temp_db,
        "format",
        "create",
        "BNP",
        "--bank",
        "BNP Paribas",
        "--column",
        "date:date",
        "--column",
        "libelle",
        "--column",
        "montant:amount",
    )
    assert result.exit_code == 0
    assert "Created import format 'BNP' (ID:" in result.output

    result = run(cli_runner, temp_db, "format", "list")
    assert "BNP" in result.output
    assert "montant:amount" in result.output


def test_statement_import_and_process(cli_runner, temp_db, sample_account, sample_format, fixtures_dir):
    """Test importing a statement then booking its lines."""
    statement = str(fixtures_dir / "releve_bnp.csv")

    result = run(cli_runner, temp_db, "statement", "import", statement, "--format", "BNP")
    assert result.exit_code == 0
    assert "Import completed: 3 lines imported." in result.output
    assert "Import ID:" in result.output

    result = run(cli_runner, temp_db, "statement", "process")
    assert result.exit_code == 0
    assert "Processing completed: 2 entries created" in result.output

    result = run(cli_runner, temp_db, "statement", "lines", "--status", "ERREUR")
    assert result.exit_code == 0
    assert "BE002" in result.output

    result = run(cli_runner, temp_db, "statement", "entries")
    assert result.exit_code == 0
    assert "-42.50" in result.output


def test_statement_import_twice_is_rejected(cli_runner, temp_db, sample_format, fixtures_dir):
    """Test a file name can only be imported once."""
    statement = str(fixtures_dir / "releve_bnp.csv")
    run(cli_runner, temp_db, "statement", "import", statement, "--format", "BNP")

    result = run(cli_runner, temp_db, "statement", "import", statement, "--format", "BNP")

    assert result.exit_code == 1
    assert "already been imported" in result.output


def test_statement_import_storage_failure(
    cli_runner, temp_db, import_service, sample_format, fixtures_dir, monkeypatch
):
    """Test a database failure during import is reported without a traceback."""

    def failing_insert(self, import_id, client_id, lines):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(SQLAlchemyDatabase, "add_statement_lines", failing_insert)

    result = run(
        cli_runner, temp_db, "statement", "import", str(fixtures_dir / "releve_bnp.csv"), "--format", "BNP"
    )

    assert result.exit_code == 1
    assert "Error: disk I/O error" in result.output
    assert not isinstance(result.exception, SQLAlchemyError)
    assert [imp.status for imp in import_service.list_imports()] == [ImportStatus.FAILED]


def test_closure_create_prints_totals(cli_runner, temp_db, sample_restaurant):
    """Test a closure is saved and its totals shown."""
    result = run(
        cli_runner,
        temp_db,
        "closure",
        "create",
        "--restaurant",
        "PAR01",
        "--date",
        "2024-03-15",
        "--revenue",
        "2450",
        "--deposit",
        "800",
        "--opening-float",
        "150",
        "--card",
        "1500:1487.50:midi",
        "--expense",
        "42,90:F-1021",
    )

    assert result.exit_code == 0
    assert "Saved cash closure (ID:" in result.output
    assert "1500.00" in result.output
    assert "907.10" in result.output
    assert "107.10" in result.output
    assert "257.10" in result.output


def test_closure_unknown_restaurant(cli_runner, temp_db):
    """Test an unknown restaurant stops the command."""
    result = run(
        cli_runner,
        temp_db,
        "closure",
        "create",
        "--restaurant",
        "NOPE",
        "--date",
        "2024-03-15",
        "--revenue",
        "10",
        "--deposit",
        "0",
        "--opening-float",
        "0",
    )

    assert result.exit_code == 1


def test_invoice_paid_by_closure(cli_runner, temp_db, sample_restaurant):
    """Test a cash invoice is attached to a closure and then protected."""
    result = run(cli_runner, temp_db, "invoice", "payment-mode", "ESP", "Espèces", "--cash")
    assert result.exit_code == 0
    assert "Created payment mode 'ESP'" in result.output

    result = run(
        cli_runner,
        temp_db,
        "invoice",
        "create",
        "--restaurant",
        "PAR01",
        "--supplier",
        "Metro",
        "--mode",
        "esp",
        "--date",
        "2024-03-14",
        "--excl-tax",
        "35,75",
        "--vat",
        "7.15",
        "--number",
        "F-1021",
    )
    assert result.exit_code == 0
    assert "Created purchase invoice (ID: 1)" in result.output

    result = run(cli_runner, temp_db, "invoice", "list", "--restaurant", "PAR01", "--cash")
    assert result.exit_code == 0
    assert "Metro" in result.output
    assert "42.90" in result.output

    result = run(
        cli_runner,
        temp_db,
        "closure",
        "create",
        "--restaurant",
        "PAR01",
        "--date",
        "2024-03-15",
        "--revenue",
        "900",
        "--deposit",
        "300",
        "--opening-float",
        "150",
        "--invoice",
        "1",
    )
    assert result.exit_code == 0
    assert "857.10" in result.output

    result = run(cli_runner, temp_db, "closure", "show", "1")
    assert "(invoice 1)" in result.output

    result = run(cli_runner, temp_db, "invoice", "list", "--restaurant", "PAR01", "--cash")
    assert "No purchase invoices found." in result.output

    result = run(cli_runner, temp_db, "invoice", "delete", "1")
    assert result.exit_code == 1
    assert "attached to cash closure(s) 1" in result.output


def test_invoice_create_invalid_amounts(cli_runner, temp_db, sample_restaurant):
    """Test invalid invoice amounts are listed per field."""
    run(cli_runner, temp_db, "invoice", "payment-mode", "VIR", "Virement")

    result = run(
        cli_runner,
        temp_db,
        "invoice",
        "create",
        "--restaurant",
        "PAR01",
        "--supplier",
        "Metro",
        "--mode",
        "VIR",
        "--date",
        "2024-03-14",
        "--excl-tax",
        "0",
        "--vat",
        "0",
    )

    assert result.exit_code == 1
    assert "amount_excl_tax: Amount excl. tax must be greater than 0" in result.output
    assert "amount_incl_tax: Amount incl. tax must be greater than 0" in result.output


def test_closure_unknown_invoice(cli_runner, temp_db, sample_restaurant):
    """Test an unknown invoice stops the closure command."""
    result = run(
        cli_runner,
        temp_db,
        "closure",
        "create",
        "--restaurant",
        "PAR01",
        "--date",
        "2024-03-15",
        "--revenue",
        "10",
        "--deposit",
        "0",
        "--opening-float",
        "0",
        "--invoice",
        "42",
    )

    assert result.exit_code == 1
    assert "Purchase invoice 42 not found" in result.output


def test_ca_actual_dry_run(cli_runner, temp_db, revenue_setup, fixtures_dir):
    """Test a dry run reports totals without writing records."""
    result = run(cli_runner, temp_db, "ca-actual", "import", str(fixtures_dir / "ventes_par01.csv"), "--dry-run")

    assert result.exit_code == 0
    assert "5 line(s) read, 0 with errors" in result.output
    assert "108.00" in result.output
    assert "Dry run: nothing imported." in result.output

    result = run(cli_runner, temp_db, "ca-actual", "list")
    assert "No actual revenue found." in result.output


def test_ca_actual_import(cli_runner, temp_db, revenue_setup, fixtures_dir):
    """Test importing a revenue file writes daily, service and hourly records."""
    result = run(cli_runner, temp_db, "ca-actual", "import", str(fixtures_dir / "ventes_par01.csv"))

    assert result.exit_code == 0
    assert "Daily records: 1" in result.output
    assert "Service records: 2" in result.output
    assert "Hourly records: 4" in result.output


def test_ca_actual_import_with_errors(cli_runner, temp_db, revenue_setup, fixtures_dir):
    """Test a file with unresolved lines is not imported."""
    result = run(cli_runner, temp_db, "ca-actual", "import", str(fixtures_dir / "ventes_errors.csv"))

    assert result.exit_code == 1
    assert "3 with errors" in result.output
    assert "Import complete" not in result.output


def test_hr_budget_without_data(cli_runner, temp_db):
    """Test the budget of an empty database."""
    result = run(cli_runner, temp_db, "hr", "budget", "2024")

    assert result.exit_code == 0
    assert "No HR budget data found." in result.output


def test_hr_budget_export_csv(cli_runner, temp_db, hr_setup, employee_service, tmp_path):
    """Test exporting the projected budget to CSV."""
    from datetime import date
    from decimal import Decimal

    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2024, 1, 1)
    )
    employee_service.add_salary(hr_setup["employee_id"], hr_setup["salary_id"], date(2024, 1, 1), Decimal("2000"))
    output = tmp_path / "budget.csv"

    result = run(cli_runner, temp_db, "hr", "budget", "2024", "--output", str(output))

    assert result.exit_code == 0
    assert "Exported" in result.output
    content = output.read_text(encoding="utf-8")
    assert content.startswith("Level;Restaurant;Function;Employee;Subcategory;Jan")
    assert "Martin Claire" in content


def test_hr_add_employee_generates_staff_number(cli_runner, temp_db, hr_setup):
    """Test employees created without a staff number get the next one."""
    result = run(cli_runner, temp_db, "hr", "add-employee", "Durand", "Paul")

    assert result.exit_code == 0
    assert "Created employee EMP003 'Durand Paul'" in result.output
