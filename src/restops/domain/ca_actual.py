"""Import of actual revenue (CA réel) from point-of-sale exports."""

import csv
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, CAActual
from restops.domain.errors import ValidationError
from restops.utils.amount_parser import parse_lenient_amount
from restops.utils.date_parser import parse_day_month_year
from restops.utils.time_parser import format_hour, hour_in_slot

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "entite",
    "date",
    "heure",
    "document",
    "pu_ht",
    "pu_ttc",
    "montant_ht",
    "montant_ttc",
)
DELIMITER = ";"
ZERO = Decimal("0")


@dataclass
class CAActualLine:
    """One sale line of a revenue file, enriched during simulation."""

    line_number: int
    restaurant_code: str
    date_text: str
    hour: str
    document: str
    unit_price_excl_tax: Decimal
    unit_price_incl_tax: Decimal
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal
    restaurant_id: Optional[int] = None
    sale_date: Optional[date] = None
    service_type_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    category_id: Optional[int] = None
    error: Optional[str] = None


@dataclass
class CAActualImportResult:
    """Counts of records written by an import."""

    actuals: int = 0
    details: int = 0
    hourly: int = 0
    errors: list[str] = field(default_factory=list)


class CAActualImportService:
    """Parse, simulate and import point-of-sale revenue files.

    A file is first parsed (restaurants and dates resolved), then simulated
    (each sale assigned to the service whose time slot contains its hour)
    and finally imported as daily, per-service and hourly revenue records.
    """

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        self.db = db
        self.client_id = client_id

    def parse(self, file_path: str) -> list[CAActualLine]:
        """Read a ";"-delimited revenue file.

        Args:
            file_path: Path to the revenue file

        Returns:
            One CAActualLine per row; rows that cannot be resolved carry an error

        Raises:
            ValidationError: If the file is empty or misses required columns
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Revenue file not found: {file_path}")

        restaurants = {r.code.upper(): r.id for r in self.db.list_restaurants(self.client_id)}

        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f, delimiter=DELIMITER)
            columns = [c.strip() for c in reader.fieldnames or []]
            rows = [
                {(k or "").strip(): v for k, v in row.items()}
                for row in reader
                if any((v or "").strip() for v in row.values() if isinstance(v, str))
            ]

        if not rows:
            raise ValidationError("The revenue file is empty")
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise ValidationError(f"Missing columns in file: {', '.join(missing)}")

        lines = []
        for line_number, row in enumerate(rows, start=1):
            lines.append(self._parse_row(line_number, row, restaurants))

        error_count = sum(1 for line in lines if line.error)
        if error_count:
            logger.warning("Revenue file parsed with %d error(s) on %d line(s)", error_count, len(lines))
        return lines

    @staticmethod
    def _parse_row(line_number: int, row: dict[str, Any], restaurants: dict[str, int]) -> CAActualLine:
        code = (row.get("entite") or "").strip().upper()
        date_text = (row.get("date") or "").strip()
        line = CAActualLine(
            line_number=line_number,
            restaurant_code=code,
            date_text=date_text,
            hour=format_hour((row.get("heure") or "").strip()),
            document=(row.get("document") or "").strip(),
            unit_price_excl_tax=parse_lenient_amount(row.get("pu_ht")),
            unit_price_incl_tax=parse_lenient_amount(row.get("pu_ttc")),
            amount_excl_tax=parse_lenient_amount(row.get("montant_ht")),
            amount_incl_tax=parse_lenient_amount(row.get("montant_ttc")),
            restaurant_id=restaurants.get(code),
            sale_date=parse_day_month_year(date_text),
        )
        if not code:
            line.error = "Missing restaurant"
        elif line.restaurant_id is None:
            line.error = f'Restaurant "{code}" not found'
        elif line.sale_date is None:
            line.error = f'Invalid date "{date_text}"'
        elif not line.hour:
            line.error = "Missing hour"
        return line

    def simulate(self, lines: list[CAActualLine]) -> list[CAActualLine]:
        """Assign service type, subcategory and category to each valid line.

        Lines whose hour falls in no service slot get an error. The lines are
        updated in place and returned.
        """
        service_types: dict[int, list] = {}
        subcategories = {s.id: s for s in self.db.list_flow_subcategories(self.client_id)}

        for line in lines:
            if line.error:
                continue
            if line.restaurant_id not in service_types:
                service_types[line.restaurant_id] = self.db.list_service_types(
                    self.client_id, restaurant_id=line.restaurant_id
                )
            match = next(
                (
                    s
                    for s in service_types[line.restaurant_id]
                    if s.start_time is not None
                    and s.end_time is not None
                    and hour_in_slot(line.hour, s.start_time, s.end_time)
                ),
                None,
            )
            if match is None:
                line.error = f"No service type found for hour {line.hour}"
                continue

            line.service_type_id = match.id
            line.subcategory_id = match.subcategory_id
            subcategory = subcategories.get(match.subcategory_id)
            line.category_id = subcategory.category_id if subcategory is not None else None
            if line.category_id is None:
                line.error = f"Service type {match.code} has no flow category"
        return lines

    @staticmethod
    def totals(lines: list[CAActualLine]) -> dict[str, Decimal]:
        """Sum the amounts of the lines."""
        return {
            "amount_excl_tax": sum((line.amount_excl_tax for line in lines), ZERO),
            "amount_incl_tax": sum((line.amount_incl_tax for line in lines), ZERO),
        }

    def import_lines(self, lines: list[CAActualLine]) -> CAActualImportResult:
        """Write simulated lines as actual revenue records.

        Amounts of existing records for the same keys are replaced, so
        importing the same file twice gives the same result.

        Args:
            lines: Lines returned by simulate()

        Returns:
            CAActualImportResult with the number of records written per level
            and the errors of groups that could not be written

        Raises:
            ValidationError: If any line carries an error
        """
        errors = [line for line in lines if line.error]
        if errors:
            raise ValidationError(
                f"Cannot import: {len(errors)} line(s) with errors, "
                f"first on line {errors[0].line_number}: {errors[0].error}"
            )

        groups: OrderedDict[tuple, list[CAActualLine]] = OrderedDict()
        for line in lines:
            key = (line.restaurant_id, line.sale_date, line.category_id)
            groups.setdefault(key, []).append(line)

        result = CAActualImportResult()
        for (restaurant_id, sale_date, category_id), group in groups.items():
            try:
                totals = self.totals(group)
                actual_id = self.db.upsert_ca_actual(
                    client_id=self.client_id,
                    restaurant_id=restaurant_id,
                    sale_date=sale_date,
                    category_id=category_id,
                    amount_excl_tax=totals["amount_excl_tax"],
                    amount_incl_tax=totals["amount_incl_tax"] or totals["amount_excl_tax"],
                )
            except Exception as e:
                logger.error("Could not write revenue of %s", sale_date, exc_info=True)
                result.errors.append(f"Date {sale_date.isoformat()}: {e}")
                continue
            result.actuals += 1
            self._import_services(actual_id, group, result)

        logger.info(
            "Revenue import: %d daily, %d service and %d hourly record(s), %d error(s)",
            result.actuals,
            result.details,
            result.hourly,
            len(result.errors),
        )
        return result

    def _import_services(
        self, actual_id: int, lines: list[CAActualLine], result: CAActualImportResult
    ) -> None:
        by_service: OrderedDict[int, list[CAActualLine]] = OrderedDict()
        for line in lines:
            by_service.setdefault(line.service_type_id, []).append(line)

        for service_type_id, service_lines in by_service.items():
            try:
                totals = self.totals(service_lines)
                detail_id = self.db.upsert_ca_actual_detail(
                    actual_id=actual_id,
                    service_type_id=service_type_id,
                    amount_excl_tax=totals["amount_excl_tax"],
                    amount_incl_tax=totals["amount_incl_tax"],
                )
                result.details += 1

                by_hour: OrderedDict[tuple, CAActualLine] = OrderedDict()
                for line in service_lines:
                    key = (line.hour, line.document)
                    if key in by_hour:
                        first = by_hour[key]
                        first.amount_excl_tax += line.amount_excl_tax
                        first.amount_incl_tax += line.amount_incl_tax
                    else:
                        by_hour[key] = CAActualLine(**vars(line))

                for line in by_hour.values():
                    self.db.upsert_ca_actual_hourly(
                        detail_id=detail_id,
                        hour=line.hour,
                        document=line.document or None,
                        unit_price_excl_tax=line.unit_price_excl_tax,
                        unit_price_incl_tax=line.unit_price_incl_tax,
                        amount_excl_tax=line.amount_excl_tax,
                        amount_incl_tax=line.amount_incl_tax,
                    )
                    result.hourly += 1
            except Exception as e:
                logger.error("Could not write revenue of service type %s", service_type_id, exc_info=True)
                result.errors.append(f"Service type {service_type_id}: {e}")

    def list_actuals(
        self,
        restaurant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CAActual]:
        """List actual revenue records."""
        return self.db.list_ca_actuals(
            self.client_id, restaurant_id=restaurant_id, start_date=start_date, end_date=end_date
        )
