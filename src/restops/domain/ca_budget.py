"""Revenue (CA) budget domain service and its reference data."""

import logging
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Optional

from restops.database.base import Database
from restops.domain.entities import (
    DEFAULT_CLIENT_ID,
    CABudget,
    CABudgetDetail,
    FlowCategory,
    FlowSubcategory,
    FlowType,
    OpeningDays,
    ServiceType,
)
from restops.domain.errors import (
    NotFoundError,
    ValidationError,
    ca_budget_not_found,
    restaurant_not_found,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MIN_YEAR = 2000
MAX_YEAR = 2100


@dataclass
class BudgetDetailDraft:
    """Budget line of one service type and subcategory."""

    service_type_id: Optional[int]
    subcategory_id: Optional[int]
    amount_excl_tax: Decimal = ZERO
    amount_incl_tax: Decimal = ZERO
    open_days: Optional[int] = None
    covers: Optional[int] = None
    average_cover_price: Optional[Decimal] = None


@dataclass
class BudgetHeader:
    """Budget header values; amounts are derived from the detail lines."""

    restaurant_id: Optional[int]
    year: int
    month: int
    category_id: Optional[int]
    open_days: Optional[int] = None
    covers: Optional[int] = None
    average_cover_price: Optional[Decimal] = None
    comment: Optional[str] = None
    details: list[BudgetDetailDraft] = field(default_factory=list)


def _check_figures(values, errors: dict[str, str], prefix: str = "") -> None:
    if values.open_days is not None and not 0 <= values.open_days <= 31:
        errors[f"{prefix}open_days"] = "Open days must be between 0 and 31"
    if values.covers is not None and values.covers < 0:
        errors[f"{prefix}covers"] = "Covers cannot be negative"
    if values.average_cover_price is not None and values.average_cover_price < 0:
        errors[f"{prefix}average_cover_price"] = "Average cover price cannot be negative"


class CABudgetService:
    """Service for monthly revenue budgets per restaurant and flow category."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize CA budget service.

        Args:
            db: Database instance
            client_id: Tenant the budgets belong to
        """
        self.db = db
        self.client_id = client_id

    # Reference data
    def create_category(
        self,
        code: str,
        label: str,
        flow_type: FlowType = FlowType.INCOME,
        restaurant_id: Optional[int] = None,
    ) -> int:
        """Create a flow category; restaurant_id None shares it with every restaurant."""
        if not code or not label:
            raise ValidationError("Category code and label are required")
        return self.db.create_flow_category(
            client_id=self.client_id,
            code=code,
            label=label,
            flow_type=FlowType(flow_type).value,
            restaurant_id=restaurant_id,
        )

    def get_category(self, category_id: int) -> Optional[FlowCategory]:
        """Get flow category by ID."""
        return self.db.get_flow_category(category_id)

    def list_categories(self) -> list[FlowCategory]:
        """List every active flow category of the client."""
        return self.db.list_flow_categories(self.client_id)

    def categories_for_restaurant(self, restaurant_id: int) -> list[FlowCategory]:
        """List categories of a restaurant plus the shared ones."""
        return self.db.list_flow_categories(self.client_id, restaurant_id=restaurant_id)

    def create_subcategory(self, category_id: int, code: str, label: str) -> int:
        """Create a flow subcategory.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        if self.db.get_flow_category(category_id) is None:
            raise NotFoundError(f"Flow category {category_id} not found")
        return self.db.create_flow_subcategory(
            client_id=self.client_id, category_id=category_id, code=code, label=label
        )

    def get_subcategory(self, subcategory_id: int) -> Optional[FlowSubcategory]:
        """Get flow subcategory by ID."""
        return self.db.get_flow_subcategory(subcategory_id)

    def list_subcategories(self, category_id: Optional[int] = None) -> list[FlowSubcategory]:
        """List active subcategories, optionally of one category."""
        return self.db.list_flow_subcategories(self.client_id, category_id=category_id)

    def create_service_type(
        self,
        restaurant_id: int,
        code: str,
        label: str,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        subcategory_id: Optional[int] = None,
    ) -> int:
        """Create a service (lunch, dinner...) with its time slot.

        Raises:
            NotFoundError: If the restaurant or subcategory doesn't exist
        """
        if self.db.get_restaurant(restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(restaurant_id))
        if subcategory_id is not None and self.db.get_flow_subcategory(subcategory_id) is None:
            raise NotFoundError(f"Flow subcategory {subcategory_id} not found")
        return self.db.create_service_type(
            client_id=self.client_id,
            restaurant_id=restaurant_id,
            code=code,
            label=label,
            start_time=start_time,
            end_time=end_time,
            subcategory_id=subcategory_id,
        )

    def get_service_type(self, service_type_id: int) -> Optional[ServiceType]:
        """Get service type by ID."""
        return self.db.get_service_type(service_type_id)

    def list_service_types(self, restaurant_id: Optional[int] = None) -> list[ServiceType]:
        """List active service types, optionally of one restaurant."""
        return self.db.list_service_types(self.client_id, restaurant_id=restaurant_id)

    def set_opening_days(
        self,
        restaurant_id: int,
        year: int,
        month: int,
        open_days: int,
        planned_food_cost_rate: Optional[Decimal] = None,
    ) -> int:
        """Record the planned opening days of a restaurant for a month."""
        errors = {}
        if not MIN_YEAR <= year <= MAX_YEAR:
            errors["year"] = f"Year must be between {MIN_YEAR} and {MAX_YEAR}"
        if not 1 <= month <= 12:
            errors["month"] = "Month must be between 1 and 12"
        if not 0 <= open_days <= 31:
            errors["open_days"] = "Open days must be between 0 and 31"
        if errors:
            raise ValidationError("Invalid opening days", errors)
        return self.db.set_opening_days(
            client_id=self.client_id,
            restaurant_id=restaurant_id,
            year=year,
            month=month,
            open_days=open_days,
            planned_food_cost_rate=planned_food_cost_rate,
        )

    def get_opening_days(self, restaurant_id: int, year: int, month: int) -> Optional[OpeningDays]:
        """Get the opening days parameter of a month."""
        return self.db.get_opening_days(restaurant_id, year, month)

    def list_opening_days(
        self, restaurant_id: Optional[int] = None, year: Optional[int] = None
    ) -> list[OpeningDays]:
        """List opening days parameters."""
        return self.db.list_opening_days(self.client_id, restaurant_id=restaurant_id, year=year)

    def default_subcategory(self, service_type_id: int, category_id: int) -> Optional[int]:
        """Subcategory linked to a service type when it belongs to the category."""
        service_type = self.db.get_service_type(service_type_id)
        if service_type is None or service_type.subcategory_id is None:
            return None
        subcategory = self.db.get_flow_subcategory(service_type.subcategory_id)
        if subcategory is None or subcategory.category_id != category_id:
            return None
        return subcategory.id

    # Budgets
    def budget_exists(
        self,
        restaurant_id: int,
        year: int,
        month: int,
        category_id: int,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check whether another budget covers the same restaurant, month and category."""
        budget = self.db.find_ca_budget(restaurant_id, year, month, category_id)
        return budget is not None and budget.id != exclude_id

    def validate(self, header: BudgetHeader, budget_id: Optional[int] = None) -> None:
        """Validate a budget and its detail lines.

        Raises:
            ValidationError: With one message per failing field
        """
        errors: dict[str, str] = {}
        if not header.restaurant_id:
            errors["restaurant_id"] = "Restaurant is required"
        if not header.category_id:
            errors["category_id"] = "Flow category is required"
        if not MIN_YEAR <= header.year <= MAX_YEAR:
            errors["year"] = f"Year must be between {MIN_YEAR} and {MAX_YEAR}"
        if not 1 <= header.month <= 12:
            errors["month"] = "Month must be between 1 and 12"
        _check_figures(header, errors)

        if not header.details:
            errors["details"] = "At least one detail line is required"

        seen = set()
        for index, detail in enumerate(header.details, start=1):
            prefix = f"details[{index}]."
            if not detail.service_type_id:
                errors[f"{prefix}service_type_id"] = "Service type is required"
            if not detail.subcategory_id:
                errors[f"{prefix}subcategory_id"] = "Subcategory is required"
            if detail.amount_excl_tax is not None and detail.amount_excl_tax < 0:
                errors[f"{prefix}amount_excl_tax"] = "Amount excl. tax cannot be negative"
            if detail.amount_incl_tax is not None and detail.amount_incl_tax < 0:
                errors[f"{prefix}amount_incl_tax"] = "Amount incl. tax cannot be negative"
            _check_figures(detail, errors, prefix)

            key = (detail.service_type_id, detail.subcategory_id)
            if key in seen:
                errors[f"{prefix}service_type_id"] = (
                    "This service type / subcategory combination already exists"
                )
            seen.add(key)

        if (
            "restaurant_id" not in errors
            and "category_id" not in errors
            and "year" not in errors
            and "month" not in errors
            and self.budget_exists(
                header.restaurant_id, header.year, header.month, header.category_id, budget_id
            )
        ):
            errors["category_id"] = (
                "A budget already exists for this restaurant/year/month/category combination"
            )

        if errors:
            raise ValidationError("Invalid CA budget", errors)

    def save_budget(self, header: BudgetHeader, budget_id: Optional[int] = None) -> int:
        """Create or update a budget with its detail lines.

        Header amounts are the sums of the detail amounts. When open days are
        omitted they default to the month's opening days parameter. On update
        the detail lines are replaced.

        Args:
            header: Budget header with its details
            budget_id: ID of the budget to update, None to create

        Returns:
            Budget ID

        Raises:
            ValidationError: If the budget is invalid or duplicates another one
            NotFoundError: If the restaurant or the budget doesn't exist
        """
        if budget_id is not None and self.db.get_ca_budget(budget_id) is None:
            raise NotFoundError(ca_budget_not_found(budget_id))
        self.validate(header, budget_id)
        if self.db.get_restaurant(header.restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(header.restaurant_id))

        open_days = header.open_days
        if open_days is None:
            params = self.db.get_opening_days(header.restaurant_id, header.year, header.month)
            if params is not None:
                open_days = params.open_days

        fields = {
            "restaurant_id": header.restaurant_id,
            "year": header.year,
            "month": header.month,
            "category_id": header.category_id,
            "amount_excl_tax": sum((d.amount_excl_tax or ZERO for d in header.details), ZERO),
            "amount_incl_tax": sum((d.amount_incl_tax or ZERO for d in header.details), ZERO),
            "open_days": open_days,
            "covers": header.covers,
            "average_cover_price": header.average_cover_price,
            "comment": header.comment,
        }
        details = [
            {
                "service_type_id": d.service_type_id,
                "subcategory_id": d.subcategory_id,
                "amount_excl_tax": d.amount_excl_tax or ZERO,
                "amount_incl_tax": d.amount_incl_tax or ZERO,
                "open_days": d.open_days if d.open_days is not None else open_days,
                "covers": d.covers,
                "average_cover_price": d.average_cover_price,
            }
            for d in header.details
        ]

        if budget_id is None:
            budget_id = self.db.create_ca_budget(self.client_id, fields)
        else:
            self.db.update_ca_budget(budget_id, fields)
        self.db.replace_ca_budget_details(budget_id, details)

        logger.info(
            "Saved CA budget %d for %d-%02d (%s excl. tax)",
            budget_id,
            header.year,
            header.month,
            fields["amount_excl_tax"],
        )
        return budget_id

    def get_budget(self, budget_id: int) -> Optional[CABudget]:
        """Get budget by ID."""
        return self.db.get_ca_budget(budget_id)

    def list_budgets(
        self, restaurant_id: Optional[int] = None, year: Optional[int] = None
    ) -> list[CABudget]:
        """List budgets ordered by period."""
        return self.db.list_ca_budgets(self.client_id, restaurant_id=restaurant_id, year=year)

    def get_details(self, budget_id: int) -> list[CABudgetDetail]:
        """List detail lines of a budget."""
        return self.db.list_ca_budget_details(budget_id)

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget with its details.

        Raises:
            NotFoundError: If budget not found
        """
        if self.db.get_ca_budget(budget_id) is None:
            raise NotFoundError(ca_budget_not_found(budget_id))
        self.db.delete_ca_budget(budget_id)
