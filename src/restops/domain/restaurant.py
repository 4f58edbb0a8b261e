"""Restaurant domain service."""

from typing import Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, Restaurant
from restops.domain.errors import ConflictError, NotFoundError, ValidationError, duplicate_code, restaurant_not_found


class RestaurantService:
    """Service for managing restaurants (entités)."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize restaurant service.

        Args:
            db: Database instance
            client_id: Tenant the restaurants belong to
        """
        self.db = db
        self.client_id = client_id

    def create_restaurant(self, code: str, label: str) -> int:
        """Create a new restaurant.

        Args:
            code: Restaurant code, stored upper-cased
            label: Display name

        Returns:
            Restaurant ID

        Raises:
            ValidationError: If code or label is empty
            ConflictError: If the code is already used
        """
        code = (code or "").strip().upper()
        label = (label or "").strip()
        if not code or not label:
            raise ValidationError("Restaurant code and label are required")

        if self.db.get_restaurant_by_code(self.client_id, code) is not None:
            raise ConflictError(duplicate_code("Restaurant", code))

        return self.db.create_restaurant(client_id=self.client_id, code=code, label=label)

    def get_restaurant(self, restaurant_id: int) -> Optional[Restaurant]:
        """Get restaurant by ID."""
        return self.db.get_restaurant(restaurant_id)

    def get_restaurant_by_code(self, code: str) -> Optional[Restaurant]:
        """Get restaurant by code (case-insensitive)."""
        return self.db.get_restaurant_by_code(self.client_id, (code or "").strip().upper())

    def list_restaurants(self, active_only: bool = True) -> list[Restaurant]:
        """List restaurants of the client."""
        return self.db.list_restaurants(self.client_id, active_only=active_only)

    def deactivate_restaurant(self, restaurant_id: int) -> None:
        """Deactivate a restaurant.

        Raises:
            NotFoundError: If restaurant not found
        """
        if self.db.get_restaurant(restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(restaurant_id))
        self.db.update_restaurant(restaurant_id, active=False)

    def resolve(self, reference: str) -> Restaurant:
        """Find a restaurant by ID or code.

        Raises:
            NotFoundError: If no restaurant matches
        """
        restaurant = None
        if str(reference).isdigit():
            restaurant = self.db.get_restaurant(int(reference))
        if restaurant is None:
            restaurant = self.get_restaurant_by_code(str(reference))
        if restaurant is None:
            raise NotFoundError(restaurant_not_found(reference))
        return restaurant
