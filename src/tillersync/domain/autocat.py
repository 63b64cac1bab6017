"""AutoCat rule domain service."""

from typing import Optional

from tillersync.database.base import Database
from tillersync.domain.entities import AutoCat, AutoCatUpdates
from tillersync.domain.errors import ValidationError


class AutoCatService:
    """Service for managing AutoCat rules between syncs."""

    def __init__(self, db: Database):
        self.db = db

    def insert_autocat(self, rule: AutoCat) -> int:
        """Create an AutoCat rule.

        Args:
            rule: Rule to insert; its id is ignored

        Returns:
            The new rule's ID

        Raises:
            ValidationError: If the rule has neither a category nor a filter
            ReferentialIntegrityError: If the category does not exist
        """
        if (
            rule.amount_min is not None
            and rule.amount_max is not None
            and rule.amount_min.value > rule.amount_max.value
        ):
            raise ValidationError(
                f"Amount Min ({rule.amount_min}) is greater than Amount Max ({rule.amount_max})"
            )
        if not any(
            rule.get_with_header(header) for header in AutoCat.HEADERS
        ):
            raise ValidationError("An AutoCat rule needs a category or at least one filter")
        return self.db.insert_autocat(rule)

    def get_autocat(self, autocat_id: int) -> Optional[AutoCat]:
        return self.db.get_autocat(autocat_id)

    def list_autocats(self) -> list[AutoCat]:
        return self.db.list_autocats()

    def update_autocats(
        self, autocat_ids: list[int], updates: AutoCatUpdates
    ) -> list[AutoCat]:
        """Apply the same updates to several rules; all or none are updated."""
        if not autocat_ids:
            raise ValidationError("At least one AutoCat rule ID is required")
        if updates.is_empty():
            raise ValidationError("No fields to update")
        return self.db.update_autocats(autocat_ids, updates)

    def delete_autocats(self, autocat_ids: list[int]) -> int:
        """Delete several rules; all or none are deleted."""
        if not autocat_ids:
            raise ValidationError("At least one AutoCat rule ID is required")
        return self.db.delete_autocats(autocat_ids)
