"""Category domain service."""

from typing import Optional

from tillersync.database.base import Database
from tillersync.domain.entities import Category, CategoryUpdates
from tillersync.domain.errors import ValidationError


class CategoryService:
    """Service for managing categories between syncs."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def insert_category(
        self,
        name: str,
        group: str = "",
        type: str = "",
        hide_from_reports: str = "",
        other_fields: Optional[dict[str, str]] = None,
    ) -> str:
        """Create a category.

        Args:
            name: Category name
            group: Category group
            type: Category type (e.g. 'Expense', 'Income', 'Transfer')
            hide_from_reports: 'Hide' to hide the category from reports
            other_fields: Values for columns without a known field, by header

        Returns:
            The category name

        Raises:
            ValidationError: If name is empty
            ConflictError: If the category already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        category = Category(
            category=name,
            group=group,
            type=type,
            hide_from_reports=hide_from_reports,
            other_fields=dict(other_fields or {}),
        )
        return self.db.insert_category(category)

    def get_category(self, name: str) -> Optional[Category]:
        return self.db.get_category(name)

    def list_categories(self) -> list[Category]:
        return self.db.list_categories()

    def update_categories(
        self, names: list[str], updates: CategoryUpdates
    ) -> list[Category]:
        """Update several categories at once.

        Setting ``updates.category`` renames; transactions and AutoCat rules
        that used the old name follow the rename.

        Raises:
            ValidationError: If no names or no updates are given, or a rename
                targets several categories or an empty name
            NotFoundError: If any category does not exist
            ConflictError: If the new name is already taken
        """
        if not names:
            raise ValidationError("At least one category name is required")
        if updates.is_empty():
            raise ValidationError("No fields to update")
        if updates.category is not None:
            if not updates.category.strip():
                raise ValidationError("Category name cannot be empty")
            if len(set(names)) > 1:
                raise ValidationError("Only one category can be renamed at a time")
        return self.db.update_categories(names, updates)

    def delete_categories(self, names: list[str]) -> int:
        """Delete several categories at once.

        Returns:
            Number of deleted categories

        Raises:
            ValidationError: If no names are given
            NotFoundError: If any category does not exist
            ReferentialIntegrityError: If a category is still in use
        """
        if not names:
            raise ValidationError("At least one category name is required")
        return self.db.delete_categories(names)
