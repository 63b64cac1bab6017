"""Shared domain error messages and error types."""

from typing import Any


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class SyncConflictError(ConflictError):
    """Remote sheet changed since the last download, or no baseline exists."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ReferentialIntegrityError(DependencyError):
    """A record references a category that does not exist."""

    def __init__(self, message: str, key: Any = None):
        super().__init__(message)
        self.key = key


class SyncError(DomainError):
    """A sync operation could not run or did not complete."""


class FormulaSafetyError(SyncError):
    """Writing back would lose or misplace formulas."""


class VerificationError(SyncError):
    """The remote sheet does not hold what was just written."""


class ConfigError(DomainError):
    """Missing or invalid configuration."""


class QueryError(DomainError):
    """A read-only query was rejected or failed."""


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction not found: {transaction_id}"


def category_not_found(name: str) -> str:
    """Return message for missing category."""
    return f"Category not found: {name}"


def autocat_not_found(autocat_id: int) -> str:
    """Return message for missing AutoCat rule."""
    return f"AutoCat rule not found: {autocat_id}"


def category_reference_missing(record: str, name: str) -> str:
    """Return message when a record references an unknown category."""
    return (
        f"Cannot save {record}: category '{name}' does not exist. "
        "Create the category first or leave the category field empty."
    )


def duplicate_category(name: str) -> str:
    """Return message for duplicate category name."""
    return f"Cannot insert category: '{name}' already exists."


def category_delete_blocked(
    name: str, transaction_count: int, autocat_count: int
) -> str:
    """Return message when a category still has referencing rows."""
    parts = []
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"
        )
    if autocat_count > 0:
        parts.append(
            f"{autocat_count} AutoCat rule{'s' if autocat_count != 1 else ''}"
        )
    return (
        f"Cannot delete category '{name}': it is referenced by {', '.join(parts)}. "
        "Please recategorize or delete them first."
    )
