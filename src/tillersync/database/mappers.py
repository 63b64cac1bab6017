"""Mapper functions to convert between domain records and SQLAlchemy models.

Empty category references are stored as NULL so the foreign key only checks
real references. Amounts are stored as their display text.
"""

from typing import Optional

from tillersync.domain import entities as domain
from tillersync.domain.amount import Amount
from tillersync.database.models import (
    AutoCat as ORMAutoCat,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)

_TRANSACTION_TEXT_FIELDS = (
    "date",
    "description",
    "account",
    "account_number",
    "institution",
    "month",
    "week",
    "full_description",
    "account_id",
    "check_number",
    "date_added",
    "merchant_name",
    "category_hint",
    "note",
    "tags",
    "categorized_date",
    "statement",
    "no_name",
)

_AUTOCAT_TEXT_FIELDS = (
    "description",
    "description_contains",
    "account_contains",
    "institution_contains",
    "description_equals",
    "description_full",
    "full_description_contains",
    "amount_contains",
)

_AUTOCAT_AMOUNT_FIELDS = ("amount_min", "amount_max", "amount_equals")


def _category_ref(name: str) -> Optional[str]:
    return name or None


def _optional_amount(text: Optional[str]) -> Optional[Amount]:
    if text is None:
        return None
    return Amount.parse(text)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction record."""
    txn = domain.Transaction(
        transaction_id=orm_transaction.transaction_id,
        amount=Amount.parse(orm_transaction.amount or ""),
        category=orm_transaction.category or "",
        metadata=orm_transaction.metadata_ or "",
        other_fields=dict(orm_transaction.other_fields or {}),
        original_order=orm_transaction.original_order,
    )
    for name in _TRANSACTION_TEXT_FIELDS:
        setattr(txn, name, getattr(orm_transaction, name) or "")
    return txn


def update_orm_transaction(
    orm_transaction: ORMTransaction, txn: domain.Transaction
) -> ORMTransaction:
    """Copy every field of a domain Transaction onto a SQLAlchemy model."""
    orm_transaction.transaction_id = txn.transaction_id
    orm_transaction.amount = txn.amount.to_text()
    orm_transaction.category = _category_ref(txn.category)
    orm_transaction.metadata_ = txn.metadata
    orm_transaction.other_fields = dict(txn.other_fields)
    orm_transaction.original_order = txn.original_order
    for name in _TRANSACTION_TEXT_FIELDS:
        setattr(orm_transaction, name, getattr(txn, name))
    return orm_transaction


def transaction_to_orm(txn: domain.Transaction) -> ORMTransaction:
    """Convert domain Transaction record to a new SQLAlchemy model."""
    return update_orm_transaction(ORMTransaction(), txn)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category record."""
    return domain.Category(
        category=orm_category.category,
        group=orm_category.group or "",
        type=orm_category.type or "",
        hide_from_reports=orm_category.hide_from_reports or "",
        other_fields=dict(orm_category.other_fields or {}),
        original_order=orm_category.original_order,
    )


def update_orm_category(
    orm_category: ORMCategory, category: domain.Category
) -> ORMCategory:
    """Copy every field of a domain Category onto a SQLAlchemy model."""
    orm_category.category = category.category
    orm_category.group = category.group
    orm_category.type = category.type
    orm_category.hide_from_reports = category.hide_from_reports
    orm_category.other_fields = dict(category.other_fields)
    orm_category.original_order = category.original_order
    return orm_category


def category_to_orm(category: domain.Category) -> ORMCategory:
    """Convert domain Category record to a new SQLAlchemy model."""
    return update_orm_category(ORMCategory(), category)


def autocat_to_domain(orm_autocat: ORMAutoCat) -> domain.AutoCat:
    """Convert SQLAlchemy AutoCat model to domain AutoCat record."""
    rule = domain.AutoCat(
        id=orm_autocat.id,
        category=orm_autocat.category or "",
        other_fields=dict(orm_autocat.other_fields or {}),
        original_order=orm_autocat.original_order,
    )
    for name in _AUTOCAT_TEXT_FIELDS:
        setattr(rule, name, getattr(orm_autocat, name) or "")
    for name in _AUTOCAT_AMOUNT_FIELDS:
        setattr(rule, name, _optional_amount(getattr(orm_autocat, name)))
    return rule


def update_orm_autocat(orm_autocat: ORMAutoCat, rule: domain.AutoCat) -> ORMAutoCat:
    """Copy every sheet field of a domain AutoCat onto a SQLAlchemy model."""
    orm_autocat.category = _category_ref(rule.category)
    orm_autocat.other_fields = dict(rule.other_fields)
    orm_autocat.original_order = rule.original_order
    for name in _AUTOCAT_TEXT_FIELDS:
        setattr(orm_autocat, name, getattr(rule, name))
    for name in _AUTOCAT_AMOUNT_FIELDS:
        amount = getattr(rule, name)
        setattr(orm_autocat, name, None if amount is None else str(amount))
    return orm_autocat


def autocat_to_orm(rule: domain.AutoCat) -> ORMAutoCat:
    """Convert domain AutoCat record to a new SQLAlchemy model."""
    return update_orm_autocat(ORMAutoCat(), rule)
