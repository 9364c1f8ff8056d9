"""
Transaction Input Validation

Add and edit both pass user input through TransactionValidator before any
record is built. Validation never fixes input silently: it either returns
the normalized values or raises ValidationError listing every issue found.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from cashledger.config import LedgerSettings, get_settings
from cashledger.errors import ValidationError
from cashledger.ledger.formatting import CENT
from cashledger.models.transaction import MAX_AMOUNT, Category, ValidationIssue


AmountInput = Union[Decimal, int, float, str, None]


class TransactionValidator:
    """
    Validates category, amount and note of an add or edit request.

    Checks:
    - Category is present and is inflow or outflow
    - Amount parses as a finite decimal, is > 0, has at most two decimals
    - Note is non-empty after stripping and within the configured length
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _check_category(self, category: Any) -> tuple[Optional[Category], list[ValidationIssue]]:
        if category is None or category == "":
            return None, [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                suggested_fix="Choose inflow or outflow",
            )]
        try:
            return Category(category), []
        except ValueError:
            return None, [ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Unknown category: {category}",
                suggested_fix="Choose inflow or outflow",
            )]

    def _check_amount(self, amount: AmountInput) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            )]
        try:
            value = Decimal(str(amount).strip().replace(",", ""))
        except InvalidOperation:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount is not a number: {amount}",
                suggested_fix="Enter digits only, e.g. 150.75",
            )]

        if not value.is_finite():
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a finite number",
            )]
        if value <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                suggested_fix="Record money spent as an outflow instead of a negative amount",
            )]
        if value > MAX_AMOUNT:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must not exceed {MAX_AMOUNT:,}",
            )]
        if value.as_tuple().exponent < -2:
            # "500.000" is fine, "500.005" is not
            if value != value.quantize(CENT):
                return None, [ValidationIssue(
                    field="amount",
                    issue_type="too_precise",
                    message="Amount has more than two decimal places",
                )]
            value = value.quantize(CENT)
        return value, []

    def _check_note(self, note: Optional[str]) -> tuple[Optional[str], list[ValidationIssue]]:
        text = (note or "").strip()
        if not text:
            return None, [ValidationIssue(
                field="note",
                issue_type="missing",
                message="A note/description is required",
            )]
        if len(text) > self._settings.max_note_length:
            return None, [ValidationIssue(
                field="note",
                issue_type="too_long",
                message=f"Note is longer than {self._settings.max_note_length} characters",
            )]
        return text, []

    def validate(
        self,
        category: Any,
        amount: AmountInput,
        note: Optional[str],
    ) -> tuple[Category, Decimal, str]:
        """
        Validate and normalize one add/edit request.

        Returns:
            (category, amount, stripped_note)

        Raises:
            ValidationError: Listing every issue found
        """
        parsed_category, issues = self._check_category(category)
        parsed_amount, amount_issues = self._check_amount(amount)
        parsed_note, note_issues = self._check_note(note)
        issues = issues + amount_issues + note_issues

        if issues:
            raise ValidationError(self.get_user_friendly_summary(issues), issues)

        return parsed_category, parsed_amount, parsed_note

    def get_user_friendly_summary(self, issues: list[ValidationIssue]) -> str:
        """One line per issue, suitable for an alert."""
        if not issues:
            return "Everything looks good"
        return "; ".join(issue.message for issue in issues)
