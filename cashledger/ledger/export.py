"""
Export / Import

An export is a snapshot: the identity summary, an export timestamp and the
full record collection, with no aggregates. Amounts are written as raw
numbers and every timestamp keeps its MM/DD/YY and ISO forms side by side.
"""

import json
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from cashledger.errors import ValidationError
from cashledger.models.transaction import Identity, Timestamp, Transaction, ValidationIssue
from cashledger.models.views import ExportDocument


def build_export(
    transactions: list[Transaction],
    exported_at: Timestamp,
    identity: Optional[Identity] = None,
) -> ExportDocument:
    return ExportDocument(
        exported_at=exported_at,
        user=identity,
        transactions=list(transactions),
    )


def dumps(document: ExportDocument, indent: int = 2) -> str:
    """Serialize an export document to JSON text."""
    return json.dumps(document.model_dump(mode="json"), indent=indent, ensure_ascii=False)


def loads(payload: Union[str, bytes]) -> ExportDocument:
    """
    Parse an export document.

    Raises:
        ValidationError: If the payload is not a valid export
    """
    try:
        return ExportDocument.model_validate_json(payload)
    except PydanticValidationError as e:
        issues = [
            ValidationIssue(
                field=".".join(str(part) for part in error["loc"]) or "document",
                issue_type=error["type"],
                message=error["msg"],
            )
            for error in e.errors()
        ]
        raise ValidationError(f"Invalid export document ({len(issues)} issues)", issues) from e
