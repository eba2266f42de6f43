"""
Structural validation for data crossing the collaborator boundary.

Responses from the analysis agent and the competition platform originate
outside the typed core. They are checked here (required fields, primitive
types, enum membership and ranges) before being turned into model objects.
"""

import math
from typing import Any

import structlog

from ..collaborators.base import TradeReceipt
from ..errors import BoundaryValidationError
from ..models.trading import Opportunity, TradeAction

logger = structlog.get_logger(__name__)


OPPORTUNITY_SCHEMA = {
    "type": "object",
    "required": ["pair", "action", "confidence", "reason", "price"],
    "properties": {
        "pair": {"type": "string", "minLength": 1},
        "action": {"type": "string", "enum": [a.value for a in TradeAction]},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        "reason": {"type": "string"},
        "price": {"type": "number", "exclusiveMinimum": 0},
    },
}

TRADE_RECEIPT_SCHEMA = {
    "type": "object",
    "required": ["amount", "status"],
    "properties": {
        "amount": {"type": "string", "minLength": 1},
        "status": {"type": "string", "minLength": 1},
    },
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_fields(data: Any, schema: dict[str, Any], what: str) -> None:
    if not isinstance(data, dict):
        raise BoundaryValidationError(
            f"{what} must be an object, got {type(data).__name__}",
            value=data
        )
    missing = [name for name in schema["required"] if name not in data]
    if missing:
        raise BoundaryValidationError(
            f"{what} is missing required fields: {missing}",
            field=missing[0],
            value=data
        )


def _require_string(data: dict[str, Any], name: str, what: str, non_empty: bool = False) -> str:
    value = data[name]
    if not isinstance(value, str) or (non_empty and not value.strip()):
        qualifier = "a non-empty string" if non_empty else "a string"
        raise BoundaryValidationError(f"{what}.{name} must be {qualifier}", field=name, value=value)
    return value


def validate_opportunity(data: Any) -> Opportunity:
    """
    Validate one opportunity record and build the model.

    Args:
        data: Decoded JSON object from the analysis collaborator

    Returns:
        Validated Opportunity

    Raises:
        BoundaryValidationError: If the record is malformed
    """
    _require_fields(data, OPPORTUNITY_SCHEMA, "opportunity")

    pair = _require_string(data, "pair", "opportunity", non_empty=True)
    reason = _require_string(data, "reason", "opportunity")

    action = data["action"]
    if not isinstance(action, str) or action.lower() not in OPPORTUNITY_SCHEMA["properties"]["action"]["enum"]:
        raise BoundaryValidationError(
            f"opportunity.action must be one of {OPPORTUNITY_SCHEMA['properties']['action']['enum']}",
            field="action",
            value=action
        )

    confidence = data["confidence"]
    if not _is_number(confidence) or not (0 <= confidence <= 1):
        raise BoundaryValidationError(
            f"opportunity.confidence must be a number between 0 and 1, got: {confidence!r}",
            field="confidence",
            value=confidence
        )

    price = data["price"]
    if not _is_number(price) or not math.isfinite(price) or price <= 0:
        raise BoundaryValidationError(
            f"opportunity.price must be a positive finite number, got: {price!r}",
            field="price",
            value=price
        )

    return Opportunity(
        pair=pair,
        action=TradeAction(action.lower()),
        confidence=float(confidence),
        reason=reason,
        price=float(price),
    )


def validate_opportunities(data: Any) -> list[Opportunity]:
    """Validate a list of opportunity records, failing on the first bad entry."""
    if not isinstance(data, list):
        raise BoundaryValidationError(
            f"opportunities must be a list, got {type(data).__name__}",
            field="opportunities",
            value=data
        )

    opportunities = []
    for index, item in enumerate(data):
        try:
            opportunities.append(validate_opportunity(item))
        except BoundaryValidationError as e:
            logger.warning("Rejected opportunity record", index=index, error=str(e))
            raise BoundaryValidationError(
                f"opportunities[{index}]: {e}",
                field=e.field,
                value=e.value
            ) from e
    return opportunities


def validate_trade_receipt(data: Any) -> TradeReceipt:
    """
    Validate a trade execution response and build the receipt.

    Raises:
        BoundaryValidationError: If the response is malformed
    """
    _require_fields(data, TRADE_RECEIPT_SCHEMA, "trade receipt")
    amount = _require_string(data, "amount", "trade receipt", non_empty=True)
    status = _require_string(data, "status", "trade receipt", non_empty=True)
    return TradeReceipt(amount=amount, status=status)
