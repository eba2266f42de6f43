"""Tests for collaborator boundary validation."""

import json
import pytest

from tradeflow.errors import BoundaryValidationError
from tradeflow.models.trading import TradeAction
from tradeflow.validation.boundary import (
    validate_opportunities,
    validate_opportunity,
    validate_trade_receipt,
)


def record(**overrides):
    data = {
        "pair": "USDC/WETH",
        "action": "buy",
        "confidence": 0.75,
        "reason": "Strong bullish trend detected",
        "price": 2500.5,
    }
    data.update(overrides)
    return data


class TestValidateOpportunity:
    """Test suite for opportunity validation."""

    def test_valid_record(self) -> None:
        """Test that a valid record becomes an opportunity."""
        opportunity = validate_opportunity(record())
        assert opportunity.pair == "USDC/WETH"
        assert opportunity.action is TradeAction.BUY
        assert opportunity.confidence == 0.75

    def test_action_is_case_insensitive(self) -> None:
        """Test that actions are matched case-insensitively."""
        assert validate_opportunity(record(action="SELL")).action is TradeAction.SELL

    def test_integer_values_are_accepted(self) -> None:
        """Test that integer confidence and price are accepted."""
        opportunity = validate_opportunity(record(confidence=1, price=45000))
        assert opportunity.confidence == 1.0
        assert isinstance(opportunity.price, float)

    def test_missing_fields(self) -> None:
        """Test that missing fields are named."""
        data = record()
        del data["price"]
        with pytest.raises(BoundaryValidationError) as exc_info:
            validate_opportunity(data)
        assert exc_info.value.field == "price"

    @pytest.mark.parametrize("field, value", [
        ("pair", ""),
        ("pair", 42),
        ("action", "short"),
        ("action", None),
        ("confidence", 1.5),
        ("confidence", -0.1),
        ("confidence", "0.9"),
        ("confidence", True),
        ("price", 0),
        ("price", -1.0),
        ("reason", None),
    ])
    def test_invalid_values(self, field, value) -> None:
        """Test that invalid field values are named."""
        with pytest.raises(BoundaryValidationError) as exc_info:
            validate_opportunity(record(**{field: value}))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_price_rejected(self, literal) -> None:
        """Test that JSON non-finite literals never become a price."""
        data = json.loads(
            '{"pair": "USDC/WETH", "action": "buy", "confidence": 0.8, '
            '"reason": "breakout", "price": ' + literal + '}'
        )

        with pytest.raises(BoundaryValidationError) as exc_info:
            validate_opportunity(data)
        assert exc_info.value.field == "price"

    def test_not_an_object(self) -> None:
        """Test that records must be objects."""
        with pytest.raises(BoundaryValidationError):
            validate_opportunity(["USDC/WETH"])


class TestValidateOpportunities:
    """Test suite for list validation."""

    def test_valid_list(self) -> None:
        """Test that a list of records is validated in order."""
        opportunities = validate_opportunities([record(), record(pair="USDC/WBTC", action="hold")])
        assert [o.pair for o in opportunities] == ["USDC/WETH", "USDC/WBTC"]

    def test_reports_failing_index(self) -> None:
        """Test that the failing record index is reported."""
        with pytest.raises(BoundaryValidationError) as exc_info:
            validate_opportunities([record(), record(price=-5)])
        assert "opportunities[1]" in str(exc_info.value)

    def test_not_a_list(self) -> None:
        """Test that the opportunities must be a list."""
        with pytest.raises(BoundaryValidationError):
            validate_opportunities(record())


class TestValidateTradeReceipt:
    """Test suite for trade receipt validation."""

    def test_valid_receipt(self) -> None:
        """Test that a valid receipt is accepted."""
        receipt = validate_trade_receipt({"amount": "100", "status": "executed"})
        assert receipt.amount == "100"
        assert receipt.succeeded

    @pytest.mark.parametrize("data", [
        {"amount": "100"},
        {"amount": 100, "status": "executed"},
        {"amount": "", "status": "executed"},
        {"amount": "100", "status": ""},
        "executed",
    ])
    def test_invalid_receipts(self, data) -> None:
        """Test that malformed receipts are rejected."""
        with pytest.raises(BoundaryValidationError):
            validate_trade_receipt(data)
