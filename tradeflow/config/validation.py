"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import ExecutionParams, FilterParams, PlatformParams

VALID_ACTIONS = ("buy", "sell", "hold")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _unknown_keys(section: str, params: dict[str, Any], known: type) -> list[ValidationError]:
    allowed = {f.name for f in fields(known)}
    return [
        ValidationError(
            field=f"{section}.{key}",
            message="Unknown configuration key",
            value=params[key]
        )
        for key in params
        if key not in allowed
    ]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_amount(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return float(value) > 0
    except ValueError:
        return False


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_filter_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate opportunity filter parameters."""
        errors = _unknown_keys("filter", params, FilterParams)

        if "min_confidence" in params:
            value = params["min_confidence"]
            if not _is_number(value) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="filter.min_confidence",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        if "excluded_actions" in params:
            value = params["excluded_actions"]
            if (not isinstance(value, (list, tuple))
                    or any(action not in VALID_ACTIONS for action in value)):
                errors.append(ValidationError(
                    field="filter.excluded_actions",
                    message=f"Must be a list drawn from {list(VALID_ACTIONS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_execution_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate trade execution parameters."""
        errors = _unknown_keys("execution", params, ExecutionParams)

        if "default_amount" in params:
            value = params["default_amount"]
            if not _is_amount(value):
                errors.append(ValidationError(
                    field="execution.default_amount",
                    message="Must be a positive decimal string",
                    value=value
                ))

        if "amount_overrides" in params:
            value = params["amount_overrides"]
            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field="execution.amount_overrides",
                    message="Must be a mapping of pair to amount",
                    value=value
                ))
            else:
                for pair, amount in value.items():
                    if not _is_amount(amount):
                        errors.append(ValidationError(
                            field=f"execution.amount_overrides.{pair}",
                            message="Must be a positive decimal string",
                            value=amount
                        ))

        for key in ("max_concurrency", "max_trades_per_cycle"):
            if key in params:
                value = params[key]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=f"execution.{key}",
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_platform_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate platform connection parameters."""
        errors = _unknown_keys("platform", params, PlatformParams)

        for key in ("api_url", "api_key"):
            if key in params and not isinstance(params[key], str):
                errors.append(ValidationError(
                    field=f"platform.{key}",
                    message="Must be a string",
                    value=params[key]
                ))

        api_url = params.get("api_url")
        if isinstance(api_url, str) and api_url and not api_url.startswith(("http://", "https://")):
            errors.append(ValidationError(
                field="platform.api_url",
                message="Must be an http(s) URL",
                value=api_url
            ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="platform.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "token_addresses" in params and not isinstance(params["token_addresses"], dict):
            errors.append(ValidationError(
                field="platform.token_addresses",
                message="Must be a mapping of symbol to address",
                value=params["token_addresses"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []
        validators = {
            "filter": ConfigValidator.validate_filter_params,
            "execution": ConfigValidator.validate_execution_params,
            "platform": ConfigValidator.validate_platform_params,
        }

        for section, params in config.items():
            if section not in validators:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=params
                ))
            elif not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Section must be a mapping",
                    value=params
                ))
            else:
                errors.extend(validators[section](params))

        return errors
