"""
Competition platform API client.

Async wrapper over the platform's REST endpoints for agent profile and
balances, competitions, prices and trade execution. Connection settings are
injected through PlatformParams; nothing here reads the environment.
"""

from typing import Any, Optional, Sequence

import httpx
import structlog

from ..config.defaults import PlatformParams
from ..errors import BoundaryValidationError, ConfigurationError, ExecutionError, PlatformAPIError
from ..models.trading import Opportunity, TradeAction
from ..validation.boundary import validate_trade_receipt
from .base import TradeExecutor, TradeReceipt

logger = structlog.get_logger(__name__)


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Pull the 'message' field out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


def _paging(limit: Optional[int], offset: Optional[int]) -> dict[str, int]:
    params = {}
    if limit is not None:
        params["limit"] = limit
    if offset is not None:
        params["offset"] = offset
    return params


class RecallPlatformClient:
    """Async client for the trading-competition platform."""

    def __init__(
        self,
        config: PlatformParams,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        if not config.api_url or not config.api_key:
            raise ConfigurationError(
                "RECALL_API_URL and RECALL_API_KEY are required for the platform client"
            )

        self.config = config
        self.logger = logger
        self._client = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "User-Agent": "tradeflow/0.1",
            },
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "RecallPlatformClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Any = None,
        json: Optional[dict[str, Any]] = None
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response) or f"HTTP {e.response.status_code}"
            self.logger.warning(
                "Platform request rejected",
                method=method,
                endpoint=path,
                status_code=e.response.status_code,
                error=detail
            )
            raise PlatformAPIError(
                f"API request failed: {detail}",
                status_code=e.response.status_code,
                endpoint=path
            ) from e
        except httpx.HTTPError as e:
            self.logger.warning(
                "Platform request error",
                method=method,
                endpoint=path,
                error=str(e)
            )
            raise PlatformAPIError(f"API request failed: {e}", endpoint=path) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise PlatformAPIError(
                "API request failed: response is not valid JSON",
                status_code=response.status_code,
                endpoint=path
            ) from e

    # Agent

    async def get_profile(self) -> Any:
        return await self._request("GET", "/api/agent/profile")

    async def update_profile(self, profile: dict[str, Any]) -> Any:
        if not profile:
            raise ValueError("Profile data is required for update operation")
        return await self._request("PUT", "/api/agent/profile", json=profile)

    async def get_balances(self) -> Any:
        return await self._request("GET", "/api/agent/balances")

    async def get_portfolio(self) -> Any:
        return await self._request("GET", "/api/agent/portfolio")

    async def get_trades(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Any:
        return await self._request("GET", "/api/agent/trades", params=_paging(limit, offset))

    async def reset_api_key(self) -> Any:
        return await self._request("POST", "/api/agent/reset-api-key", json={})

    # Competitions

    async def get_competitions(self) -> Any:
        return await self._request("GET", "/api/competitions")

    async def get_leaderboard(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Any:
        return await self._request(
            "GET", "/api/competitions/leaderboard", params=_paging(limit, offset)
        )

    async def get_competition_status(self) -> Any:
        return await self._request("GET", "/api/competitions/status")

    async def get_competition_rules(self) -> Any:
        return await self._request("GET", "/api/competitions/rules")

    async def get_upcoming_competitions(self) -> Any:
        return await self._request("GET", "/api/competitions/upcoming")

    async def get_competition(self, competition_id: str) -> Any:
        if not competition_id:
            raise ValueError("Competition ID is required for get-competition operation")
        return await self._request("GET", f"/api/competitions/{competition_id}")

    async def get_competition_agents(self, competition_id: str) -> Any:
        if not competition_id:
            raise ValueError("Competition ID is required for get-competition-agents operation")
        return await self._request("GET", f"/api/competitions/{competition_id}/agents")

    async def join_competition(self, competition_id: str, agent_id: str) -> Any:
        if not competition_id or not agent_id:
            raise ValueError("Competition ID and Agent ID are required for join-competition operation")
        return await self._request(
            "POST", f"/api/competitions/{competition_id}/agents/{agent_id}", json={}
        )

    async def leave_competition(self, competition_id: str, agent_id: str) -> Any:
        if not competition_id or not agent_id:
            raise ValueError("Competition ID and Agent ID are required for leave-competition operation")
        return await self._request(
            "DELETE", f"/api/competitions/{competition_id}/agents/{agent_id}"
        )

    # Prices

    async def get_price(
        self,
        token: Optional[str] = None,
        tokens: Optional[Sequence[str]] = None
    ) -> Any:
        params: list[tuple[str, str]] = []
        if token:
            params.append(("token", token))
        for t in tokens or ():
            params.append(("tokens", t))
        return await self._request("GET", "/api/price", params=params)

    async def get_token_info(self, token: str) -> Any:
        if not token:
            raise ValueError("Token address or symbol is required for get-token-info operation")
        return await self._request("GET", "/api/price/token-info", params={"token": token})

    # Trading

    async def execute_trade(self, from_token: str, to_token: str, amount: str, reason: str) -> Any:
        return await self._request(
            "POST",
            "/api/trade/execute",
            json={
                "fromToken": from_token,
                "toToken": to_token,
                "amount": amount,
                "reason": reason,
            },
        )


class PlatformTradeExecutor(TradeExecutor):
    """
    TradeExecutor backed by the platform's trade endpoint.

    Pairs are written FUNDING/ASSET ("USDC/WETH"): a buy spends the funding
    token for the asset, a sell does the reverse.
    """

    def __init__(self, client: RecallPlatformClient) -> None:
        self.client = client
        self.token_addresses = dict(client.config.token_addresses)

    def _resolve(self, symbol: str) -> str:
        return self.token_addresses.get(symbol, symbol)

    def route(self, opportunity: Opportunity) -> tuple[str, str]:
        """Return (from_token, to_token) for an opportunity."""
        parts = [p.strip() for p in opportunity.pair.split("/")]
        if len(parts) != 2 or not all(parts):
            raise ExecutionError(
                f"Cannot route pair '{opportunity.pair}', expected FUNDING/ASSET",
                pair=opportunity.pair
            )
        funding, asset = parts
        if opportunity.action is TradeAction.BUY:
            return self._resolve(funding), self._resolve(asset)
        if opportunity.action is TradeAction.SELL:
            return self._resolve(asset), self._resolve(funding)
        raise ExecutionError(
            f"'{opportunity.action.value}' opportunities are not executable",
            pair=opportunity.pair
        )

    async def execute(self, opportunity: Opportunity, amount: str) -> TradeReceipt:
        from_token, to_token = self.route(opportunity)

        try:
            response = await self.client.execute_trade(
                from_token, to_token, amount, opportunity.reason
            )
        except PlatformAPIError as e:
            raise ExecutionError(str(e), pair=opportunity.pair) from e

        if not isinstance(response, dict) or not isinstance(response.get("success"), bool):
            raise ExecutionError(
                "Trade response is missing a boolean 'success' field",
                pair=opportunity.pair
            )
        if not response["success"]:
            raise ExecutionError(
                f"Platform rejected trade: {response.get('error') or 'unknown error'}",
                pair=opportunity.pair
            )

        transaction = response.get("transaction") or {}
        try:
            return validate_trade_receipt({
                "amount": str(transaction.get("fromAmount", amount)),
                "status": "executed",
            })
        except BoundaryValidationError as e:
            raise ExecutionError(str(e), pair=opportunity.pair) from e
