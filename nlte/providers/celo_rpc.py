import itertools
from typing import Any, Dict, List, Optional

import httpx
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ..core.celo import ZERO_ADDRESS
from ..core.models import CeloToken, GasEstimate
from ..core.tokens import TOKEN_DECIMALS, format_token_amount, parse_token_amount
from .base import BalanceOracle, FeeOracle, Provider, RewardOracle

BALANCE_OF_SELECTOR = "0x" + function_signature_to_4byte_selector("balanceOf(address)").hex()
TRANSFER_SELECTOR = "0x" + function_signature_to_4byte_selector("transfer(address,uint256)").hex()
PENDING_REWARDS_SELECTOR = "0x" + function_signature_to_4byte_selector("getPendingRewards(address)").hex()

# Native CELO transfers use a fixed limit.
NATIVE_TRANSFER_GAS = 21000


class RpcError(Exception):
    """The node answered with a JSON-RPC error."""

    def __init__(self, method: str, error: Any):
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    return address.lower().replace("0x", "").zfill(64)


def _hex_to_int(value: Optional[str]) -> int:
    if not value or value == "0x":
        return 0
    return int(value, 16)


class CeloRpcProvider(Provider, BalanceOracle, FeeOracle, RewardOracle):
    """Celo JSON-RPC adapter backing the balance, fee and reward oracles"""

    name = "celo_rpc"
    timeout_s = 10

    def __init__(
        self,
        rpc_url: str,
        token_addresses: Dict[str, str],
        contract_addresses: Dict[str, str],
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.token_addresses = token_addresses
        self.contract_addresses = contract_addresses
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self._client = client
        self._ids = itertools.count(1)

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}
        try:
            chain_id = _hex_to_int(await self._rpc("eth_chainId", []))
            return {"status": "healthy", "chain_id": chain_id}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        if self._client is not None:
            response = await self._client.post(self.rpc_url, json=payload, timeout=self.timeout_s)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout_s,
                )
        response.raise_for_status()
        data = response.json()
        if "error" in data:
            raise RpcError(method, data["error"])
        return data.get("result")

    async def _call(self, to: str, data: str) -> str:
        return await self._rpc("eth_call", [{"to": to, "data": data}, "latest"])

    async def get_balance(self, address: str, token: str) -> str:
        """Human-readable balance for CELO (native) or a stable token (ERC-20)"""
        owner = to_checksum_address(address)
        decimals = TOKEN_DECIMALS[CeloToken(token)]
        if token == CeloToken.CELO.value:
            balance_wei = _hex_to_int(await self._rpc("eth_getBalance", [owner, "latest"]))
        else:
            token_address = self.token_addresses[token]
            result = await self._call(token_address, BALANCE_OF_SELECTOR + _encode_address(owner))
            balance_wei = _hex_to_int(result)
        return format_token_amount(balance_wei, decimals)

    async def get_gas_price(self) -> int:
        return _hex_to_int(await self._rpc("eth_gasPrice", []))

    async def get_gas_estimate(self, from_address: str, to_address: str, amount: str, token: str) -> GasEstimate:
        gas_price = await self.get_gas_price()
        if token == CeloToken.CELO.value:
            gas_limit = NATIVE_TRANSFER_GAS
        else:
            amount_units = parse_token_amount(amount, TOKEN_DECIMALS[CeloToken(token)])
            calldata = TRANSFER_SELECTOR + _encode_address(to_address) + _encode_uint256(amount_units)
            gas_limit = _hex_to_int(
                await self._rpc(
                    "eth_estimateGas",
                    [{"from": to_checksum_address(from_address), "to": self.token_addresses[token], "data": calldata}],
                )
            )
        return GasEstimate(
            gas_limit=str(gas_limit),
            max_fee_per_gas=str(gas_price),
            max_priority_fee_per_gas=str(gas_price),
            estimated_cost=format_token_amount(gas_limit * gas_price, 18),
        )

    async def get_pending_rewards(self, address: str) -> int:
        """Sum of pending rewards on the staking and rewards contracts"""
        owner = to_checksum_address(address)
        total = 0
        for key in ("staking", "rewards"):
            contract = self.contract_addresses.get(key)
            if not contract or contract.lower() == ZERO_ADDRESS:
                continue
            result = await self._call(contract, PENDING_REWARDS_SELECTOR + _encode_address(owner))
            total += _hex_to_int(result)
        return total
