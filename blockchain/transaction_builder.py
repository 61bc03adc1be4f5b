"""
Transaction Builder
Constructs transaction request dicts for the transaction manager
"""

from typing import Any, Dict, List, Optional, Sequence
from web3 import Web3
from eth_abi import encode
from loguru import logger


class TransactionBuilder:
    """
    Builds unsigned transaction dicts for the submitting wallet.
    Gas, gasPrice and (unless given) nonce are left for the submitter to fill.
    """

    def __init__(self, wallet_manager, chain_id: Optional[int] = None):
        """
        Initialize Transaction Builder

        Args:
            wallet_manager: Wallet manager for the sender address
            chain_id: Chain ID to stamp on transactions (None = node default)
        """
        self.wallet_manager = wallet_manager
        self.chain_id = chain_id

    def _base_tx(self, to: str, value: int, data: bytes, nonce: Optional[int]) -> Dict:
        if not Web3.is_address(to):
            raise ValueError(f"Invalid destination address: {to}")
        if value < 0:
            raise ValueError(f"Value cannot be negative: {value}")

        tx = {
            'from': self.wallet_manager.get_address(),
            'to': Web3.to_checksum_address(to),
            'value': value,
            'data': Web3.to_hex(data) if data else '0x'
        }

        if nonce is not None:
            tx['nonce'] = nonce
        if self.chain_id is not None:
            tx['chainId'] = self.chain_id

        return tx

    def build_transfer(
        self,
        to: str,
        value: int,
        data: Optional[bytes] = None,
        nonce: Optional[int] = None
    ) -> Dict:
        """
        Build a native value transfer

        Args:
            to: Recipient address
            value: Amount in wei
            data: Optional payload
            nonce: Optional preset nonce

        Returns:
            Transaction dict
        """
        return self._base_tx(to, value, data or b'', nonce)

    def build_contract_call(
        self,
        to: str,
        function_signature: str,
        arg_types: Sequence[str],
        args: List[Any],
        value: int = 0,
        nonce: Optional[int] = None
    ) -> Dict:
        """
        Build a contract call with ABI-encoded arguments

        Args:
            to: Contract address
            function_signature: e.g. "transfer(address,uint256)"
            arg_types: ABI types matching args
            args: Call arguments
            value: Wei to attach
            nonce: Optional preset nonce

        Returns:
            Transaction dict
        """
        if len(arg_types) != len(args):
            raise ValueError(
                f"{function_signature}: {len(arg_types)} types for {len(args)} arguments"
            )

        selector = Web3.keccak(text=function_signature)[:4]
        params = encode(list(arg_types), list(args))

        logger.debug(f"Encoded call {function_signature} to {to}")

        return self._base_tx(to, value, bytes(selector) + params, nonce)
