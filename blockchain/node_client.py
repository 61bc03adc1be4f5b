"""
Node Client
Async JSON-RPC access to the network: nonce, gas, broadcast and confirmations
"""

import asyncio
from typing import Dict, Optional, Tuple
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import TransactionNotFound, Web3RPCError
from loguru import logger

from utils.gas_calculator import GasCalculator
from .errors import (
    AlreadyKnownError,
    ConfirmationError,
    ConfirmationTimeoutError,
    EstimationError,
    NonceQueryError,
    SubmissionError,
    TransactionDroppedError,
)


# Messages geth, erigon, nethermind and besu use for duplicate submissions
ALREADY_KNOWN_MARKERS = (
    'already known',
    'known transaction',
    'already imported',
    'transaction already exists',
)

DYNAMIC_FEE_FIELDS = ('maxFeePerGas', 'maxPriorityFeePerGas')


def extract_rpc_error(error: Exception) -> Tuple[str, Optional[int]]:
    """
    Pull (message, code) out of a node error

    web3 raises Web3RPCError carrying the JSON-RPC response; some
    providers still raise ValueError with the error object as its argument.
    """
    payload = None

    if isinstance(error, Web3RPCError) and isinstance(error.rpc_response, dict):
        payload = error.rpc_response.get('error')
    elif error.args and isinstance(error.args[0], dict):
        payload = error.args[0]

    if isinstance(payload, dict):
        return str(payload.get('message', error)), payload.get('code')

    return str(error), None


def classify_send_error(error: Exception) -> SubmissionError:
    """Map a broadcast failure onto the submission error taxonomy"""
    message, code = extract_rpc_error(error)
    lowered = message.lower()

    if any(marker in lowered for marker in ALREADY_KNOWN_MARKERS):
        return AlreadyKnownError(message, code=code)

    return SubmissionError(message, code=code)


class PendingTransaction:
    """
    Handle for a broadcast transaction awaiting confirmations
    """

    def __init__(self, client: 'NodeClient', tx_hash: str, nonce: Optional[int] = None):
        self._client = client
        self.tx_hash = tx_hash
        self.nonce = nonce

    def __repr__(self) -> str:
        return f"PendingTransaction({self.tx_hash}, nonce={self.nonce})"

    async def confirmations(self, num_confirmations: int = 1, timeout: Optional[float] = None) -> Dict:
        """
        Wait until the transaction is num_confirmations blocks deep

        Args:
            num_confirmations: Required depth (1 = included in a block)
            timeout: Deadline in seconds (None = wait indefinitely)

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: Deadline passed
            TransactionDroppedError: Node no longer has the transaction
            ConfirmationError: Transport failure while polling
        """
        try:
            return await asyncio.wait_for(self._poll(num_confirmations), timeout)
        except asyncio.TimeoutError as e:
            raise ConfirmationTimeoutError(
                f"Transaction {self.tx_hash} not confirmed within {timeout}s",
                tx_hash=self.tx_hash
            ) from e

    async def _poll(self, num_confirmations: int) -> Dict:
        w3 = self._client.w3

        while True:
            try:
                receipt = await w3.eth.get_transaction_receipt(self.tx_hash)
            except TransactionNotFound:
                receipt = None
            except Exception as e:
                message, code = extract_rpc_error(e)
                raise ConfirmationError(
                    f"Error polling receipt for {self.tx_hash}: {message}",
                    tx_hash=self.tx_hash,
                    code=code
                ) from e

            if receipt is None:
                # No receipt yet - make sure the node still knows the tx
                await self._ensure_not_dropped()
            else:
                if num_confirmations <= 1:
                    return receipt

                try:
                    head = await w3.eth.block_number
                except Exception as e:
                    message, code = extract_rpc_error(e)
                    raise ConfirmationError(
                        f"Error polling block number for {self.tx_hash}: {message}",
                        tx_hash=self.tx_hash,
                        code=code
                    ) from e

                depth = head - receipt['blockNumber'] + 1
                if depth >= num_confirmations:
                    return receipt

                logger.debug(f"{self.tx_hash}: {depth}/{num_confirmations} confirmations")

            await asyncio.sleep(self._client.poll_interval)

    async def _ensure_not_dropped(self):
        """Raise TransactionDroppedError if the node no longer has the transaction"""
        try:
            await self._client.w3.eth.get_transaction(self.tx_hash)
        except TransactionNotFound as e:
            logger.error(f"Transaction {self.tx_hash} (nonce {self.nonce}) dropped from mempool")
            raise TransactionDroppedError(
                f"Transaction {self.tx_hash} dropped from mempool",
                tx_hash=self.tx_hash
            ) from e
        except Exception as e:
            message, code = extract_rpc_error(e)
            raise ConfirmationError(
                f"Error polling transaction {self.tx_hash}: {message}",
                tx_hash=self.tx_hash,
                code=code
            ) from e


class NodeClient:
    """
    Signs and broadcasts transactions for one wallet over AsyncWeb3.
    Fills missing nonce, chainId and gasPrice the way a signer middleware does.
    """

    def __init__(self, w3: AsyncWeb3, wallet_manager, config: Optional[Dict] = None):
        """
        Initialize Node Client

        Args:
            w3: AsyncWeb3 instance
            wallet_manager: Signing identity
            config: Submitter configuration (reads 'node' and 'gas_settings')
        """
        config = config or {}
        node_config = config.get('node', {})

        self.w3 = w3
        self.wallet_manager = wallet_manager

        # Node settings
        self.chain_id = node_config.get('chain_id')
        self.poll_interval = float(node_config.get('poll_interval_seconds', 2.0))
        self.gas_calculator = GasCalculator(config)

    @classmethod
    def from_url(cls, url: str, wallet_manager, config: Optional[Dict] = None) -> 'NodeClient':
        """Create client over an HTTP endpoint"""
        w3 = AsyncWeb3(AsyncHTTPProvider(url))
        logger.info(f"Node client created for {url}")
        return cls(w3, wallet_manager, config)

    async def get_transaction_count(self, address: str, block_identifier: str = 'latest') -> int:
        """
        Get the number of transactions sent from an address

        Raises:
            NonceQueryError: Node query failed
        """
        try:
            return await self.w3.eth.get_transaction_count(address, block_identifier)
        except Exception as e:
            message, code = extract_rpc_error(e)
            logger.error(f"Error getting transaction count for {address}: {message}")
            raise NonceQueryError(message, code=code) from e

    async def estimate_gas(self, transaction: Dict) -> int:
        """
        Estimate gas for a transaction as a legacy (type 0) transaction

        Raises:
            EstimationError: Malformed request or node failure
        """
        legacy_tx = {
            key: value for key, value in transaction.items()
            if key not in DYNAMIC_FEE_FIELDS and key != 'type'
        }
        legacy_tx.setdefault('from', self.wallet_manager.get_address())

        try:
            return await self.w3.eth.estimate_gas(legacy_tx)
        except Exception as e:
            message, code = extract_rpc_error(e)
            raise EstimationError(message, code=code) from e

    async def send(self, transaction: Dict) -> PendingTransaction:
        """
        Sign and broadcast a transaction

        Args:
            transaction: Transaction dict (not mutated)

        Returns:
            PendingTransaction handle

        Raises:
            AlreadyKnownError: Node already has this transaction
            SubmissionError: Any other rejection
        """
        tx = await self._populate(transaction)
        signed_tx = self.wallet_manager.sign_transaction(tx)

        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            raise classify_send_error(e) from e

        return PendingTransaction(self, AsyncWeb3.to_hex(tx_hash), tx['nonce'])

    async def _populate(self, transaction: Dict) -> Dict:
        """Fill the fields required for signing"""
        tx = transaction.copy()
        address = self.wallet_manager.get_address()
        tx.setdefault('from', address)

        try:
            # Chain ID from config, else ask the node
            if 'chainId' not in tx:
                tx['chainId'] = self.chain_id if self.chain_id is not None else await self.w3.eth.chain_id

            # Pending count includes our own queued transactions
            if tx.get('nonce') is None:
                tx['nonce'] = await self.w3.eth.get_transaction_count(address, 'pending')

            # Legacy pricing unless the caller chose EIP-1559 fields
            if 'gasPrice' not in tx and not any(field in tx for field in DYNAMIC_FEE_FIELDS):
                tx['gasPrice'] = await self.gas_calculator.get_gas_price(self.w3)

            if 'gas' not in tx:
                tx['gas'] = await self.w3.eth.estimate_gas(tx)
        except Exception as e:
            message, code = extract_rpc_error(e)
            raise SubmissionError(f"Error preparing transaction: {message}", code=code) from e

        return tx
