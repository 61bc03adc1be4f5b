"""
Transaction Manager
Submits one transaction at a time with gas margin, bounded retries and nonce correction
"""

import asyncio
from typing import Dict, Optional
from loguru import logger

from utils.gas_calculator import GasCalculator
from .errors import AlreadyKnownError, ConfirmationError, EstimationError, SubmissionError
from .nonce_manager import NonceManager, REORG_OFFSET


class TransactionManager:
    """
    Drives a transaction from estimation to confirmation

    Each submit() call runs its attempts strictly in sequence:
    estimate gas -> add margin -> send -> wait for confirmations.
    Estimation and submission failures are retried with a linear backoff;
    an "already known" rejection makes every following attempt requery
    the chain nonce first. Confirmation failures are never retried since
    the transaction may already be on chain.

    Holds no per-call state, so one instance can serve concurrent callers
    as long as they do not submit for the same wallet at the same time
    (see NonceManager.lock).
    """

    def __init__(self, node_client, wallet_manager, config: Optional[Dict] = None):
        """
        Initialize Transaction Manager

        Args:
            node_client: NodeClient (or compatible) for RPC calls
            wallet_manager: Signing identity
            config: Submitter configuration (reads 'transaction_manager' and 'gas_settings')
        """
        config = config or {}
        settings = config.get('transaction_manager', {})

        self.node_client = node_client
        self.wallet_manager = wallet_manager

        # Retry strategy
        self.max_retries = int(settings.get('max_retries', 2))
        self.retry_delay = float(settings.get('retry_delay_seconds', 5))

        # Confirmation settings
        self.num_confirmations = int(settings.get('num_confirmations', 1))
        self.confirmation_timeout = settings.get('confirmation_timeout_seconds')

        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")

        self.gas_calculator = GasCalculator(config)
        self.nonce_manager = NonceManager(
            node_client,
            self.get_address(),
            settings.get('nonce_strategy', REORG_OFFSET)
        )

        logger.info(
            f"Transaction Manager initialized - max retries: {self.max_retries}, "
            f"retry delay: {self.retry_delay}s, confirmations: {self.num_confirmations}"
        )

    def get_address(self) -> str:
        """Get address of the submitting wallet"""
        return self.wallet_manager.get_address()

    async def estimate_gas(self, transaction: Dict) -> int:
        """
        Quote gas for a transaction without sending it

        Raises:
            EstimationError: Malformed request or node failure
        """
        return await self.node_client.estimate_gas(transaction)

    def retry_delay_for(self, attempts: int) -> float:
        """Backoff before the attempt following attempt #attempts"""
        return self.retry_delay * (attempts + 1)

    async def submit(self, transaction: Dict) -> Dict:
        """
        Submit a transaction and wait for confirmations

        Args:
            transaction: Transaction dict, optionally with a preset nonce.
                Never mutated.

        Returns:
            Transaction receipt

        Raises:
            EstimationError, SubmissionError: Last error once attempts run out
            ConfirmationError: Waiting for confirmations failed (not retried)
            NonceQueryError: Chain nonce lookup failed during correction
        """
        attempts = 0
        adjust_nonce = False

        while attempts < self.max_retries:
            # Work on a copy, the caller's request stays untouched
            tx = transaction.copy()

            if adjust_nonce:
                tx['nonce'] = await self.nonce_manager.corrected_nonce(attempts)

            try:
                return await self._try_send_transaction(tx, attempts)
            except (EstimationError, SubmissionError) as e:
                if isinstance(e, AlreadyKnownError):
                    logger.warning(
                        f"Transaction with nonce {tx.get('nonce')} already known, "
                        f"retrying with corrected nonce"
                    )
                    adjust_nonce = True

                if attempts + 1 >= self.max_retries:
                    logger.error(
                        f"Error sending transaction, giving up after attempt #{attempts} "
                        f"from wallet {self.get_address()} (nonce {tx.get('nonce')}): {e!r}"
                    )
                    raise

                delay = self.retry_delay_for(attempts)
                logger.error(
                    f"Error sending transaction, retry #{attempts + 1} in {delay}s "
                    f"from wallet {self.get_address()} (nonce {tx.get('nonce')}): {e!r}"
                )
                await asyncio.sleep(delay)

                attempts += 1

        # unreachable while max_retries >= 1
        raise RuntimeError("Retry loop exited without a result")

    async def _try_send_transaction(self, transaction: Dict, attempts: int) -> Dict:
        """Run one estimate -> send -> confirm attempt"""
        # Re-estimate on every attempt
        estimate = await self.estimate_gas(transaction)
        transaction['gas'] = self.gas_calculator.apply_margin(estimate)

        logger.info(
            f"Attempt #{attempts}: sending transaction to {transaction.get('to')} "
            f"with nonce {transaction.get('nonce')}, gas {transaction['gas']}"
        )
        pending_tx = await self.node_client.send(transaction)

        logger.info(
            f"Transaction {pending_tx.tx_hash} sent with nonce {pending_tx.nonce} "
            f"from wallet {self.get_address()}. Waiting for confirmation..."
        )

        try:
            receipt = await pending_tx.confirmations(self.num_confirmations, self.confirmation_timeout)
        except ConfirmationError as e:
            logger.error(
                f"Error waiting for confirmation of {pending_tx.tx_hash} "
                f"(attempt #{attempts}, nonce {pending_tx.nonce}): {e!r}"
            )
            raise

        if receipt.get('status') == 0:
            logger.warning(f"Transaction {pending_tx.tx_hash} reverted")

        logger.success(
            f"Transaction {pending_tx.tx_hash} confirmed. "
            f"Block #{receipt.get('blockNumber')} ({receipt.get('blockHash')})"
        )

        return receipt
