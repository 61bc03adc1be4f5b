"""
Nonce Manager
Recomputes the nonce for a resubmission after the node reports a duplicate
"""

import asyncio
from loguru import logger


REORG_OFFSET = 'reorg_offset'
CHAIN = 'chain'

NONCE_STRATEGIES = (REORG_OFFSET, CHAIN)


class NonceManager:
    """
    Nonce correction for one submitting address

    Two strategies are supported:
    - reorg_offset: chain count + attempts - 2. Assumes the previous
      attempt's slot was skipped by exactly one due to a reorg. Heuristic,
      only meaningful for the second attempt.
    - chain: resubmit with the chain count as-is.

    Submissions for the same address must not overlap; hold `lock`
    around submit() when several coroutines share one wallet.
    """

    def __init__(self, node_client, address: str, strategy: str = REORG_OFFSET):
        """
        Initialize Nonce Manager

        Args:
            node_client: Node client used for transaction count queries
            address: Submitting address
            strategy: 'reorg_offset' or 'chain'
        """
        if strategy not in NONCE_STRATEGIES:
            raise ValueError(f"Unknown nonce strategy: {strategy}")

        self.node_client = node_client
        self.address = address
        self.strategy = strategy
        self.lock = asyncio.Lock()

    @staticmethod
    def compute_corrected_nonce(chain_nonce: int, attempts: int, strategy: str = REORG_OFFSET) -> int:
        """
        Compute the nonce for the next attempt

        Args:
            chain_nonce: Transaction count reported by the node
            attempts: Zero-based index of the attempt about to run
            strategy: 'reorg_offset' or 'chain'

        Returns:
            Nonce, never below zero
        """
        if strategy == CHAIN:
            return chain_nonce
        if strategy != REORG_OFFSET:
            raise ValueError(f"Unknown nonce strategy: {strategy}")

        new_nonce = chain_nonce + attempts - 2

        # underflow: no slot below the chain count to fall back to
        if new_nonce < 0:
            return chain_nonce

        return new_nonce

    async def get_chain_nonce(self) -> int:
        """Get current transaction count of the address"""
        return await self.node_client.get_transaction_count(self.address)

    async def corrected_nonce(self, attempts: int) -> int:
        """
        Query the chain and compute the nonce for attempt #attempts

        Raises:
            NonceQueryError: Node query failed
        """
        chain_nonce = await self.get_chain_nonce()
        new_nonce = self.compute_corrected_nonce(chain_nonce, attempts, self.strategy)

        logger.info(
            f"Attempt #{attempts} will retry with nonce {new_nonce} for wallet "
            f"{self.address}. Chain nonce: {chain_nonce}"
        )

        return new_nonce
