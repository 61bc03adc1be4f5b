"""
Unit Tests for Nonce Manager
"""

import asyncio
import pytest
from unittest.mock import Mock, AsyncMock

from blockchain.errors import NonceQueryError
from blockchain.nonce_manager import NonceManager, REORG_OFFSET, CHAIN


ADDRESS = '0x2c7536E3605D9C16a7a3D7b1898e529396a65c23'


@pytest.fixture
def node_client():
    client = Mock()
    client.get_transaction_count = AsyncMock(return_value=5)
    return client


class TestComputeCorrectedNonce:
    """Test the correction arithmetic"""

    def test_second_attempt_steps_back_one_slot(self):
        assert NonceManager.compute_corrected_nonce(5, 1) == 4

    def test_third_attempt_uses_chain_count(self):
        assert NonceManager.compute_corrected_nonce(5, 2) == 5

    def test_underflow_falls_back_to_chain_count(self):
        assert NonceManager.compute_corrected_nonce(0, 1) == 0
        assert NonceManager.compute_corrected_nonce(1, 0) == 1

    def test_zero_is_allowed(self):
        assert NonceManager.compute_corrected_nonce(1, 1) == 0

    def test_chain_strategy(self):
        assert NonceManager.compute_corrected_nonce(5, 1, CHAIN) == 5

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            NonceManager.compute_corrected_nonce(5, 1, 'latest')


class TestNonceManager:
    """Test chain queries"""

    def test_rejects_unknown_strategy(self, node_client):
        with pytest.raises(ValueError):
            NonceManager(node_client, ADDRESS, 'latest')

    def test_default_strategy(self, node_client):
        manager = NonceManager(node_client, ADDRESS)

        assert manager.strategy == REORG_OFFSET
        assert isinstance(manager.lock, asyncio.Lock)

    @pytest.mark.asyncio
    async def test_get_chain_nonce(self, node_client):
        manager = NonceManager(node_client, ADDRESS)

        assert await manager.get_chain_nonce() == 5
        node_client.get_transaction_count.assert_awaited_once_with(ADDRESS)

    @pytest.mark.asyncio
    async def test_corrected_nonce(self, node_client):
        manager = NonceManager(node_client, ADDRESS)

        assert await manager.corrected_nonce(1) == 4

    @pytest.mark.asyncio
    async def test_corrected_nonce_chain_strategy(self, node_client):
        manager = NonceManager(node_client, ADDRESS, CHAIN)

        assert await manager.corrected_nonce(1) == 5

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, node_client):
        node_client.get_transaction_count = AsyncMock(side_effect=NonceQueryError('node down'))
        manager = NonceManager(node_client, ADDRESS)

        with pytest.raises(NonceQueryError):
            await manager.corrected_nonce(1)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
