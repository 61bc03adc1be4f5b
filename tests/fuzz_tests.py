"""
Fuzz Testing for the Transaction Submitter
Tests gas margin, nonce correction and backoff arithmetic with random inputs
"""

import pytest
from unittest.mock import Mock
from hypothesis import given, strategies as st

from blockchain.nonce_manager import NonceManager, CHAIN, REORG_OFFSET
from blockchain.transaction_manager import TransactionManager
from utils.gas_calculator import inflate_gas


class TestGasMarginFuzzing:
    """Fuzz test gas inflation"""

    @given(
        estimate=st.integers(min_value=0, max_value=2**256),
        margin=st.integers(min_value=0, max_value=500)
    )
    def test_inflation_is_truncated_product(self, estimate, margin):
        """Result is floor(estimate * (100 + margin) / 100)"""
        inflated = inflate_gas(estimate, margin)

        assert inflated * 100 <= estimate * (100 + margin) < (inflated + 1) * 100

    @given(estimate=st.integers(min_value=0, max_value=30_000_000))
    def test_inflation_never_lowers_estimate(self, estimate):
        assert inflate_gas(estimate) >= estimate


class TestNonceCorrectionFuzzing:
    """Fuzz test nonce correction"""

    @given(
        chain_nonce=st.integers(min_value=0, max_value=2**64 - 1),
        attempts=st.integers(min_value=0, max_value=100),
        strategy=st.sampled_from([REORG_OFFSET, CHAIN])
    )
    def test_never_negative(self, chain_nonce, attempts, strategy):
        assert NonceManager.compute_corrected_nonce(chain_nonce, attempts, strategy) >= 0

    @given(
        chain_nonce=st.integers(min_value=1, max_value=2**64 - 1)
    )
    def test_second_attempt_is_one_below_chain(self, chain_nonce):
        assert NonceManager.compute_corrected_nonce(chain_nonce, 1) == chain_nonce - 1


class TestBackoffFuzzing:
    """Fuzz test retry delays"""

    @given(
        base_delay=st.floats(min_value=0.001, max_value=60.0),
        attempts=st.integers(min_value=0, max_value=50)
    )
    def test_strictly_increasing(self, base_delay, attempts):
        wallet = Mock()
        wallet.get_address.return_value = '0x2c7536E3605D9C16a7a3D7b1898e529396a65c23'
        manager = TransactionManager(
            Mock(),
            wallet,
            {'transaction_manager': {'retry_delay_seconds': base_delay}}
        )

        assert manager.retry_delay_for(attempts) == pytest.approx(base_delay * (attempts + 1))
        assert manager.retry_delay_for(attempts + 1) > manager.retry_delay_for(attempts)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
