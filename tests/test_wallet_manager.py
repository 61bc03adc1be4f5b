"""
Unit Tests for Wallet Manager
"""

import pytest
from eth_account import Account

from wallet.wallet_manager import WalletManager


PRIVATE_KEY = '0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318'
ADDRESS = '0x2c7536E3605D9C16a7a3D7b1898e529396a65c23'


@pytest.fixture
def transaction():
    return {
        'to': '0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270',
        'value': 1,
        'gas': 21000,
        'gasPrice': 30 * 10**9,
        'nonce': 0,
        'chainId': 137
    }


class TestWalletManager:
    """Test signing identity"""

    def test_address_from_key(self):
        wallet = WalletManager(PRIVATE_KEY)

        assert wallet.get_address() == ADDRESS
        assert wallet.address == ADDRESS

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.setenv('SUBMITTER_PRIVATE_KEY', PRIVATE_KEY)

        assert WalletManager().get_address() == ADDRESS

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv('SUBMITTER_PRIVATE_KEY', raising=False)

        with pytest.raises(ValueError):
            WalletManager()

    def test_sign_transaction(self, transaction):
        wallet = WalletManager(PRIVATE_KEY)

        signed = wallet.sign_transaction(transaction)

        assert Account.recover_transaction(signed.raw_transaction) == ADDRESS

    def test_sign_incomplete_transaction(self, transaction):
        wallet = WalletManager(PRIVATE_KEY)
        del transaction['gas']

        with pytest.raises(Exception):
            wallet.sign_transaction(transaction)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
