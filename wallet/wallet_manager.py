"""
Wallet Manager
Holds the single signing identity used for submissions
"""

import os
from typing import Dict, Optional
from eth_account import Account
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


class WalletManager:
    """
    Wraps one local account: exposes its address and signs transactions.
    Read-only after construction.
    """

    def __init__(self, private_key: Optional[str] = None):
        """
        Initialize wallet manager

        Args:
            private_key: Hex private key (None = SUBMITTER_PRIVATE_KEY from .env)
        """
        key = private_key or os.getenv('SUBMITTER_PRIVATE_KEY')

        if not key:
            raise ValueError("SUBMITTER_PRIVATE_KEY must be set in .env")

        self._account = Account.from_key(key)
        self.address = self._account.address

        logger.info(f"Submitter wallet: {self.address}")

    def get_address(self) -> str:
        """Get checksum address of the wallet"""
        return self.address

    def sign_transaction(self, transaction: Dict):
        """
        Sign a transaction with the wallet key

        Args:
            transaction: Fully populated transaction dict

        Returns:
            Signed transaction (use .raw_transaction to broadcast)
        """
        try:
            return self._account.sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Error signing transaction from {self.address}: {e}")
            raise
