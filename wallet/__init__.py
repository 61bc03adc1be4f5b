"""
Wallet Package
Signing identity for transaction submission
"""

from .wallet_manager import WalletManager

__all__ = ['WalletManager']
