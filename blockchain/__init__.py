"""
Blockchain Interaction Package
Handles transaction building, submission, nonce correction and node access
"""

from .errors import (
    TransactionError,
    EstimationError,
    NonceQueryError,
    SubmissionError,
    AlreadyKnownError,
    ConfirmationError,
    ConfirmationTimeoutError,
    TransactionDroppedError,
)
from .node_client import NodeClient, PendingTransaction
from .nonce_manager import NonceManager
from .transaction_builder import TransactionBuilder
from .transaction_manager import TransactionManager

__all__ = [
    'TransactionManager',
    'TransactionBuilder',
    'NonceManager',
    'NodeClient',
    'PendingTransaction',
    'TransactionError',
    'EstimationError',
    'NonceQueryError',
    'SubmissionError',
    'AlreadyKnownError',
    'ConfirmationError',
    'ConfirmationTimeoutError',
    'TransactionDroppedError'
]
