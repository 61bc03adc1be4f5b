"""
Transaction Errors
Failure taxonomy shared by the node client and the transaction manager
"""

from typing import Optional


class TransactionError(Exception):
    """Base class for every transaction submission failure"""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class EstimationError(TransactionError):
    """Gas estimation failed (malformed request or unreachable node)"""


class NonceQueryError(TransactionError):
    """Transaction count query failed"""


class SubmissionError(TransactionError):
    """Node rejected the raw transaction"""


class AlreadyKnownError(SubmissionError):
    """
    Node already holds a transaction with this hash or nonce

    An earlier attempt may have landed or still be pending,
    so the next attempt needs a corrected nonce.
    """


class ConfirmationError(TransactionError):
    """Waiting for confirmations failed after the transaction was sent"""

    def __init__(self, message: str, tx_hash: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message, code=code)
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(ConfirmationError):
    """Confirmation deadline passed before the transaction was final"""


class TransactionDroppedError(ConfirmationError):
    """
    Transaction vanished from the mempool without a receipt

    Not retried: the same nonce may still land from another node's pool.
    """
