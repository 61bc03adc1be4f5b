"""
Transaction Submitter - Main Entry Point
Sends one transfer and waits for it to confirm

Usage: python main.py <to_address> <value_wei> [config_path]
"""

import asyncio
import sys
from loguru import logger

from blockchain import NodeClient, TransactionBuilder, TransactionError, TransactionManager
from utils.config_loader import get_rpc_url, load_config
from wallet import WalletManager

# Configure logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    level="INFO"
)
logger.add(
    "data/logs/submitter.log",
    rotation="1 day",
    retention="7 days",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    level="DEBUG"
)


class SubmitterRunner:
    """Wires config, wallet, node client and manager for a single submission"""

    def __init__(self, config_path: str = None):
        """Initialize runner"""
        self.config = load_config(config_path)
        self.wallet_manager = WalletManager()
        self.node_client = NodeClient.from_url(
            get_rpc_url(self.config),
            self.wallet_manager,
            self.config
        )
        self.tx_manager = TransactionManager(self.node_client, self.wallet_manager, self.config)
        self.tx_builder = TransactionBuilder(self.wallet_manager, self.config['node']['chain_id'])

    async def send_transfer(self, to: str, value: int) -> bool:
        """
        Submit a transfer, serialized on the wallet's nonce lock

        Returns:
            True if confirmed
        """
        tx = self.tx_builder.build_transfer(to, value)

        async with self.tx_manager.nonce_manager.lock:
            try:
                receipt = await self.tx_manager.submit(tx)
            except TransactionError as e:
                logger.error(f"Transfer to {to} failed: {e!r}")
                return False

        logger.info(f"Receipt status: {receipt.get('status')}")
        return receipt.get('status') == 1


async def main(argv):
    """Main entry point"""
    if len(argv) < 3:
        logger.error("Usage: python main.py <to_address> <value_wei> [config_path]")
        return 2

    to, value = argv[1], int(argv[2])
    config_path = argv[3] if len(argv) > 3 else None

    runner = SubmitterRunner(config_path)
    ok = await runner.send_transfer(to, value)

    return 0 if ok else 1


if __name__ == "__main__":
    exit_code = 1
    try:
        exit_code = asyncio.run(main(sys.argv))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error in main: {e}")
    finally:
        logger.info("Transaction submitter terminated")
    sys.exit(exit_code)
