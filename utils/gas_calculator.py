"""
Gas Calculator
Safety margins on gas estimates and legacy gas price lookup
"""

from typing import Dict, Optional
from web3 import AsyncWeb3
from loguru import logger


DEFAULT_GAS_MARGIN_PERCENT = 10


def inflate_gas(estimate: int, margin_percent: int = DEFAULT_GAS_MARGIN_PERCENT) -> int:
    """
    Add a percentage margin to a gas estimate

    Integer arithmetic only; any fractional remainder is truncated,
    so 7 with a 10% margin stays 7.

    Args:
        estimate: Gas units quoted by the node
        margin_percent: Margin to add, in whole percent

    Returns:
        Inflated gas units
    """
    if estimate < 0:
        raise ValueError(f"Gas estimate cannot be negative: {estimate}")
    if margin_percent < 0:
        raise ValueError(f"Gas margin cannot be negative: {margin_percent}")

    return estimate * (100 + margin_percent) // 100


class GasCalculator:
    """
    Applies the configured gas margin and caps legacy gas prices
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize Gas Calculator

        Args:
            config: Submitter configuration (reads 'gas_settings')
        """
        gas_settings = (config or {}).get('gas_settings', {})

        # Gas settings
        self.margin_percent = int(gas_settings.get('margin_percent', DEFAULT_GAS_MARGIN_PERCENT))
        self.max_gas_price_gwei = gas_settings.get('max_gas_price_gwei')

        logger.debug(
            f"Gas Calculator initialized - margin: {self.margin_percent}%, "
            f"cap: {self.max_gas_price_gwei} gwei"
        )

    def apply_margin(self, estimate: int) -> int:
        """Inflate an estimate by the configured margin"""
        increased = inflate_gas(estimate, self.margin_percent)
        logger.info(f"Estimated gas: {estimate}, increased gas: {increased}")
        return increased

    async def get_gas_price(self, w3: AsyncWeb3) -> int:
        """
        Get current legacy gas price, capped at max_gas_price_gwei

        Args:
            w3: AsyncWeb3 instance

        Returns:
            Gas price in wei
        """
        # Get current gas price from network
        gas_price_wei = await w3.eth.gas_price

        # Cap at max
        if self.max_gas_price_gwei is not None:
            cap_wei = AsyncWeb3.to_wei(self.max_gas_price_gwei, 'gwei')
            if gas_price_wei > cap_wei:
                logger.warning(
                    f"Gas price {AsyncWeb3.from_wei(gas_price_wei, 'gwei')} gwei "
                    f"above cap, using {self.max_gas_price_gwei} gwei"
                )
                gas_price_wei = cap_wei

        return int(gas_price_wei)
