"""
Utilities Package
Gas margin helpers and configuration loading
"""

from .gas_calculator import GasCalculator, inflate_gas
from .config_loader import load_config, get_rpc_url

__all__ = [
    'GasCalculator',
    'inflate_gas',
    'load_config',
    'get_rpc_url'
]
