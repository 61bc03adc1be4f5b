"""
Config Loader
Reads the submitter JSON config and environment settings
"""

import os
import json
import copy
from typing import Dict, Optional
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


DEFAULT_CONFIG_PATH = "config/submitter_config.json"

DEFAULT_CONFIG = {
    'transaction_manager': {
        'max_retries': 2,
        'retry_delay_seconds': 5,
        'num_confirmations': 1,
        'confirmation_timeout_seconds': None,
        'nonce_strategy': 'reorg_offset'
    },
    'gas_settings': {
        'margin_percent': 10,
        'max_gas_price_gwei': None
    },
    'node': {
        'rpc_url_env': 'RPC_HTTP_URL',
        'chain_id': None,
        'poll_interval_seconds': 2.0
    }
}


def _merge(base: Dict, overrides: Dict) -> Dict:
    """Recursively merge overrides into a copy of base"""
    merged = copy.deepcopy(base)

    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value

    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load submitter configuration

    Missing file or missing keys fall back to DEFAULT_CONFIG.
    CHAIN_ID in the environment overrides node.chain_id.

    Args:
        config_path: Path to JSON config (None = default path)

    Returns:
        Configuration dict
    """
    path = config_path or DEFAULT_CONFIG_PATH
    overrides = {}

    if os.path.exists(path):
        with open(path, 'r') as f:
            overrides = json.load(f)
        logger.info(f"Loaded config from {path}")
    else:
        logger.warning(f"Config file {path} not found - using defaults")

    config = _merge(DEFAULT_CONFIG, overrides)

    # Environment overrides
    chain_id = os.getenv('CHAIN_ID')
    if chain_id:
        config['node']['chain_id'] = int(chain_id)

    return config


def get_rpc_url(config: Dict) -> str:
    """
    Resolve the node HTTP endpoint from the environment

    Raises:
        ValueError: If the configured variable is not set
    """
    env_name = config['node']['rpc_url_env']
    url = os.getenv(env_name)

    if not url:
        raise ValueError(f"{env_name} must be set in .env")

    return url
