"""
Configuration module for Crowdfund.
Stores the compiler version, network profiles and explorer credentials.
Supports environment variables with fallback to defaults.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional
from dotenv import find_dotenv, load_dotenv

from crowdfund.models import NetworkProfile

# Load environment variables from the project's .env file if it exists
load_dotenv(find_dotenv(usecwd=True))


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with fallback to default."""
    return os.getenv(key, default)


# Compiler version used for every contract source in the project.
# Not configurable from the environment.
SOLIDITY_VERSION = "0.8.24"

DEFAULT_NETWORK = "sepolia"

PROJECT_ROOT = Path(get_env("CROWDFUND_ROOT", os.getcwd()))
CONTRACTS_DIR = Path(get_env("CROWDFUND_CONTRACTS_DIR", str(PROJECT_ROOT / "contracts")))
ARTIFACTS_DIR = Path(get_env("CROWDFUND_ARTIFACTS_DIR", str(PROJECT_ROOT / "artifacts")))
DEPLOYMENTS_DIR = Path(
    get_env("CROWDFUND_DEPLOYMENTS_DIR", str(PROJECT_ROOT / "ignition" / "deployments"))
)

# Environment variables backing each network profile.
# Structure: NETWORK_ENV[network] = (rpc url variable, signer key variable)
NETWORK_ENV: Dict[str, tuple] = {
    "sepolia": ("ALCHEMY_TEST_URL", "TESTNET_PRIVATE_KEY"),
    "localhost": ("LOCALHOST_RPC", "LOCALHOST_PRIVATE_KEY"),
}


def load_networks() -> Dict[str, NetworkProfile]:
    """Build network profiles from the current environment."""
    localhost_key = get_env("LOCALHOST_PRIVATE_KEY")
    return {
        "sepolia": NetworkProfile(
            name="sepolia",
            url=get_env("ALCHEMY_TEST_URL"),
            accounts=[get_env("TESTNET_PRIVATE_KEY")],
            chain_id=11155111,
        ),
        "localhost": NetworkProfile(
            name="localhost",
            url=get_env("LOCALHOST_RPC", "http://127.0.0.1:8545"),
            accounts=[localhost_key] if localhost_key else [],
            chain_id=31337,
        ),
    }


# Network profiles, read once at startup
NETWORKS: Dict[str, NetworkProfile] = load_networks()

# Block explorer API key used for contract verification
ETHERSCAN: str = get_env("ETHERSCAN")

ETHERSCAN_API_URL = get_env("ETHERSCAN_API_URL", "https://api.etherscan.io/v2/api")

# Block explorer web URLs, keyed by chain ID
EXPLORER_URLS: Dict[int, str] = {
    1: "https://etherscan.io",
    11155111: "https://sepolia.etherscan.io",
}


def get_network(name: str) -> Optional[NetworkProfile]:
    """
    Get the network profile for a given network name.

    Args:
        name: Network name (e.g., "sepolia", "localhost")

    Returns:
        NetworkProfile, or None if not found
    """
    return NETWORKS.get(name.lower())


def require_network(name: str) -> NetworkProfile:
    """
    Get a network profile and make sure it is usable for deployment.

    Args:
        name: Network name

    Returns:
        NetworkProfile with a non-empty RPC URL and signer keys

    Raises:
        ValueError: If the network is unknown or a required variable is unset
    """
    profile = get_network(name)
    if profile is None:
        raise ValueError(
            f"Unknown network {name!r}. Available networks: {', '.join(list_networks())}"
        )

    url_var, key_var = NETWORK_ENV[profile.name]
    missing: List[str] = []
    if not profile.url:
        missing.append(url_var)
    if not profile.accounts or not all(profile.accounts):
        missing.append(key_var)

    if missing:
        raise ValueError(
            f"Network {profile.name!r} is not configured. "
            f"Set the following environment variables: {', '.join(missing)}"
        )

    return profile


def get_etherscan_api_key() -> Optional[str]:
    """Get the block explorer API key, or None if not set."""
    return ETHERSCAN or None


def get_explorer_url(chain_id: int) -> Optional[str]:
    """Get the block explorer web URL for a chain ID."""
    return EXPLORER_URLS.get(chain_id)


def list_networks() -> list[str]:
    """List all available network names."""
    return list(NETWORKS.keys())
