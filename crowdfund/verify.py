"""Contract source verification on Etherscan."""

import json
import time
from typing import Any, Dict

import requests

from crowdfund import config, utils
from crowdfund.models import CompiledContract, DeployedContract

# Full compiler release names expected by the explorer
SOLC_LONG_VERSIONS: Dict[str, str] = {
    "0.8.24": "v0.8.24+commit.e11b9ed9",
}

POLL_INTERVAL = 5
MAX_POLLS = 24
REQUEST_TIMEOUT = 30


def _call(method: str, chain_id: int, **params: Any) -> Dict[str, Any]:
    """Call the explorer API and return the decoded JSON response."""
    query = {"chainid": chain_id}
    try:
        if method == "POST":
            response = requests.post(
                config.ETHERSCAN_API_URL, params=query, data=params, timeout=REQUEST_TIMEOUT
            )
        else:
            response = requests.get(
                config.ETHERSCAN_API_URL, params={**query, **params}, timeout=REQUEST_TIMEOUT
            )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        raise ValueError(f"Explorer request failed: {e}")


def _is_already_verified(message: str) -> bool:
    return "already verified" in message.lower()


def submit_verification(
    deployed: DeployedContract,
    compiled: CompiledContract,
    solc_input: Dict[str, Any],
    chain_id: int,
    api_key: str,
) -> str:
    """
    Submit standard JSON source for verification.

    Returns:
        The explorer's verification GUID, or "already verified"
    """
    compiler_version = SOLC_LONG_VERSIONS.get(config.SOLIDITY_VERSION)
    if compiler_version is None:
        raise ValueError(f"Unknown commit hash for solc {config.SOLIDITY_VERSION}")

    payload = _call(
        "POST",
        chain_id,
        apikey=api_key,
        module="contract",
        action="verifysourcecode",
        codeformat="solidity-standard-json-input",
        sourceCode=json.dumps(solc_input),
        contractaddress=deployed.address,
        contractname=compiled.fully_qualified_name,
        compilerversion=compiler_version,
        constructorArguements="",
    )

    message = str(payload.get("result", ""))
    if payload.get("status") == "1":
        return message
    if _is_already_verified(message):
        return "already verified"
    raise ValueError(f"Verification request rejected: {message or payload.get('message')}")


def check_verification_status(guid: str, chain_id: int, api_key: str) -> str:
    """Return the explorer's current status text for a verification request."""
    payload = _call(
        "GET",
        chain_id,
        apikey=api_key,
        module="contract",
        action="checkverifystatus",
        guid=guid,
    )
    return str(payload.get("result", ""))


def verify_contract(
    deployed: DeployedContract,
    compiled: CompiledContract,
    solc_input: Dict[str, Any],
    chain_id: int,
    api_key: str | None = None,
) -> str:
    """
    Verify a deployed contract and wait for the explorer's verdict.

    Args:
        deployed: Handle of the deployed contract
        compiled: Compiler output of the same contract
        solc_input: Standard JSON input used for compilation
        chain_id: Chain the contract lives on
        api_key: Explorer API key (default: config.ETHERSCAN)

    Returns:
        Final status text

    Raises:
        ValueError: If the key is missing, the request is rejected or verification fails
    """
    api_key = api_key or config.get_etherscan_api_key()
    if not api_key:
        raise ValueError("ETHERSCAN API key is not set; cannot verify contract")

    guid = submit_verification(deployed, compiled, solc_input, chain_id, api_key)
    if guid == "already verified":
        utils.info(f"{deployed.name} at {deployed.address} is already verified")
        return guid

    utils.info(f"Verification submitted (guid {guid}), waiting for result...")
    status = ""
    for _ in range(MAX_POLLS):
        time.sleep(POLL_INTERVAL)
        status = check_verification_status(guid, chain_id, api_key)
        if status.lower().startswith("pass") or _is_already_verified(status):
            return status
        if status.lower().startswith("fail"):
            raise ValueError(f"Verification failed: {status}")

    raise ValueError(f"Verification still pending after {MAX_POLLS * POLL_INTERVAL}s: {status}")
