"""EVM blockchain operations."""

from decimal import Decimal
from typing import Any, Dict, Sequence

from eth_account import Account
from eth_keys import keys
from web3 import Web3

from crowdfund import config, utils
from crowdfund.models import CompiledContract, DeployedContract

GAS_MULTIPLIER = 1.2
RECEIPT_TIMEOUT = 120


def _parse_private_key(privkey_str: str) -> bytes:
    """Return the 32 raw bytes of a hex private key, with or without 0x."""
    clean_privkey = privkey_str[2:] if privkey_str.startswith("0x") else privkey_str

    try:
        private_key_bytes = bytes.fromhex(clean_privkey)
    except ValueError:
        raise ValueError("Private key must be a hex string.")

    if len(private_key_bytes) != 32:
        raise ValueError("Private key must be 32 bytes (64 hex characters).")

    return private_key_bytes


class EVMClient:
    """EVM blockchain client that manages the RPC connection and the signer."""

    def __init__(self, network: str = config.DEFAULT_NETWORK, w3: Web3 | None = None):
        """
        Initialize EVM client for a configured network.

        Args:
            network: Network name (e.g., "sepolia", "localhost")
            w3: Pre-built Web3 instance; a new HTTP connection is made when omitted

        Raises:
            ValueError: If the network is unknown or not fully configured
            ConnectionError: If the RPC endpoint is unreachable
        """
        # Validate before touching the network
        self.profile = config.require_network(network)
        self.network = self.profile.name
        self.rpc_endpoint = self.profile.url

        self.private_key = _parse_private_key(self.profile.accounts[0])
        self.address = Account.from_key(self.private_key).address

        self.w3 = w3 if w3 is not None else self._connect_web3()
        self.chain_id = self._check_chain_id()

    def _connect_web3(self) -> Web3:
        """Return a connected Web3 instance or raise if unreachable."""
        w3 = Web3(Web3.HTTPProvider(self.rpc_endpoint))

        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to RPC endpoint for network {self.network!r}")

        return w3

    def _check_chain_id(self) -> int:
        chain_id = self.w3.eth.chain_id
        if self.profile.chain_id is not None and chain_id != self.profile.chain_id:
            raise ValueError(
                f"Network {self.network!r} expects chain ID {self.profile.chain_id}, "
                f"but the RPC endpoint reports {chain_id}"
            )
        return chain_id

    def get_balance(self, address: str | None = None) -> Decimal:
        """Get the native balance of an address (default: the signer) in ether."""
        target = Web3.to_checksum_address(address or self.address)
        return Web3.from_wei(self.w3.eth.get_balance(target), "ether")

    def build_deploy_transaction(
        self,
        compiled: CompiledContract,
        args: Sequence[Any] = (),
    ) -> Dict[str, Any]:
        """Build a contract creation transaction after estimating gas."""
        try:
            factory = self.w3.eth.contract(abi=compiled.abi, bytecode=compiled.bytecode)
            constructor = factory.constructor(*args)

            gas_estimate = constructor.estimate_gas({"from": self.address})

            tx_params = {
                "from": self.address,
                "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
                "gas": int(gas_estimate * GAS_MULTIPLIER),
                "chainId": self.chain_id,
                "gasPrice": self.w3.eth.gas_price,
            }
            utils.info(f"Chain ID: {self.chain_id}")
            utils.info(f"  Gas Limit: {tx_params['gas']}")
            utils.info(f"  Gas Price: {tx_params['gasPrice']}")

            return constructor.build_transaction(tx_params)
        except Exception as e:
            raise ValueError(f"Failed to build deployment transaction for {compiled.name}: {e}")

    def send_transaction(self, transaction: Dict[str, Any]) -> Dict[str, Any]:
        """Sign a transaction with the signer key, broadcast it and wait for the receipt."""
        signed_txn = self.w3.eth.account.sign_transaction(transaction, self.private_key)

        try:
            tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        except Exception as e:
            raise ValueError(f"Failed to send transaction to RPC: {e}")

        utils.info(f"Transaction sent: {Web3.to_hex(tx_hash)}")
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)

    def deploy_contract(
        self,
        compiled: CompiledContract,
        args: Sequence[Any] = (),
    ) -> DeployedContract:
        """
        Deploy a compiled contract and wait until it is mined.

        Args:
            compiled: Contract ABI and bytecode
            args: Constructor arguments

        Returns:
            DeployedContract handle with the checksum address

        Raises:
            ValueError: If the transaction cannot be built, is rejected or reverts
        """
        transaction = self.build_deploy_transaction(compiled, args)
        receipt = self.send_transaction(transaction)

        tx_hash = Web3.to_hex(receipt["transactionHash"])
        if receipt["status"] != 1:
            raise ValueError(f"Deployment of {compiled.name} reverted (transaction {tx_hash})")

        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise ValueError(f"Receipt for {tx_hash} has no contract address")

        return DeployedContract(
            name=compiled.name,
            address=Web3.to_checksum_address(contract_address),
            transaction_hash=tx_hash,
            block_number=receipt["blockNumber"],
            abi=compiled.abi,
        )


def derive_address_from_private_key(privkey_str: str) -> Dict[str, str]:
    """Derive public key and address from an EVM private key."""
    private_key_bytes = _parse_private_key(privkey_str)

    private_key_obj = keys.PrivateKey(private_key_bytes)
    account = Account.from_key(private_key_bytes)

    return {
        "private_key": private_key_bytes.hex(),
        "public_key": private_key_obj.public_key.to_hex(),
        "address": account.address,
    }
