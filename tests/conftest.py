"""Shared fixtures: configured environment and an in-memory fake chain."""

import itertools
from unittest.mock import MagicMock

import pytest
from web3.datastructures import AttributeDict

from crowdfund import compiler, config
from crowdfund.models import CompiledContract

# Well-known development key (first account of the local Hardhat node)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

# Init code that deploys a contract returning 42 from every call
TEST_BYTECODE = "0x600a600c600039600a6000f3602a60505260206050f3"


class FakeChain:
    """Minimal stand-in for a Web3 connection that mines every deployment."""

    def __init__(self, chain_id: int = 11155111) -> None:
        self.nonces = itertools.count()
        self.sent = []
        self.status = 1

        self.w3 = MagicMock()
        self.w3.eth.chain_id = chain_id
        self.w3.eth.gas_price = 1_000_000_000
        self.w3.eth.get_balance.return_value = 2 * 10**18
        self.w3.eth.get_transaction_count.side_effect = lambda *args: next(self.nonces)

        constructor = MagicMock()
        constructor.estimate_gas.return_value = 100_000
        constructor.build_transaction.side_effect = lambda params: {**params, "data": TEST_BYTECODE}
        self.w3.eth.contract.return_value.constructor.return_value = constructor

        self.w3.eth.account.sign_transaction.side_effect = self._sign
        self.w3.eth.send_raw_transaction.side_effect = self._send
        self.w3.eth.wait_for_transaction_receipt.side_effect = self._receipt

    def _sign(self, transaction, private_key):
        signed = MagicMock()
        signed.raw_transaction = bytes([transaction["nonce"] + 1]) * 32
        return signed

    def _send(self, raw_transaction):
        self.sent.append(raw_transaction)
        return raw_transaction

    def _receipt(self, tx_hash, timeout=None):
        index = len(self.sent)
        return AttributeDict({
            "transactionHash": tx_hash,
            "status": self.status,
            "contractAddress": "0x" + f"{index:040x}",
            "blockNumber": 100 + index,
        })


@pytest.fixture
def make_chain():
    """Factory for fake chains with a given chain ID."""
    return FakeChain


@pytest.fixture
def fake_chain(make_chain):
    return make_chain()


@pytest.fixture
def test_account():
    """Private key and checksum address of the development signer."""
    return {"private_key": TEST_PRIVATE_KEY, "address": TEST_ADDRESS}


@pytest.fixture
def sepolia_env(monkeypatch):
    """Environment with every sepolia setting present."""
    monkeypatch.setenv("ALCHEMY_TEST_URL", "https://example-rpc")
    monkeypatch.setenv("TESTNET_PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.setattr(config, "NETWORKS", config.load_networks())
    monkeypatch.setattr(config, "ETHERSCAN", "TESTAPIKEY")


@pytest.fixture
def empty_env(monkeypatch):
    """Environment with no network or explorer settings."""
    for name in ("ALCHEMY_TEST_URL", "TESTNET_PRIVATE_KEY", "ETHERSCAN",
                 "LOCALHOST_RPC", "LOCALHOST_PRIVATE_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "NETWORKS", config.load_networks())
    monkeypatch.setattr(config, "ETHERSCAN", "")


@pytest.fixture
def crowdfunding_artifact():
    return CompiledContract(
        name="Crowdfunding",
        source_name="contracts/Crowdfunding.sol",
        abi=[{"inputs": [], "stateMutability": "nonpayable", "type": "constructor"}],
        bytecode=TEST_BYTECODE,
    )


@pytest.fixture
def project_dirs(tmp_path, monkeypatch, crowdfunding_artifact):
    """Artifacts and deployment directories populated with the Crowdfunding artifact."""
    artifacts = tmp_path / "artifacts"
    deployments = tmp_path / "ignition" / "deployments"
    compiler.write_artifact(crowdfunding_artifact, artifacts)
    monkeypatch.setattr(config, "ARTIFACTS_DIR", artifacts)
    monkeypatch.setattr(config, "DEPLOYMENTS_DIR", deployments)
    return artifacts, deployments
