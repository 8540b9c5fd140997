"""Tests for explorer verification."""

import pytest

from crowdfund import verify
from crowdfund.models import DeployedContract

ADDRESS = "0x0000000000000000000000000000000000000001"


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


@pytest.fixture
def deployed():
    return DeployedContract(name="Crowdfunding", address=ADDRESS, transaction_hash="0x01", block_number=1)


@pytest.fixture
def explorer(monkeypatch):
    """Record explorer requests and answer with queued payloads."""
    state = {"posts": [], "gets": [], "submit": {"status": "1", "result": "guid-1"}, "statuses": []}

    def post(url, params=None, data=None, timeout=None):
        state["posts"].append((params, data))
        return FakeResponse(state["submit"])

    def get(url, params=None, timeout=None):
        state["gets"].append(params)
        return FakeResponse({"status": "1", "result": state["statuses"].pop(0)})

    monkeypatch.setattr(verify.requests, "post", post)
    monkeypatch.setattr(verify.requests, "get", get)
    monkeypatch.setattr(verify.time, "sleep", lambda seconds: None)
    return state


def test_verify_without_key_makes_no_request(empty_env, explorer, deployed, crowdfunding_artifact):
    with pytest.raises(ValueError, match="ETHERSCAN"):
        verify.verify_contract(deployed, crowdfunding_artifact, {}, 11155111)
    assert explorer["posts"] == []


def test_verify_passes_after_polling(sepolia_env, explorer, deployed, crowdfunding_artifact):
    explorer["statuses"] = ["Pending in queue", "Pass - Verified"]

    status = verify.verify_contract(deployed, crowdfunding_artifact, {"language": "Solidity"}, 11155111)

    assert status == "Pass - Verified"
    params, data = explorer["posts"][0]
    assert params == {"chainid": 11155111}
    assert data["apikey"] == "TESTAPIKEY"
    assert data["contractaddress"] == ADDRESS
    assert data["contractname"] == "contracts/Crowdfunding.sol:Crowdfunding"
    assert data["compilerversion"] == "v0.8.24+commit.e11b9ed9"
    assert [p["guid"] for p in explorer["gets"]] == ["guid-1", "guid-1"]


def test_verify_already_verified(sepolia_env, explorer, deployed, crowdfunding_artifact):
    explorer["submit"] = {"status": "0", "result": "Contract source code already verified"}

    assert verify.verify_contract(deployed, crowdfunding_artifact, {}, 11155111) == "already verified"
    assert explorer["gets"] == []


def test_verify_failure(sepolia_env, explorer, deployed, crowdfunding_artifact):
    explorer["statuses"] = ["Fail - Unable to verify"]

    with pytest.raises(ValueError, match="Unable to verify"):
        verify.verify_contract(deployed, crowdfunding_artifact, {}, 11155111)


def test_verify_rejected_submission(sepolia_env, explorer, deployed, crowdfunding_artifact):
    explorer["submit"] = {"status": "0", "message": "NOTOK", "result": "Invalid API Key"}

    with pytest.raises(ValueError, match="Invalid API Key"):
        verify.verify_contract(deployed, crowdfunding_artifact, {}, 11155111)
