"""Deployment unit for the Crowdfunding contract."""

from crowdfund.ignition import build_module

# Deploy the Crowdfunding contract and export its handle
CrowdfundingModule = build_module(
    "CrowdfundingModule",
    lambda m: {"crowdfunding": m.contract("Crowdfunding")},
)
