"""Crowdfund: compile, deploy and verify the Crowdfunding contract."""
