"""Data models for Crowdfund."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class NetworkProfile:
    """Connection parameters for one network."""
    name: str
    url: str
    accounts: List[str] = field(default_factory=list)
    chain_id: int | None = None


@dataclass
class CompiledContract:
    """Compiler output for a single contract."""
    name: str
    source_name: str
    abi: List[Dict[str, Any]]
    bytecode: str

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.name}"


@dataclass
class DeployedContract:
    """Handle to a deployed contract instance."""
    name: str
    address: str
    transaction_hash: str
    block_number: int
    abi: List[Dict[str, Any]] = field(default_factory=list)
