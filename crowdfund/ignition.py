"""
Declarative deployment units.

A module is declared once with build_module() and executed with
deploy_module(). Every contract step runs exactly once per execution; running
the same module again creates new contract instances.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple

from crowdfund import compiler, config, utils
from crowdfund.evm import EVMClient
from crowdfund.models import DeployedContract


@dataclass(frozen=True)
class ContractFuture:
    """Placeholder for a contract that a module will deploy."""
    future_id: str
    contract_name: str
    args: Tuple[Any, ...] = ()


@dataclass
class Module:
    """A named deployment unit: ordered creation steps plus exported handles."""
    module_id: str
    steps: List[ContractFuture] = field(default_factory=list)
    results: Dict[str, ContractFuture] = field(default_factory=dict)


class ModuleBuilder:
    """Collects contract steps while a module is being declared."""

    def __init__(self, module_id: str) -> None:
        self.module_id = module_id
        self.steps: List[ContractFuture] = []

    def contract(self, contract_name: str, args: Tuple[Any, ...] = (), id: str | None = None) -> ContractFuture:
        """Declare the creation of one contract instance."""
        if not contract_name:
            raise ValueError("Contract name must not be empty")

        future_id = f"{self.module_id}#{id or contract_name}"
        if any(step.future_id == future_id for step in self.steps):
            raise ValueError(
                f"Duplicate contract id {future_id!r}; pass a distinct id for each instance"
            )

        future = ContractFuture(future_id=future_id, contract_name=contract_name, args=tuple(args))
        self.steps.append(future)
        return future


def build_module(
    module_id: str,
    builder: Callable[[ModuleBuilder], Mapping[str, ContractFuture]],
) -> Module:
    """
    Declare a deployment module.

    Args:
        module_id: Name of the module (e.g., "CrowdfundingModule")
        builder: Function receiving a ModuleBuilder and returning the exported futures

    Returns:
        The declared Module

    Raises:
        ValueError: If the id, an export name or an exported value is invalid
    """
    if not module_id:
        raise ValueError("Module id must not be empty")

    m = ModuleBuilder(module_id)
    results = dict(builder(m) or {})

    for export_name, future in results.items():
        if not export_name:
            raise ValueError(f"Module {module_id!r} exports an empty name")
        if not isinstance(future, ContractFuture) or future not in m.steps:
            raise ValueError(
                f"Export {export_name!r} of module {module_id!r} is not a contract declared by this module"
            )

    return Module(module_id=module_id, steps=m.steps, results=results)


def deploy_module(
    module: Module,
    client: EVMClient,
    artifacts_dir: Path | None = None,
    deployments_dir: Path | None = None,
) -> Dict[str, DeployedContract]:
    """
    Execute a module against the client's network.

    Args:
        module: Module to execute
        client: Connected client holding the signer
        artifacts_dir: Where compiled artifacts are read from
        deployments_dir: Where deployed addresses are recorded

    Returns:
        Mapping of export name to deployed contract handle
    """
    deployed: Dict[str, DeployedContract] = {}

    for step in module.steps:
        compiled = compiler.load_artifact(step.contract_name, artifacts_dir)
        utils.info(f"Deploying {step.future_id}...")
        deployed[step.future_id] = client.deploy_contract(compiled, step.args)
        utils.success(f"{step.future_id} deployed at {deployed[step.future_id].address}")

    record_deployment(client.chain_id, deployed, deployments_dir)

    return {name: deployed[future.future_id] for name, future in module.results.items()}


def record_deployment(
    chain_id: int,
    deployed: Mapping[str, DeployedContract],
    deployments_dir: Path | None = None,
) -> Path:
    """Merge deployed addresses into chain-<id>/deployed_addresses.json."""
    deployments_dir = Path(deployments_dir or config.DEPLOYMENTS_DIR)
    chain_dir = deployments_dir / f"chain-{chain_id}"
    chain_dir.mkdir(parents=True, exist_ok=True)
    path = chain_dir / "deployed_addresses.json"

    addresses = json.loads(path.read_text()) if path.exists() else {}
    addresses.update({future_id: contract.address for future_id, contract in deployed.items()})
    path.write_text(json.dumps(addresses, indent=2) + "\n")
    return path


def load_deployed_addresses(chain_id: int, deployments_dir: Path | None = None) -> Dict[str, str]:
    """Read the recorded addresses for a chain, or an empty mapping."""
    deployments_dir = Path(deployments_dir or config.DEPLOYMENTS_DIR)
    path = deployments_dir / f"chain-{chain_id}" / "deployed_addresses.json"
    if not path.exists():
        return {}
    return json.loads(path.read_text())
