"""Solidity compilation backed by py-solc-x."""

import json
import posixpath
import re
from pathlib import Path
from typing import Any, Dict, List

from solcx import compile_standard, get_installed_solc_versions, install_solc

from crowdfund import config, utils
from crowdfund.models import CompiledContract

BUILD_INFO_FILE = "solc-input.json"

IMPORT_PATTERN = re.compile(r"""^\s*import\s+(?:[^;]*?\bfrom\s+)?["']([^"']+)["']""", re.MULTILINE)


def ensure_solc(version: str = config.SOLIDITY_VERSION) -> None:
    """Install the requested solc release if it is not available yet."""
    installed = {str(v) for v in get_installed_solc_versions()}
    if version not in installed:
        utils.info(f"Installing solc {version}...")
        install_solc(version)


def collect_sources(contracts_dir: Path) -> Dict[str, Dict[str, str]]:
    """Read every Solidity file below contracts_dir into standard JSON sources."""
    if not contracts_dir.is_dir():
        raise ValueError(f"Contracts directory not found: {contracts_dir}")

    base = contracts_dir.parent
    sources = {}
    for path in sorted(contracts_dir.rglob("*.sol")):
        source_name = path.relative_to(base).as_posix()
        sources[source_name] = {"content": path.read_text()}

    if not sources:
        raise ValueError(f"No Solidity sources found in {contracts_dir}")

    return sources


def resolve_imports(sources: Dict[str, Dict[str, str]], base: Path) -> Dict[str, Dict[str, str]]:
    """
    Add every imported file to the sources, following imports transitively.

    Relative imports resolve against the importing file. Other imports resolve
    against the project root first, then against node_modules, so library
    imports such as "@openzeppelin/contracts/..." keep their import path as
    source name.

    Raises:
        ValueError: If an imported file cannot be found
    """
    resolved = dict(sources)
    pending = list(resolved)

    while pending:
        importer = pending.pop()
        for imported in IMPORT_PATTERN.findall(resolved[importer]["content"]):
            if imported.startswith("."):
                source_name = posixpath.normpath(posixpath.join(posixpath.dirname(importer), imported))
            else:
                source_name = imported
            if source_name in resolved:
                continue

            for candidate in (base / source_name, base / "node_modules" / source_name):
                if candidate.is_file():
                    resolved[source_name] = {"content": candidate.read_text()}
                    pending.append(source_name)
                    break
            else:
                raise ValueError(f"Cannot resolve import {imported!r} in {importer}")

    return resolved


def build_input(sources: Dict[str, Dict[str, str]]) -> Dict[str, Any]:
    """Build the solc standard JSON input."""
    return {
        "language": "Solidity",
        "sources": sources,
        "settings": {
            "optimizer": {"enabled": False, "runs": 200},
            "outputSelection": {"*": {"*": ["abi", "evm.bytecode.object"]}},
        },
    }


def compile_contracts(
    contracts_dir: Path | None = None,
    artifacts_dir: Path | None = None,
) -> List[CompiledContract]:
    """
    Compile all contract sources and write their artifacts.

    Args:
        contracts_dir: Directory holding the .sol files (default: config.CONTRACTS_DIR)
        artifacts_dir: Output directory (default: config.ARTIFACTS_DIR)

    Returns:
        List of compiled contracts, in source order

    Raises:
        ValueError: If there are no sources to compile or an import is missing
    """
    contracts_dir = Path(contracts_dir or config.CONTRACTS_DIR)
    artifacts_dir = Path(artifacts_dir or config.ARTIFACTS_DIR)

    sources = resolve_imports(collect_sources(contracts_dir), contracts_dir.parent)
    solc_input = build_input(sources)

    ensure_solc(config.SOLIDITY_VERSION)
    output = compile_standard(solc_input, solc_version=config.SOLIDITY_VERSION)

    compiled = []
    for source_name, contracts in output.get("contracts", {}).items():
        for name, data in contracts.items():
            contract = CompiledContract(
                name=name,
                source_name=source_name,
                abi=data["abi"],
                bytecode=data["evm"]["bytecode"]["object"],
            )
            write_artifact(contract, artifacts_dir)
            compiled.append(contract)

    build_info = artifacts_dir / "build-info"
    build_info.mkdir(parents=True, exist_ok=True)
    (build_info / BUILD_INFO_FILE).write_text(json.dumps(solc_input, indent=2))

    return compiled


def write_artifact(contract: CompiledContract, artifacts_dir: Path) -> Path:
    """Write a contract artifact as artifacts/<source>/<Name>.json."""
    target_dir = artifacts_dir / contract.source_name
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"{contract.name}.json"
    bytecode = contract.bytecode
    path.write_text(
        json.dumps(
            {
                "contractName": contract.name,
                "sourceName": contract.source_name,
                "abi": contract.abi,
                "bytecode": bytecode if bytecode.startswith("0x") else "0x" + bytecode,
            },
            indent=2,
        )
    )
    return path


def load_artifact(name: str, artifacts_dir: Path | None = None) -> CompiledContract:
    """
    Load the artifact of a compiled contract by name.

    Raises:
        FileNotFoundError: If the contract has not been compiled
        ValueError: If the name matches more than one artifact
    """
    artifacts_dir = Path(artifacts_dir or config.ARTIFACTS_DIR)
    matches = [
        path for path in artifacts_dir.rglob(f"{name}.json")
        if path.parent.name.endswith(".sol")
    ]

    if not matches:
        raise FileNotFoundError(
            f"Artifact for {name!r} not found in {artifacts_dir}. Run 'crowdfund compile' first."
        )
    if len(matches) > 1:
        raise ValueError(f"Multiple artifacts named {name!r}: {', '.join(map(str, matches))}")

    data = json.loads(matches[0].read_text())
    return CompiledContract(
        name=data["contractName"],
        source_name=data["sourceName"],
        abi=data["abi"],
        bytecode=data["bytecode"],
    )


def load_build_input(artifacts_dir: Path | None = None) -> Dict[str, Any]:
    """Load the standard JSON input of the last compilation."""
    artifacts_dir = Path(artifacts_dir or config.ARTIFACTS_DIR)
    path = artifacts_dir / "build-info" / BUILD_INFO_FILE
    if not path.exists():
        raise FileNotFoundError(f"Build info not found at {path}. Run 'crowdfund compile' first.")
    return json.loads(path.read_text())
