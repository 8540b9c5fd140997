"""Main CLI interface for Crowdfund."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Dict, List, Tuple

from crowdfund import compiler, config, evm, ignition, utils, verify
from crowdfund.models import DeployedContract
from crowdfund.modules.crowdfunding import CrowdfundingModule


class CrowdfundCLI:
    """Main CLI class for Crowdfund."""

    def __init__(self, network: str = config.DEFAULT_NETWORK) -> None:
        self.network = network
        self.actions: Dict[str, Tuple[str, Callable[[argparse.Namespace], None]]] = {
            "compile": ("Compile contracts", self.compile),
            "deploy": ("Deploy CrowdfundingModule", self.deploy),
            "verify": ("Verify deployed contract", self.verify),
            "networks": ("List networks", self.list_networks),
            "accounts": ("Show signer account", self.show_accounts),
        }

    def run(self, command: str, args: argparse.Namespace) -> int:
        """Run a single command and return the process exit code."""
        action = self.actions.get(command)
        if action is None:
            utils.error(f"Unknown command: {command!r}")
            return 1

        label, callback = action
        utils.section_header(label)
        try:
            callback(args)
        except KeyboardInterrupt:
            utils.section_footer("Cancelled.")
            return 1
        except (ValueError, ConnectionError, FileNotFoundError) as e:
            utils.error(str(e))
            return 1
        return 0

    def compile(self, args: argparse.Namespace) -> None:
        """Compile every contract source."""
        utils.info(f"Compiling with solc {config.SOLIDITY_VERSION}")
        compiled = compiler.compile_contracts()
        for contract in compiled:
            utils.result(f"Compiled {contract.fully_qualified_name}")
        utils.success(f"{len(compiled)} contract(s) compiled")

    def deploy(self, args: argparse.Namespace) -> None:
        """Execute the Crowdfunding deployment module."""
        # Fail on missing configuration before compiling or connecting
        config.require_network(self.network)
        if args.verify and not config.get_etherscan_api_key():
            raise ValueError("ETHERSCAN API key is not set; cannot verify after deployment")

        if not args.no_compile:
            self.compile(args)

        client = evm.EVMClient(self.network)
        utils.info(f"Network: {client.network} (chain {client.chain_id})")
        utils.info(f"Deployer: {client.address}")

        deployed = ignition.deploy_module(CrowdfundingModule, client)

        print()
        utils.success(f"{CrowdfundingModule.module_id} deployed successfully")
        self.print_deployed(deployed, client.chain_id)

        if args.verify:
            for contract in deployed.values():
                self._verify_one(contract, client.chain_id)

    def verify(self, args: argparse.Namespace) -> None:
        """Verify an already deployed contract."""
        profile = config.get_network(self.network)
        if profile is None or profile.chain_id is None:
            raise ValueError(f"Unknown chain ID for network {self.network!r}")

        compiled = compiler.load_artifact(args.contract)

        address = args.address
        if not address:
            # Fall back to the address recorded by the last deployment on this chain
            recorded = ignition.load_deployed_addresses(profile.chain_id)
            address = recorded.get(f"{CrowdfundingModule.module_id}#{compiled.name}")
            if not address:
                raise ValueError(
                    f"No recorded deployment of {compiled.name} on {self.network}; pass the address explicitly"
                )
            utils.info(f"Using recorded address {address}")

        deployed = DeployedContract(
            name=compiled.name,
            address=address,
            transaction_hash="",
            block_number=0,
            abi=compiled.abi,
        )
        status = verify.verify_contract(deployed, compiled, compiler.load_build_input(), profile.chain_id)
        utils.success(f"Verification result: {status}")

    def _verify_one(self, contract: DeployedContract, chain_id: int) -> None:
        try:
            compiled = compiler.load_artifact(contract.name)
            solc_input = compiler.load_build_input()
            status = verify.verify_contract(contract, compiled, solc_input, chain_id)
            utils.success(f"Verified {contract.name}: {status}")
        except (ValueError, FileNotFoundError) as e:
            # Deployment already succeeded; verification can be retried later
            utils.warn(f"Verification of {contract.name} failed: {e}")
            utils.warn(f"Retry with: crowdfund verify {contract.address} --network {self.network}")

    def list_networks(self, args: argparse.Namespace) -> None:
        """List configured networks."""
        for name in config.list_networks():
            profile = config.get_network(name)
            try:
                config.require_network(name)
                state = utils.bold_green("configured")
            except ValueError:
                state = utils.bold_yellow("missing settings")
            marker = " (default)" if name == config.DEFAULT_NETWORK else ""
            print(f"{utils.bold(name)}{marker}  chain {profile.chain_id}  {state}")
        print()
        print(f"{utils.bold('Solidity:')} {config.SOLIDITY_VERSION}")
        explorer = "set" if config.get_etherscan_api_key() else "not set"
        print(f"{utils.bold('Etherscan API key:')} {explorer}")

    def show_accounts(self, args: argparse.Namespace) -> None:
        """Show the signer account of the selected network and its balance."""
        profile = config.require_network(self.network)
        address_info = evm.derive_address_from_private_key(profile.accounts[0])
        client = evm.EVMClient(self.network)
        utils.print_fields({
            "Network": self.network,
            "Address": address_info["address"],
            "Public Key": address_info["public_key"],
            "Private Key": utils.mask_secret(address_info["private_key"]),
            "Balance": f"{client.get_balance()} ETH",
        })

    def print_deployed(self, deployed: Dict[str, DeployedContract], chain_id: int) -> None:
        """Print deployed contract handles."""
        explorer = config.get_explorer_url(chain_id)
        for name, contract in deployed.items():
            print(f"{utils.bold(name)}: {utils.bold_cyan(contract.address)}")
            print(f"  Transaction: {contract.transaction_hash}")
            print(f"  Block: {contract.block_number}")
            if explorer:
                print(f"  Explorer: {explorer}/address/{contract.address}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(prog="crowdfund", description="Crowdfund CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("compile", help="Compile contracts")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy CrowdfundingModule")
    deploy_parser.add_argument("--network", default=config.DEFAULT_NETWORK)
    deploy_parser.add_argument("--verify", action="store_true", help="Verify on Etherscan after deployment")
    deploy_parser.add_argument("--no-compile", action="store_true", help="Use existing artifacts")

    verify_parser = subparsers.add_parser("verify", help="Verify a deployed contract")
    verify_parser.add_argument("address", nargs="?", help="Defaults to the recorded deployment address")
    verify_parser.add_argument("--network", default=config.DEFAULT_NETWORK)
    verify_parser.add_argument("--contract", default="Crowdfunding")

    subparsers.add_parser("networks", help="List networks")

    accounts_parser = subparsers.add_parser("accounts", help="Show signer account")
    accounts_parser.add_argument("--network", default=config.DEFAULT_NETWORK)

    return parser


def main(argv: List[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    cli = CrowdfundCLI(getattr(args, "network", config.DEFAULT_NETWORK))
    utils.print_banner()
    return cli.run(args.command, args)


if __name__ == "__main__":
    sys.exit(main())
