"""
The contract-deployment capability set the driver depends on, and its
implementation on top of ape.

    resolve(name) -> ContractFactory
    ContractFactory.deploy(constructor_params) -> ContractHandle
    ContractHandle.wait_for_confirmation()
    ContractHandle.address

Everything ape raises is translated here into the deployment error taxonomy;
nothing above this module knows about ape exceptions.
"""

import json
import os
import typing
from abc import ABC, abstractmethod
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Optional

from ape import Project, accounts, networks, project
from ape.api import AccountAPI, ReceiptAPI
from ape.api.networks import LOCAL_NETWORK_NAME
from ape.contracts import ContractContainer
from ape.exceptions import ApeException
from eth_utils import to_checksum_address, to_hex
from ethpm_types import ContractType
from web3.auto import w3
from web3.exceptions import TimeExhausted, Web3Exception

from token_deployment import output
from token_deployment.config import DeploymentConfig
from token_deployment.constants import TEST_ACCOUNT_PREFIX
from token_deployment.errors import (
    ConfirmationError,
    ResolutionError,
    SubmissionError,
    VerificationError,
)
from token_deployment.registry import RegistryEntry


class ContractHandle(ABC):
    """A submitted deployment; exposes its address once confirmed."""

    @abstractmethod
    def wait_for_confirmation(self) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def registry_entry(self) -> RegistryEntry:
        raise NotImplementedError

    def verify(self) -> None:
        raise VerificationError(f"{type(self).__name__} cannot publish contract sources.")


class ContractFactory(ABC):
    """Deploys new instances of a single artifact."""

    @abstractmethod
    def deploy(self, constructor_params: typing.Mapping[str, Any]) -> ContractHandle:
        raise NotImplementedError


class DeploymentFramework(ABC):
    @abstractmethod
    def resolve(self, contract_name: str) -> ContractFactory:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


#
# Artifacts
#


def find_artifact(artifact_dir: Path, contract_name: str) -> Optional[Path]:
    """Returns the single `<contract_name>.json` artifact under a directory, if any."""
    matches = sorted(artifact_dir.rglob(f"{contract_name}.json"))
    if not matches:
        return None
    if len(matches) != 1:
        found = ", ".join(str(m) for m in matches)
        raise ResolutionError(f"Artifact for '{contract_name}' is ambiguous: {found}")
    return matches[0]


def load_contract_type(filepath: Path) -> ContractType:
    """Loads an ethpm contract type, or a hardhat-style {abi, bytecode} artifact."""
    try:
        with open(filepath, "r") as file:
            data = json.load(file)

        if isinstance(data.get("bytecode"), str):
            data = {
                "contractName": data.get("contractName", filepath.stem),
                "sourceId": data.get("sourceName"),
                "abi": data["abi"],
                "deploymentBytecode": {"bytecode": data["bytecode"]},
            }
        return ContractType.model_validate(data)
    except (OSError, AttributeError, KeyError, ValueError) as error:
        raise ResolutionError(f"Unreadable artifact at {filepath}: {error}") from error


def _get_dependency_contract_container(source, contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in source.dependencies.items():
        if len(dependency_versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            return getattr(dependency_api, contract)
        except AttributeError:
            continue
    raise ValueError(f"No contract found with name '{contract}'.")


def get_contract_container(source, contract: str) -> ContractContainer:
    try:
        contract_container = getattr(source, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(source, contract)

    return contract_container


def _has_deployment_bytecode(contract_type: ContractType) -> bool:
    bytecode = contract_type.deployment_bytecode
    return bool(bytecode and bytecode.bytecode and bytecode.bytecode != "0x")


def _validate_constructor_params(
    container: ContractContainer, constructor_params: typing.Mapping[str, Any]
) -> None:
    """Validates the named constructor parameters against the constructor ABI."""
    contract_name = container.contract_type.name
    abi_inputs = container.constructor.abi.inputs
    if len(constructor_params) != len(abi_inputs):
        raise SubmissionError(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(constructor_params)}."
        )

    codex = enumerate(zip(abi_inputs, constructor_params.items()), start=0)
    for position, (abi_input, (name, value)) in codex:
        if abi_input.name != name:
            raise SubmissionError(
                f"{contract_name} constructor parameter '{name}' at position {position} does not "
                f"match the expected ABI name '{abi_input.name}'."
            )
        if not w3.is_encodable(abi_input.type, value):
            raise SubmissionError(
                f"Constructor param '{name}' at position {position} has a value "
                f"'{value}' whose type does not match expected ABI type '{abi_input.type}'"
            )


#
# Networks
#


def is_local_network() -> bool:
    return networks.provider.network.name == LOCAL_NETWORK_NAME


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise VerificationError("Please install the ape-etherscan plugin to verify contracts.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    if not explorer_envvar or not os.environ.get(explorer_envvar):
        raise VerificationError(f"{explorer_envvar or 'Explorer API key'} is not set.")


#
# ape
#


class ApeContractHandle(ContractHandle):
    def __init__(self, framework: "ApeFramework", container: ContractContainer, txn_hash: str):
        self._framework = framework
        self.container = container
        self.txn_hash = txn_hash
        self.receipt: Optional[ReceiptAPI] = None

    @property
    def contract_name(self) -> str:
        return self.container.contract_type.name

    def wait_for_confirmation(self) -> None:
        output.info(f"Waiting for {self.contract_name} deployment {self.txn_hash}...")
        try:
            receipt = networks.provider.get_receipt(
                self.txn_hash, **self._framework.confirmation_kwargs()
            )
        except (ApeException, TimeExhausted) as error:
            raise ConfirmationError(
                f"Deployment transaction {self.txn_hash} was not confirmed: {error}"
            ) from error

        if receipt.failed:
            raise ConfirmationError(f"Deployment transaction {self.txn_hash} reverted.")
        if not receipt.contract_address:
            raise ConfirmationError(f"'{self.txn_hash}' did not create a contract.")
        self.receipt = receipt

    @property
    def address(self) -> str:
        if self.receipt is None:
            raise ConfirmationError(f"{self.contract_name} deployment is not confirmed yet.")
        return to_checksum_address(self.receipt.contract_address)

    def registry_entry(self) -> RegistryEntry:
        receipt = self.receipt
        contract_type = self.container.contract_type
        contract_abi = [entry.model_dump(mode="json") for entry in contract_type.abi]
        return RegistryEntry(
            chain_id=networks.provider.chain_id,
            name=self.contract_name,
            address=self.address,
            abi=contract_abi,
            tx_hash=self.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
        )

    def verify(self) -> None:
        """Publishes the contract source to the network's block explorer."""
        if is_local_network():
            output.info(f"(i) Skipping verification of {self.contract_name} on a local network.")
            return
        check_etherscan_plugin()
        explorer = networks.provider.network.explorer
        if explorer is None:
            raise VerificationError(
                f"No block explorer configured for {networks.provider.network.name}."
            )
        output.info(f"(i) Verifying {self.contract_name}...")
        try:
            # registers the contract type with ape for the explorer
            instance = self.container.at(self.address, txn_hash=self.txn_hash)
            explorer.publish_contract(instance.address)
        except ApeException as error:
            raise VerificationError(f"Could not verify {self.contract_name}: {error}") from error


class ApeContractFactory(ContractFactory):
    def __init__(self, framework: "ApeFramework", container: ContractContainer):
        self._framework = framework
        self.container = container

    def deploy(self, constructor_params: typing.Mapping[str, Any]) -> ApeContractHandle:
        framework = self._framework
        framework.connect()
        account = framework.get_account()
        _validate_constructor_params(self.container, constructor_params)
        args = list(constructor_params.values())

        contract_name = self.container.contract_type.name
        pretty_args = ", ".join(f"{name}={value}" for name, value in constructor_params.items())
        pretty_args = pretty_args or "no arguments"
        output.info(f"Deploying {contract_name}({pretty_args}) from {account.address}...")
        try:
            txn = self.container.constructor.serialize_transaction(*args)
            txn.sender = account.address
            txn = account.prepare_transaction(txn)
            signed_txn = account.sign_transaction(txn)
            if signed_txn is None:
                raise SubmissionError(f"{contract_name} deployment transaction was not signed.")
            txn_hash = networks.provider.web3.eth.send_raw_transaction(
                signed_txn.serialize_transaction()
            )
        except (ApeException, Web3Exception, ValueError, OSError) as error:
            raise SubmissionError(
                f"Could not submit {contract_name} deployment: {error}"
            ) from error

        return ApeContractHandle(
            framework=framework, container=self.container, txn_hash=to_hex(txn_hash)
        )


class ApeFramework(DeploymentFramework):
    """Deploys through ape, connecting to the configured network on first use."""

    def __init__(self, config: DeploymentConfig, source=None):
        self.config = config
        self._source = source
        self._account: Optional[AccountAPI] = None
        self._connected = False
        self._stack = ExitStack()

    def close(self) -> None:
        self._stack.close()
        self._connected = False

    #
    # Resolution
    #

    def _get_source(self):
        if self._source is None:
            artifact_path = self.config.artifact_path
            self._source = Project(artifact_path) if artifact_path else project
        return self._source

    def _get_contract_container(self, contract_name: str) -> ContractContainer:
        artifact_path = self.config.artifact_path
        if artifact_path is not None:
            if not artifact_path.exists():
                raise ResolutionError(f"Artifact path {artifact_path} does not exist.")
            if artifact_path.is_dir():
                artifact = find_artifact(artifact_path, contract_name)
                if artifact is not None:
                    return ContractContainer(load_contract_type(artifact))
            elif artifact_path.suffix == ".json":
                return ContractContainer(load_contract_type(artifact_path))

        try:
            return get_contract_container(self._get_source(), contract_name)
        except (AttributeError, ValueError, ApeException) as error:
            raise ResolutionError(
                f"Contract '{contract_name}' is unknown or not compiled: {error}"
            ) from error

    def resolve(self, contract_name: str) -> ApeContractFactory:
        output.info(f"Resolving {contract_name}...")
        container = self._get_contract_container(contract_name)
        resolved_name = container.contract_type.name
        if resolved_name and resolved_name != contract_name:
            raise ResolutionError(
                f"Artifact for '{contract_name}' describes contract '{resolved_name}'."
            )
        if not _has_deployment_bytecode(container.contract_type):
            raise ResolutionError(f"Contract '{contract_name}' has no deployment bytecode.")
        return ApeContractFactory(framework=self, container=container)

    #
    # Network & account
    #

    def connect(self) -> None:
        if self._connected:
            return
        try:
            self._stack.enter_context(networks.parse_network_choice(self.config.network))
        except (ApeException, OSError) as error:
            raise SubmissionError(
                f"Could not connect to network '{self.config.network}': {error}"
            ) from error
        self._connected = True
        self._check_chain_id()
        self._print_network_info()

    def _check_chain_id(self) -> None:
        expected_chain_id = self.config.chain_id
        if expected_chain_id is None or is_local_network():
            return
        chain_id = networks.provider.chain_id
        if chain_id != expected_chain_id:
            raise SubmissionError(
                f"chain_id in config ({expected_chain_id}) does not match "
                f"chain_id of current network ({chain_id})."
            )

    def _print_network_info(self) -> None:
        network = networks.provider.network
        output.info(
            f"Ecosystem: {network.ecosystem.name}\n"
            f"Network: {network.name}\n"
            f"Chain ID: {networks.provider.chain_id}"
        )

    def _load_account(self) -> AccountAPI:
        alias = self.config.account
        try:
            if alias is None:
                if not is_local_network():
                    raise SubmissionError(
                        "Must specify an account when deploying to live networks."
                    )
                return accounts.test_accounts[0]
            if alias.startswith(TEST_ACCOUNT_PREFIX):
                return accounts.test_accounts[int(alias[len(TEST_ACCOUNT_PREFIX) :])]
            return accounts.load(alias)
        except (ApeException, IndexError, ValueError) as error:
            raise SubmissionError(f"Could not load account '{alias}': {error}") from error

    def get_account(self) -> AccountAPI:
        if self._account is not None:
            return self._account

        account = self._load_account()
        if self.config.autosign and hasattr(account, "set_autosign"):
            output.warning("WARNING: Autosign is enabled. Transactions will be signed automatically.")
            try:
                account.set_autosign(True)
            except ApeException as error:
                raise SubmissionError(f"Could not enable autosign: {error}") from error
        self._account = account
        return account

    def confirmation_kwargs(self) -> typing.Dict[str, int]:
        kwargs = dict()
        if self.config.required_confirmations is not None:
            kwargs["required_confirmations"] = self.config.required_confirmations
        if self.config.timeout is not None:
            kwargs["timeout"] = self.config.timeout
        return kwargs
