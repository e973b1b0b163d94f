import itertools

import pytest

from token_deployment.config import DeploymentConfig, DeploymentParameters
from token_deployment.errors import (
    ConfirmationError,
    ResolutionError,
    SubmissionError,
    VerificationError,
)
from token_deployment.framework import ContractFactory, ContractHandle, DeploymentFramework
from token_deployment.registry import RegistryEntry

MOCK_ADDRESS = "0xABC...123"
DEPLOYED_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class StubHandle(ContractHandle):
    def __init__(self, address, fail_confirmation=False, fail_verification=False):
        self._address = address
        self._fail_confirmation = fail_confirmation
        self._fail_verification = fail_verification
        self.confirmed = False
        self.verified = False

    def wait_for_confirmation(self):
        if self._fail_confirmation:
            raise ConfirmationError("Deployment transaction 0xdead reverted.")
        self.confirmed = True

    @property
    def address(self):
        if not self.confirmed:
            raise ConfirmationError("not confirmed yet")
        return self._address

    def registry_entry(self):
        return RegistryEntry(
            chain_id=31337,
            name="MyToken",
            address=self.address,
            abi=[{"type": "constructor", "inputs": [{"name": "initialSupply", "type": "uint256"}]}],
            tx_hash="0x" + "ab" * 32,
            block_number=1,
            deployer=DEPLOYER_ADDRESS,
        )

    def verify(self):
        if self._fail_verification:
            raise VerificationError("Etherscan rejected the source code.")
        self.verified = True


class StubFactory(ContractFactory):
    def __init__(self, framework):
        self.framework = framework

    def deploy(self, constructor_params):
        framework = self.framework
        framework.deployed_args.append(tuple(constructor_params.values()))
        if framework.fail_submission:
            raise SubmissionError("insufficient funds for gas * price + value")
        handle = StubHandle(
            address=next(framework.addresses),
            fail_confirmation=framework.fail_confirmation,
            fail_verification=framework.fail_verification,
        )
        framework.handles.append(handle)
        return handle


class StubFramework(DeploymentFramework):
    """Deploys nothing; hands out addresses in order."""

    def __init__(
        self,
        addresses=None,
        known_contracts=("MyToken",),
        fail_submission=False,
        fail_confirmation=False,
        fail_verification=False,
    ):
        self.addresses = iter(addresses or (f"0x{i:040x}" for i in itertools.count(1)))
        self.known_contracts = known_contracts
        self.fail_submission = fail_submission
        self.fail_confirmation = fail_confirmation
        self.fail_verification = fail_verification
        self.deployed_args = list()
        self.handles = list()
        self.closed = False

    def resolve(self, contract_name):
        if contract_name not in self.known_contracts:
            raise ResolutionError(f"Contract '{contract_name}' is unknown or not compiled.")
        return StubFactory(self)

    def close(self):
        self.closed = True


@pytest.fixture
def framework():
    return StubFramework(addresses=[MOCK_ADDRESS])


@pytest.fixture
def parameters():
    return DeploymentParameters()


@pytest.fixture
def config():
    return DeploymentConfig()
