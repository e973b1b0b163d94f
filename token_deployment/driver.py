from typing import NamedTuple, Optional

from token_deployment.config import DeploymentParameters
from token_deployment.errors import DeploymentError
from token_deployment.framework import ContractHandle, DeploymentFramework


class DeploymentResult(NamedTuple):
    """Outcome of a single deployment: an address, or the error that stopped it."""

    contract_name: str
    address: Optional[str] = None
    handle: Optional[ContractHandle] = None
    error: Optional[DeploymentError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[str]:
        """The failed step; None on success."""
        return self.error.kind if self.error is not None else None

    @classmethod
    def success(
        cls, contract_name: str, address: str, handle: ContractHandle
    ) -> "DeploymentResult":
        return cls(contract_name=contract_name, address=address, handle=handle)

    @classmethod
    def failure(cls, contract_name: str, error: DeploymentError) -> "DeploymentResult":
        return cls(contract_name=contract_name, error=error)


def deploy_contract(
    framework: DeploymentFramework, parameters: DeploymentParameters
) -> DeploymentResult:
    """
    Resolves, submits and confirms a single deployment.

    Every deployment is new: calling this twice with the same parameters
    deploys two contracts.
    """
    contract_name = parameters.contract_name
    try:
        factory = framework.resolve(contract_name)
        handle = factory.deploy(parameters.constructor_params)
        handle.wait_for_confirmation()
        address = handle.address
    except DeploymentError as error:
        return DeploymentResult.failure(contract_name, error)

    return DeploymentResult.success(contract_name, address=address, handle=handle)
