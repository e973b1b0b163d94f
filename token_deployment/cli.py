import sys

import click

from token_deployment import output
from token_deployment.config import DeploymentConfig, DeploymentParameters, load_deployment
from token_deployment.driver import DeploymentResult, deploy_contract
from token_deployment.errors import DeploymentConfigError, DeploymentError
from token_deployment.framework import ApeFramework, DeploymentFramework
from token_deployment.options import (
    account_option,
    artifact_path_option,
    autosign_option,
    config_option,
    confirmations_option,
    initial_supply_option,
    network_option,
    registry_filepath_option,
    timeout_option,
    verify_option,
)
from token_deployment.registry import record_deployment


def finalize(result: DeploymentResult, config: DeploymentConfig) -> None:
    """Records and optionally verifies a confirmed deployment."""
    if config.registry_filepath:
        record_deployment(result.handle.registry_entry(), output_filepath=config.registry_filepath)
    if config.verify:
        result.handle.verify()


def run(
    framework: DeploymentFramework, config: DeploymentConfig, parameters: DeploymentParameters
) -> bool:
    """Deploys once and reports the outcome; returns False on any failure."""
    result = deploy_contract(framework, parameters)
    if not result.succeeded:
        output.error(str(result.error))
        return False

    output.report_success(result.contract_name, result.address)
    try:
        finalize(result, config)
    except DeploymentError as error:
        output.error(str(error))
        return False
    return True


@click.command()
@config_option
@network_option
@account_option
@artifact_path_option
@initial_supply_option
@registry_filepath_option
@verify_option
@autosign_option
@confirmations_option
@timeout_option
def cli(
    config_filepath,
    network,
    account,
    artifact_path,
    initial_supply,
    registry_filepath,
    verify,
    autosign,
    required_confirmations,
    timeout,
):
    """Deploy the token contract and print its address."""
    try:
        config, parameters = load_deployment(config_filepath)
        if initial_supply is not None:
            parameters = parameters.with_initial_supply(initial_supply)
    except DeploymentConfigError as error:
        output.error(str(error))
        sys.exit(1)

    config = config.override(
        network=network,
        account=account,
        artifact_path=artifact_path,
        registry_filepath=registry_filepath,
        verify=verify,
        autosign=autosign,
        required_confirmations=required_confirmations,
        timeout=timeout,
    )

    with ApeFramework(config) as framework:
        succeeded = run(framework, config, parameters)

    if not succeeded:
        sys.exit(1)


if __name__ == "__main__":
    cli()
