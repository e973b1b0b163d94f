from pathlib import Path

import click

from token_deployment.constants import ACCOUNT_ENVVAR, DEFAULT_CONFIG_FILEPATH, NETWORK_ENVVAR
from token_deployment.types import MinInt

config_option = click.option(
    "--config",
    "-c",
    "config_filepath",
    help="Deployment YAML with network, account and constructor parameters.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_CONFIG_FILEPATH,
    show_default=True,
)

network_option = click.option(
    "--network",
    "-n",
    help="ape network choice, e.g. ethereum:sepolia:<endpoint URL>.",
    type=click.STRING,
    envvar=NETWORK_ENVVAR,
    required=False,
)

account_option = click.option(
    "--account",
    "-a",
    help="ape account alias used to sign the deployment, or TEST::<index>.",
    type=click.STRING,
    envvar=ACCOUNT_ENVVAR,
    required=False,
)

artifact_path_option = click.option(
    "--artifact-path",
    help="Compiled contract artifacts directory or ape project root.",
    type=click.Path(exists=True, path_type=Path),
    required=False,
)

initial_supply_option = click.option(
    "--initial-supply",
    help="Initial token supply passed to the constructor.",
    type=MinInt(0),
    required=False,
)

registry_filepath_option = click.option(
    "--registry-filepath",
    "-r",
    help="Registry file to record the deployment in.",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish the contract source to the network's block explorer.",
    default=None,
)

autosign_option = click.option(
    "--autosign/--no-autosign",
    help="Sign the deployment without prompting.",
    default=None,
)

confirmations_option = click.option(
    "--confirmations",
    "required_confirmations",
    help="Block confirmations to wait for.",
    type=MinInt(0),
    required=False,
)

timeout_option = click.option(
    "--timeout",
    help="Seconds to wait for the deployment receipt.",
    type=MinInt(1),
    required=False,
)
