from collections import OrderedDict
from pathlib import Path

import pytest

from token_deployment.config import DeploymentConfig, DeploymentParameters, load_deployment
from token_deployment.constants import DEFAULT_CONFIG_FILEPATH
from token_deployment.errors import DeploymentConfigError

CONFIG_YAML = """
deployment:
  network: ethereum:sepolia:https://rpc.example.org
  account: deployer
  chain_id: 11155111
  verify: true
  required_confirmations: 3
artifacts:
  dir: ./artifacts
  registry: ./registry/sepolia.json
constants:
  INITIAL_SUPPLY: 1000000
  HOLDERS: 42
contracts:
  - MyToken:
      constructor:
        initialSupply: $INITIAL_SUPPLY
        holders: [$HOLDERS, 7]
"""


@pytest.fixture
def config_filepath(tmp_path):
    filepath = tmp_path / "deployment.yml"
    filepath.write_text(CONFIG_YAML)
    return filepath


def _write(tmp_path, text) -> Path:
    filepath = tmp_path / "config.yml"
    filepath.write_text(text)
    return filepath


def test_default_deployment_file():
    config, parameters = load_deployment(DEFAULT_CONFIG_FILEPATH)

    assert config == DeploymentConfig()
    assert parameters.contract_name == "MyToken"
    assert parameters.constructor_args == [1000]
    assert parameters.initial_supply == 1000


def test_load_deployment(config_filepath):
    config, parameters = load_deployment(config_filepath)

    assert config.network == "ethereum:sepolia:https://rpc.example.org"
    assert config.account == "deployer"
    assert config.chain_id == 11155111
    assert config.verify
    assert not config.autosign
    assert config.required_confirmations == 3
    assert config.timeout is None
    assert config.artifact_path == Path("./artifacts")
    assert config.registry_filepath == Path("./registry/sepolia.json")

    assert parameters.contract_name == "MyToken"
    assert parameters.constructor_params == OrderedDict(
        [("initialSupply", 1_000_000), ("holders", [42, 7])]
    )


def test_contract_without_constructor_parameters(tmp_path):
    _, parameters = load_deployment(_write(tmp_path, "contracts:\n  - MyToken\n"))

    assert parameters.contract_name == "MyToken"
    assert parameters.constructor_args == []
    assert parameters.initial_supply is None
    with pytest.raises(DeploymentConfigError, match="initialSupply"):
        parameters.with_initial_supply(10)


@pytest.mark.parametrize(
    "text, message",
    [
        ("deployment:\n  network: ethereum:local:test\n", "missing 'contracts'"),
        ("contracts:\n  - MyToken\n  - OtherToken\n", "Exactly one contract"),
        ("contracts:\n  - MyToken:\n      constructor: 5\n", "Malformed"),
        ("contracts:\n  - [MyToken]\n", "Malformed"),
        (
            "contracts:\n  MyToken:\n    constructor:\n      initialSupply: 1000\n",
            "Malformed",
        ),
        (
            "contracts:\n  - MyToken:\n      constructor:\n        initialSupply: $SUPPLY\n",
            "Constant 'SUPPLY' not found",
        ),
        (
            "deployment:\n  chain_id: mainnet\ncontracts:\n  - MyToken\n",
            "'chain_id' must be an integer",
        ),
        (
            "deployment:\n  verify: \"false\"\ncontracts:\n  - MyToken\n",
            "'verify' must be true or false",
        ),
        (
            "deployment:\n  autosign: 1\ncontracts:\n  - MyToken\n",
            "'autosign' must be true or false",
        ),
        ("- just\n- a list\n", "Malformed deployment YAML"),
        ("contracts: [MyToken\n", "Invalid deployment YAML"),
    ],
)
def test_invalid_deployment_file(tmp_path, text, message):
    with pytest.raises(DeploymentConfigError, match=message):
        load_deployment(_write(tmp_path, text))


def test_with_initial_supply_is_a_copy():
    parameters = DeploymentParameters()
    updated = parameters.with_initial_supply(5)

    assert updated.initial_supply == 5
    assert parameters.initial_supply == 1000


def test_default_parameters_are_read_only():
    parameters = DeploymentParameters()

    with pytest.raises(TypeError):
        parameters.constructor_params["initialSupply"] = 1
    assert DeploymentParameters().initial_supply == 1000
    assert parameters.with_initial_supply(5).constructor_params is not parameters.constructor_params


def test_override_ignores_unset_values():
    config = DeploymentConfig(account="deployer", verify=True)
    updated = config.override(account=None, verify=False, network="ethereum:sepolia:node")

    assert updated.account == "deployer"
    assert updated.verify is False
    assert updated.network == "ethereum:sepolia:node"
