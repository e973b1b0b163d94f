import typing
from collections import OrderedDict
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, NamedTuple, Optional

import yaml

from token_deployment.constants import (
    DEFAULT_CONTRACT_NAME,
    DEFAULT_INITIAL_SUPPLY,
    DEFAULT_NETWORK,
    INITIAL_SUPPLY_PARAMETER,
)
from token_deployment.errors import DeploymentConfigError

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"
VARIABLE_PREFIX = "$"


class DeploymentConfig(NamedTuple):
    """Where and as whom a deployment runs."""

    network: str = DEFAULT_NETWORK
    account: Optional[str] = None
    artifact_path: Optional[Path] = None
    chain_id: Optional[int] = None
    registry_filepath: Optional[Path] = None
    verify: bool = False
    autosign: bool = False
    required_confirmations: Optional[int] = None
    timeout: Optional[int] = None

    def override(self, **overrides) -> "DeploymentConfig":
        """Returns a copy with every override that is not None applied."""
        changes = {name: value for name, value in overrides.items() if value is not None}
        return self._replace(**changes)


class DeploymentParameters(NamedTuple):
    """The contract to deploy and its resolved constructor parameters."""

    contract_name: str = DEFAULT_CONTRACT_NAME
    constructor_params: typing.Mapping[str, Any] = MappingProxyType(
        OrderedDict({INITIAL_SUPPLY_PARAMETER: DEFAULT_INITIAL_SUPPLY})
    )

    @property
    def constructor_args(self) -> List[Any]:
        return list(self.constructor_params.values())

    @property
    def initial_supply(self) -> Optional[int]:
        return self.constructor_params.get(INITIAL_SUPPLY_PARAMETER)

    def with_initial_supply(self, initial_supply: int) -> "DeploymentParameters":
        if INITIAL_SUPPLY_PARAMETER not in self.constructor_params:
            raise DeploymentConfigError(
                f"{self.contract_name} has no '{INITIAL_SUPPLY_PARAMETER}' constructor parameter."
            )
        params = OrderedDict(self.constructor_params)
        params[INITIAL_SUPPLY_PARAMETER] = initial_supply
        return self._replace(constructor_params=params)


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file) or dict()


def is_variable(param: Any) -> bool:
    return isinstance(param, str) and param.startswith(VARIABLE_PREFIX)


def _resolve_param(value: Any, constants: typing.Dict[str, Any]) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, constants) for v in value]

    if not is_variable(value):
        return value  # literally a value

    constant_name = value[len(VARIABLE_PREFIX) :]
    try:
        return constants[constant_name]
    except KeyError:
        raise DeploymentConfigError(f"Constant '{constant_name}' not found in deployment file.")


def _parse_contract(config: typing.Dict) -> DeploymentParameters:
    contracts = config.get("contracts")
    if not contracts:
        raise DeploymentConfigError("Deployment file missing 'contracts' field.")
    if not isinstance(contracts, list):
        raise DeploymentConfigError("Malformed constructor parameters YAML.")
    if len(contracts) != 1:
        raise DeploymentConfigError(
            f"Exactly one contract can be deployed per run; got {len(contracts)}."
        )

    contract_info = contracts[0]
    if isinstance(contract_info, str):
        return DeploymentParameters(contract_name=contract_info, constructor_params=OrderedDict())
    if not isinstance(contract_info, dict) or len(contract_info) != 1:
        raise DeploymentConfigError("Malformed constructor parameters YAML.")

    contract_name = list(contract_info.keys())[0]  # only one entry
    contract_data = contract_info[contract_name] or dict()
    if not isinstance(contract_data, dict):
        raise DeploymentConfigError(f"Malformed constructor parameter config for {contract_name}.")
    raw_params = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
    if not isinstance(raw_params, dict):
        raise DeploymentConfigError(f"Malformed constructor parameter config for {contract_name}.")

    constants = config.get("constants") or dict()
    resolved_params = OrderedDict()
    for name, value in raw_params.items():
        resolved_params[name] = _resolve_param(value, constants)

    return DeploymentParameters(contract_name=contract_name, constructor_params=resolved_params)


def _optional_path(value: Any) -> Optional[Path]:
    return Path(value) if value else None


def _optional_int(value: Any, field: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DeploymentConfigError(f"'{field}' must be an integer; got {value!r}.")


def _optional_bool(value: Any, field: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DeploymentConfigError(f"'{field}' must be true or false; got {value!r}.")
    return value


def _parse_deployment_config(config: typing.Dict) -> DeploymentConfig:
    deployment = config.get("deployment") or dict()
    artifacts = config.get("artifacts") or dict()
    if not isinstance(deployment, dict) or not isinstance(artifacts, dict):
        raise DeploymentConfigError("Malformed deployment YAML.")

    return DeploymentConfig(
        network=deployment.get("network") or DEFAULT_NETWORK,
        account=deployment.get("account"),
        artifact_path=_optional_path(artifacts.get("dir")),
        chain_id=_optional_int(deployment.get("chain_id"), "chain_id"),
        registry_filepath=_optional_path(artifacts.get("registry")),
        verify=_optional_bool(deployment.get("verify"), "verify"),
        autosign=_optional_bool(deployment.get("autosign"), "autosign"),
        required_confirmations=_optional_int(
            deployment.get("required_confirmations"), "required_confirmations"
        ),
        timeout=_optional_int(deployment.get("timeout"), "timeout"),
    )


def load_deployment(filepath: Path) -> typing.Tuple[DeploymentConfig, DeploymentParameters]:
    """Loads the deployment configuration and constructor parameters from a YAML file."""
    try:
        config = _load_yaml(filepath)
    except yaml.YAMLError as error:
        raise DeploymentConfigError(f"Invalid deployment YAML at {filepath}: {error}")
    if not isinstance(config, dict):
        raise DeploymentConfigError(f"Malformed deployment YAML at {filepath}.")

    return _parse_deployment_config(config), _parse_contract(config)
