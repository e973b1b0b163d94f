from pathlib import Path

import token_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(token_deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
DEFAULT_CONFIG_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "my_token.yml"

#
# Networks
#

DEFAULT_NETWORK = "ethereum:local:test"
TEST_ACCOUNT_PREFIX = "TEST::"

NETWORK_ENVVAR = "TOKEN_DEPLOYMENT_NETWORK"
ACCOUNT_ENVVAR = "TOKEN_DEPLOYMENT_ACCOUNT"

#
# Contracts
#

DEFAULT_CONTRACT_NAME = "MyToken"
DEFAULT_INITIAL_SUPPLY = 1000
INITIAL_SUPPLY_PARAMETER = "initialSupply"

SUCCESS_MESSAGE = "{contract_name} deployed to: {address}"
