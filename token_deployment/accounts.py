import os
import typing

from ape_accounts import import_account_from_private_key

from token_deployment.constants import ACCOUNT_ENVVAR

PASSPHRASE_ENVVAR = "TOKEN_DEPLOYMENT_PASSPHRASE"
PRIVATE_KEY_ENVVAR = "TOKEN_DEPLOYMENT_PRIVATE_KEY"
DEFAULT_ACCOUNT_ALIAS = "DEPLOYER"


def import_account_from_env(environ: typing.Optional[typing.Mapping[str, str]] = None):
    """Imports the deployer's private key into the ape keystore, e.g. on CI."""
    environ = os.environ if environ is None else environ
    try:
        passphrase = environ[PASSPHRASE_ENVVAR]
        private_key = environ[PRIVATE_KEY_ENVVAR]
    except KeyError:
        raise ValueError(
            "There are missing environment variables. "
            f"Please set {PASSPHRASE_ENVVAR} and {PRIVATE_KEY_ENVVAR}."
        )
    alias = environ.get(ACCOUNT_ENVVAR) or DEFAULT_ACCOUNT_ALIAS
    return import_account_from_private_key(alias, passphrase, private_key)
