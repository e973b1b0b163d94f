#!/usr/bin/python3
"""
Deploys MyToken and prints its address.

    ape run deploy_my_token
    ape run deploy_my_token --network ethereum:sepolia:alchemy --account deployer
"""

from token_deployment.cli import cli

if __name__ == "__main__":
    cli()
