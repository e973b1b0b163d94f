from token_deployment.cli import cli

cli()
