import click

from token_deployment.constants import SUCCESS_MESSAGE


def info(message: str) -> None:
    """Reports progress on stderr; stdout is reserved for the deployment result."""
    click.echo(message, err=True)


def warning(message: str) -> None:
    click.secho(message, fg="yellow", err=True)


def error(message: str) -> None:
    click.secho(message, fg="red", err=True)


def report_success(contract_name: str, address: str) -> None:
    click.echo(SUCCESS_MESSAGE.format(contract_name=contract_name, address=address))
