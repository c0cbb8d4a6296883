"""
Command-line interface for Pausaler licensing.
"""

from __future__ import annotations

from pathlib import Path

import click

from pausaler_license.client.activation import activation_code_for_identifier
from pausaler_license.client.license_validator import verify_license
from pausaler_license.common.config import Config
from pausaler_license.common.exceptions import LicenseError
from pausaler_license.common.key_codec import read_embedded_public_key_pem
from pausaler_license.common.models import LicenseType, parse_rfc3339
from pausaler_license.issuer.license_generator import LicenseGenerator


@click.group()
def cli() -> None:
    """Pausaler offline licensing CLI"""


@cli.command()
@click.option("--activation-code", required=True, help="Activation code from the user")
@click.option(
    "--type",
    "license_kind",
    required=True,
    type=click.Choice(["yearly", "lifetime"], case_sensitive=False),
    help="License class to issue",
)
def generate(activation_code: str, license_kind: str) -> None:
    """Issue a signed license for an activation code"""
    config = Config()
    try:
        generator = LicenseGenerator(config)
        license_str = generator.generate_license(
            activation_code, LicenseType.from_cli(license_kind)
        )
    except (LicenseError, ValueError) as err:
        raise click.ClickException(str(err)) from err
    click.echo(license_str)


@cli.command("public-key")
def public_key() -> None:
    """Print the issuer public key as SPKI PEM"""
    try:
        generator = LicenseGenerator(Config())
    except ValueError as err:
        raise click.ClickException(str(err)) from err
    click.echo(generator.public_key_pem(), nl=False)


@cli.command("activation-code")
@click.option("--pib", required=True, help="Company tax identifier (PIB)")
def activation_code(pib: str) -> None:
    """Generate an activation code for a PIB"""
    try:
        code = activation_code_for_identifier(pib, Config())
    except LicenseError as err:
        raise click.ClickException(str(err)) from err
    click.echo(code)


@cli.command()
@click.option("--license", "license_str", required=True, help="License string")
@click.option("--pib", required=True, help="Company tax identifier (PIB)")
@click.option(
    "--public-key",
    "public_key_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM file with the issuer public key (default: embedded key)",
)
@click.option("--now", default=None, help="Check time as RFC3339 (default: now)")
def verify(
    license_str: str, pib: str, public_key_path: Path | None, now: str | None
) -> None:
    """Verify a license string and print the verdict as JSON"""
    config = Config()
    try:
        pem = read_embedded_public_key_pem(public_key_path or config.PUBLIC_KEY_PATH)
        moment = parse_rfc3339(now) if now else None
        verdict = verify_license(license_str, pib, pem, moment)
    except (LicenseError, ValueError) as err:
        raise click.ClickException(str(err)) from err
    click.echo(verdict.model_dump_json())


if __name__ == "__main__":
    cli()
