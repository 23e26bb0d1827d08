"""Command-line interface for introspection utilities.

Example:
    >>> # From terminal:
    >>> # oauth2-introspection --version
    >>> # oauth2-introspection cache-key <token> --prefix "introspection:"
    >>> # oauth2-introspection introspect <token> --authority https://auth.example.com \\
    >>> #     --client-id api1 --client-secret secret
"""

import asyncio
import json
from typing import Annotated, Optional

import typer

from oauth2_introspection import __version__
from oauth2_introspection.cache.keys import derive_cache_key
from oauth2_introspection.errors import ConfigurationError
from oauth2_introspection.introspection.client import IntrospectionClient
from oauth2_introspection.models.outcome import normalize_outcome
from oauth2_introspection.observability import configure_logging
from oauth2_introspection.options import ACCESS_TOKEN_TYPE_HINT, IntrospectionOptions

app = typer.Typer(help="OAuth2 token introspection utilities.")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """oauth2-introspection CLI entrypoint."""
    if verbose:
        configure_logging(log_level="DEBUG", force=True)


@app.command("cache-key")
def cache_key(
    token: Annotated[str, typer.Argument(help="Raw token to derive the cache key for.")],
    prefix: Annotated[
        str, typer.Option("--prefix", "-p", help="Cache key prefix.")
    ] = "",
) -> None:
    """Print the cache key a token is stored under."""
    typer.echo(derive_cache_key(prefix, token))


@app.command("introspect")
def introspect(
    token: Annotated[str, typer.Argument(help="Token to introspect.")],
    client_id: Annotated[
        str, typer.Option("--client-id", help="Client id for the introspection endpoint.")
    ],
    client_secret: Annotated[
        Optional[str],
        typer.Option("--client-secret", envvar="OAUTH2_INTROSPECTION_CLIENT_SECRET"),
    ] = None,
    endpoint: Annotated[
        Optional[str], typer.Option("--endpoint", "-e", help="Introspection endpoint URL.")
    ] = None,
    authority: Annotated[
        Optional[str],
        typer.Option("--authority", "-a", help="Authority to discover the endpoint from."),
    ] = None,
    token_type_hint: Annotated[
        str, typer.Option("--token-type-hint", help="token_type_hint to send.")
    ] = ACCESS_TOKEN_TYPE_HINT,
) -> None:
    """Introspect a token once and print the normalized outcome as JSON.

    Exits with status 1 unless the token is active.
    """
    options = IntrospectionOptions(
        authority=authority,
        introspection_endpoint=endpoint,
        client_id=client_id,
        client_secret=client_secret,
        token_type_hint=token_type_hint,
    )
    try:
        options.validate()
    except ConfigurationError as exc:
        raise typer.BadParameter(exc.message) from exc

    client = IntrospectionClient.from_options(options)
    outcome = normalize_outcome(
        asyncio.run(client.send(token, client_id, client_secret, token_type_hint))
    )
    typer.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
    if not outcome.is_active:
        raise typer.Exit(1)


def main() -> None:
    """Run the CLI."""
    app()


if __name__ == "__main__":
    main()
