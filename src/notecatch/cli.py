from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import quote_plus

import click
import httpx
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from notecatch.config import CatchConfig, ConfigChange, ConfigStore, parse_port
from notecatch.defaults import LISTEN_HOST, MAX_SEGMENT_LENGTH
from notecatch.inbox import is_error_message
from notecatch.logging import configure_logging
from notecatch.notify import EchoNotifier, LogNotifier
from notecatch.service import CatchService
from notecatch.settings import Settings
from notecatch.storage import VaultStorage

console = Console()


def _settings(ctx: click.Context) -> Settings:
    return ctx.ensure_object(dict)["settings"]


def _client_port(ctx: click.Context, port: str | None) -> int:
    if port is not None:
        return parse_port(port)
    return ConfigStore(_settings(ctx).config_file).load().listen_port


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--vault",
    "vault_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Vault root directory (default: $NOTECATCH_VAULT_ROOT or the user data dir).",
)
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Catch config file (default: user config dir).",
)
@click.pass_context
def cli(ctx: click.Context, vault_root: Path | None, config_file: Path | None) -> None:
    """notecatch command line interface."""
    overrides: dict[str, Path] = {}
    if vault_root is not None:
        overrides["vault_root"] = vault_root
    if config_file is not None:
        overrides["config_file"] = config_file
    settings = Settings(**overrides)
    configure_logging(settings)
    ctx.ensure_object(dict)["settings"] = settings


@cli.command("serve")
@click.option("--port", default=None, help="Listen on this port instead of the configured one.")
@click.pass_context
def serve(ctx: click.Context, port: str | None) -> None:
    """Run the capture listener until interrupted.

    The web server is enabled for this run even if the stored config has it off.
    """
    settings = _settings(ctx)
    service = CatchService.from_settings(settings, EchoNotifier())

    async def _run() -> None:
        stored = ConfigStore(settings.config_file).load()
        update: dict[str, object] = {"webserver_enabled": True}
        if port is not None:
            update["port"] = port
        await service.start(stored.model_copy(update=update))
        status = service.status_line()
        if status is None:
            raise click.ClickException(f"Could not listen on port {service.config.listen_port}")
        click.echo(f"{status} {service.listener.url}")
        try:
            await service.listener.wait_stopped()
        finally:
            await service.shutdown()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("stopped")


@cli.command("catch")
@click.argument("words", nargs=-1, required=True)
@click.pass_context
def catch(ctx: click.Context, words: tuple[str, ...]) -> None:
    """Catch WORDS as a new note in the inbox folder."""
    service = CatchService.from_settings(_settings(ctx), LogNotifier())
    service.load()
    message = asyncio.run(service.catch(" ".join(words)))
    click.echo(message)
    if is_error_message(message):
        ctx.exit(1)


@cli.command("send")
@click.argument("words", nargs=-1, required=True)
@click.option("--port", default=None, help="Listener port (default: configured port).")
@click.pass_context
def send(ctx: click.Context, words: tuple[str, ...], port: str | None) -> None:
    """Post WORDS to a running listener, as a hotkey client would."""
    segment = quote_plus(" ".join(words), safe="")
    if len(segment) > MAX_SEGMENT_LENGTH:
        raise click.BadParameter(
            f"encoded text is {len(segment)} characters, the listener accepts at most {MAX_SEGMENT_LENGTH}",
            param_hint="WORDS",
        )
    url = f"http://{LISTEN_HOST}:{_client_port(ctx, port)}/{segment}"
    try:
        response = httpx.post(url, timeout=5)
    except httpx.HTTPError as e:
        raise click.ClickException(f"Listener not reachable at {url}: {e}") from e
    if response.status_code != 200:
        raise click.ClickException(f"Listener answered {response.status_code}: {response.text}")
    click.echo(response.text)


@cli.command("ping")
@click.option("--port", default=None, help="Listener port (default: configured port).")
@click.pass_context
def ping(ctx: click.Context, port: str | None) -> None:
    """Check that a listener is answering."""
    url = f"http://{LISTEN_HOST}:{_client_port(ctx, port)}/"
    try:
        response = httpx.get(url, timeout=2)
    except httpx.HTTPError as e:
        raise click.ClickException(f"Listener not reachable at {url}: {e}") from e
    click.echo(response.text)


@cli.command("folders")
@click.pass_context
def folders(ctx: click.Context) -> None:
    """List the folders an inbox can be placed in."""
    storage = VaultStorage(_settings(ctx).vault_root)
    table = Table(title=escape(f"Folders in {storage.root}"))
    table.add_column("Inbox folder", style="cyan")
    table.add_column("Name")
    for key, label in storage.root_folders().items():
        table.add_row(escape(key), escape(label))
    console.print(table)


@cli.group("config")
def config_group() -> None:
    """Show or change the catch options."""


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the current options."""
    settings = _settings(ctx)
    config = ConfigStore(settings.config_file).load()
    table = Table(title=escape(str(settings.config_file)))
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for key, value in config.to_json_dict().items():
        table.add_row(key, escape(repr(value)))
    table.add_row("(listen port)", str(config.listen_port))
    console.print(table)


@config_group.command("set")
@click.option("--port", default=None)
@click.option("--inbox-folder", default=None)
@click.option("--webserver/--no-webserver", "webserver_enabled", default=None)
@click.option("--template", default=None)
@click.pass_context
def config_set(
    ctx: click.Context,
    port: str | None,
    inbox_folder: str | None,
    webserver_enabled: bool | None,
    template: str | None,
) -> None:
    """Change one or more options."""
    changes = {
        key: value
        for key, value in {
            "port": port,
            "inbox_folder": inbox_folder,
            "webserver_enabled": webserver_enabled,
            "template": template,
        }.items()
        if value is not None
    }
    if not changes:
        raise click.UsageError("Nothing to set; pass at least one option.")

    store = ConfigStore(_settings(ctx).config_file)
    before = store.load()
    after = CatchConfig.model_validate({**before.model_dump(), **changes})
    store.save(after)
    change = ConfigChange.between(before, after)
    if change.changed_fields:
        click.echo(f"updated: {', '.join(sorted(change.changed_fields))}")
    else:
        click.echo("no changes")


def main() -> None:
    cli.main()


if __name__ == "__main__":
    main()
