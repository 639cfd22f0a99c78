"""CLI for fsobjectstore."""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape

from .config import StoreConfig, load_store_config
from .constants import ENV_BUCKET, ENV_DATA_DIR, ENV_DEBUG, ENV_LOCKING, ENV_SHARD_LENGTH
from .context import OperationContext
from .errors import ConfigError, ObjectStoreError
from .hashing import compute_digest, compute_file_digest
from .store import FilesystemObjectStore


app = typer.Typer(help="""\
Content-addressed object store on the local filesystem. Objects are named
by the SHA-256 digest of their bytes and stored once per digest.""")

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> NoReturn:
    """Print an error line and exit with status 1."""
    err_console.print(f"[red]✗[/red] {escape(message)}")
    raise typer.Exit(1)


def _read_source(source: str) -> bytes:
    """Read bytes from a file path, or stdin when source is '-'."""
    if source == "-":
        return typer.get_binary_stream("stdin").read()
    path = Path(source)
    if not path.is_file():
        _fail(f"File not found: {source}")
    return path.read_bytes()


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_store(ctx: typer.Context) -> FilesystemObjectStore:
    """Build the store from global options, config file and environment.

    Options typed on the command line win over the config file, which wins
    over FSSTORE_* variables.

    Raises:
        typer.Exit: If the configuration is invalid or the bucket directory
            cannot be created
    """
    opts = dict(ctx.obj or {})
    config_file = opts.pop("config_file", None)
    try:
        if config_file:
            config = load_store_config(config_file, **opts)
        else:
            config = StoreConfig.from_env(**opts)
    except ConfigError as e:
        _fail(str(e))
    except (ValueError, yaml.YAMLError) as e:
        _fail(f"Invalid configuration: {e}")

    _configure_logging(config.debug)
    try:
        return FilesystemObjectStore(config)
    except OSError as e:
        _fail(f"Cannot create store directory: {e}")


def _context(timeout: Optional[float]) -> OperationContext:
    if timeout is None:
        return OperationContext.background()
    return OperationContext(timeout=timeout)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[str] = typer.Option(
        None, "--data-dir", envvar=ENV_DATA_DIR, help="Base directory of the store (default: /data)"
    ),
    bucket: Optional[str] = typer.Option(
        None, "--bucket", envvar=ENV_BUCKET, help="Bucket name (default: store)"
    ),
    shard_length: Optional[int] = typer.Option(
        None, "--shard-length", envvar=ENV_SHARD_LENGTH, help="CID characters used as shard directory"
    ),
    debug: Optional[bool] = typer.Option(
        None, "--debug/--no-debug", envvar=ENV_DEBUG, help="Log store operations"
    ),
    locking: Optional[bool] = typer.Option(
        None, "--locking/--no-locking", envvar=ENV_LOCKING, help="Lock objects while writing"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML file with store settings"
    ),
):
    """Global store options."""
    # FSSTORE_* values are applied by the config layer, below the config file
    options = {
        "data_dir": data_dir,
        "bucket": bucket,
        "shard_length": shard_length,
        "debug": debug,
        "locking": locking,
    }
    ctx.obj = {
        name: value for name, value in options.items()
        if ctx.get_parameter_source(name) is not ParameterSource.ENVIRONMENT
    }
    ctx.obj["config_file"] = config_file


@app.command()
def put(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File to store, or '-' for stdin"),
):
    """Store content and print its CID.

    Examples:
        fsstore put model.bin
        echo hello | fsstore put -
    """
    data = _read_source(source)
    store = _open_store(ctx)
    try:
        cid = store.create_object(data)
    except ObjectStoreError as e:
        _fail(str(e))
    typer.echo(cid)


@app.command()
def get(
    ctx: typer.Context,
    cid: str = typer.Argument(..., help="Content identifier"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Give up after this many seconds"),
):
    """Read an object by CID."""
    store = _open_store(ctx)
    try:
        data = store.read_object(cid, ctx=_context(timeout))
    except ObjectStoreError as e:
        _fail(str(e))

    if output is None:
        stream = typer.get_binary_stream("stdout")
        stream.write(data)
        stream.flush()
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        err_console.print(f"[green]✓[/green] Wrote {len(data)} bytes to {output}")


@app.command()
def has(
    ctx: typer.Context,
    cid: str = typer.Argument(..., help="Content identifier"),
):
    """Check whether an object exists (exit status 0 if present, 1 if absent)."""
    store = _open_store(ctx)
    if store.has_object(cid):
        console.print("present")
        return
    console.print("absent")
    raise typer.Exit(1)


@app.command("ls")
def list_objects(
    ctx: typer.Context,
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Stop listing after this many seconds"),
):
    """List the CIDs of all stored objects, one per line."""
    store = _open_store(ctx)
    with store.list_objects(_context(timeout)) as listing:
        for cid in listing:
            typer.echo(cid)
        try:
            listing.raise_for_error()
        except ObjectStoreError as e:
            _fail(str(e))


@app.command()
def digest(
    source: str = typer.Argument(..., help="File to digest, or '-' for stdin"),
):
    """Print the CID content would be stored under, without storing it."""
    try:
        if source == "-":
            cid = compute_digest(typer.get_binary_stream("stdin").read())
        else:
            cid = compute_file_digest(Path(source))
    except ObjectStoreError as e:
        _fail(str(e))
    typer.echo(cid)


@app.command()
def link(
    ctx: typer.Context,
    cid: str = typer.Argument(..., help="Content identifier"),
):
    """Print the filesystem path an object is (or would be) stored at."""
    store = _open_store(ctx)
    try:
        path = store.object_link(cid)
    except ValueError as e:
        _fail(str(e))
    typer.echo(str(path))
    if not store.has_object(cid):
        err_console.print("[dim]not stored[/dim]")


if __name__ == "__main__":
    app()
