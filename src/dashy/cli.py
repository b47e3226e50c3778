"""CLI commands for dashy."""

from pathlib import Path

import click


def _load_config(path: Path | None):
    from dashy.config import Config

    try:
        return Config.load(path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@click.group(invoke_without_command=True)
@click.version_option(package_name="dashy")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of ~/.config/dashy/config.toml",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """Fast, lightweight terminal system monitor."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.option("--interval", type=float, default=None, help="Seconds between samples")
@click.pass_context
def run(ctx: click.Context, interval: float | None = None) -> None:
    """Launch the interactive dashboard."""
    from dashy import logging as dashy_logging
    from dashy.app import run as run_app

    config = _load_config(ctx.obj.get("config_path"))
    if interval is not None:
        config.sampling.interval = max(0.1, interval)
    dashy_logging.configure(config)
    run_app(config)


@main.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """Print listening TCP ports and their processes."""
    from dashy.ports import select_port_source
    from dashy.process import process_table

    config = _load_config(ctx.obj.get("config_path"))
    source = select_port_source(timeout=config.sampling.command_timeout)
    entries = source.list_ports(process_table())

    if not entries:
        click.echo("No listening ports found.")
        return

    click.echo(f"{'PORT':>6}  {'PID':>7}  PROCESS")
    for entry in entries:
        click.echo(f"{entry.port:>6}  {entry.pid:>7}  {entry.process_name}")


@main.command("config")
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the config file",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_cmd(path: Path | None, force: bool) -> None:
    """Write the default configuration file."""
    from dashy.config import Config

    cfg = Config()
    target = path or cfg.config_path
    if target.exists() and not force:
        raise click.ClickException(f"{target} already exists (use --force to overwrite)")
    cfg.save(target)
    click.echo(f"Created default config at {target}")
