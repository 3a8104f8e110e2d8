"""papertrade CLI."""

import click

from papertrade.app import PaperTradeApp
from papertrade.constants import DEFAULT_CONFIG_PATH


@click.group()
def cli():
    """papertrade Command Line Interface."""
    pass


@cli.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.option("--host", help="Override server host")
@click.option("--port", type=int, help="Override server port")
@click.option("--data-dir", help="Override data directory")
def serve(config, host, port, data_dir):
    """Start the API server."""
    try:
        app = PaperTradeApp(config_path=config, host=host, port=port, data_dir=data_dir)
        app.run()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        raise SystemExit(1)


@cli.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.option("--data-dir", help="Override data directory")
@click.option("--reset", is_flag=True, help="Overwrite quotes and clear orders and trades")
def seed(config, data_dir, reset):
    """Write the configured seed quotes to the data directory."""
    app = PaperTradeApp(config_path=config, data_dir=data_dir)
    count = app.seed(reset=reset)
    if count:
        click.echo(f"Seeded {count} quotes into {app.config.data_dir}")
    else:
        click.echo("Quotes already present, nothing to do (use --reset to overwrite).")


@cli.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
def smoke_test(config):
    """Run a smoke test (initialize components and exit)."""
    try:
        app = PaperTradeApp(config_path=config)
        app.initialize()
        click.echo("Smoke test passed: Components initialized successfully.")
    except Exception as e:
        click.echo(f"Smoke test failed: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    cli()

# Alias for __main__.py
main = cli
