# docmigrate/cli/__main__.py

"""
docmigrate CLI

Usage: python -m docmigrate.cli [--verbose] [--fixups PATH] command

Commands:
    run      migrate every model (empties the target first)
    plan     show processing order and relation classification, no writes
    models   list the reconciled models in processing order
"""

import atexit
from pathlib import Path

import click

from docmigrate.cli.context import CLIContext
from docmigrate.core.logging import MigrateLogger


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--fixups', type=click.Path(exists=True, dir_okay=False),
              envvar='DOCMIGRATE_FIXUPS', help='YAML file of fixup lists')
@click.option('--log-dir', type=click.Path(file_okay=False), envvar='DOCMIGRATE_LOG_DIR',
              help='Directory for migration.log and migration_errors.log')
@click.pass_context
def cli(ctx, verbose, fixups, log_dir):
    """Migrate a Strapi v3 MongoDB database into its SQL schema.

    Connection settings come from DOCMIGRATE_* environment variables
    (a .env file in the working directory is read as well).
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    MigrateLogger.configure(
        log_dir=Path(log_dir) if log_dir else None,
        log_level="DEBUG" if verbose else "INFO",
        console_enabled=True,
        file_enabled=log_dir is not None,
        structured_format=verbose,
    )

    cli_context = CLIContext(fixups_path=fixups)
    ctx.obj['cli_context'] = cli_context
    atexit.register(cli_context.shutdown)


from docmigrate.cli.commands.run import run
from docmigrate.cli.commands.plan import plan
from docmigrate.cli.commands.models import models

cli.add_command(run)
cli.add_command(plan)
cli.add_command(models)


if __name__ == '__main__':
    cli()
