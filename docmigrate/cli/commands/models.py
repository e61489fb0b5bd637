# docmigrate/cli/commands/models.py

import click

from ...core.errors import MigrationError


@click.command('models')
@click.pass_context
def models(ctx):
    """List reconciled models in processing order

    Examples:
        docmigrate models
    """
    cli_context = ctx.obj['cli_context']

    try:
        registry = cli_context.load_registry()
    except MigrationError as e:
        raise click.ClickException(f"Failed to load models: {e}")

    click.echo(f"{'#':>4} {'UID':<55} {'GLOBAL ID':<35} {'COLLECTION'}")
    click.echo("-" * 120)
    for position, model in enumerate(registry, start=1):
        click.echo(f"{position:>4} {model.uid:<55} {model.global_id:<35} {model.collection_name}")

    click.echo(f"\nTable Count: {len(registry)}")
    for model in registry.dropped_models:
        click.echo(f"   Dropped: {model.uid}")
