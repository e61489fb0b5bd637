# docmigrate/cli/commands/run.py

import click

from ...core.errors import MigrationError


@click.command('run')
@click.option('--yes', is_flag=True, help='Do not ask before emptying the target tables')
@click.pass_context
def run(ctx, yes):
    """Run the full migration

    Every table of the target schema is emptied first, then all documents are
    copied (row pass) and their relations linked (link pass).

    Examples:
        docmigrate --fixups config/extensions.yaml run --yes
    """
    cli_context = ctx.obj['cli_context']

    if not yes:
        click.confirm("All target tables will be emptied. Continue?", abort=True)

    try:
        pipeline = cli_context.create_pipeline()
        summary = pipeline.run()
    except MigrationError as e:
        raise click.ClickException(f"Migration failed [{e.stage}]: {e}")

    click.echo("✅ Migration completed")
    click.echo(f"{'MODEL':<55} {'DOCS':>8} {'ROWS':>8} {'LINKS':>8} {'SKIPPED':>8}")
    click.echo("-" * 91)
    for model_summary in summary.models.values():
        click.echo(f"{model_summary.uid:<55} {model_summary.documents:>8} {model_summary.rows_inserted:>8} "
                   f"{model_summary.links_written:>8} {model_summary.fields_skipped:>8}")
    click.echo("-" * 91)
    click.echo(f"   Rows: {summary.total_rows:,}")
    click.echo(f"   Links: {summary.total_links:,}")
    if summary.dropped_models:
        click.echo(f"   Dropped models: {', '.join(summary.dropped_models)}")
