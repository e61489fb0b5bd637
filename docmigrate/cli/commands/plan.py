# docmigrate/cli/commands/plan.py

import click

from ...core.errors import MigrationError
from ...transform.relations import resolve_relation, many_way_join, many_to_many_join
from ...types import RelationKind


@click.command('plan')
@click.option('--model', 'model_uid', help='Only show this model uid')
@click.pass_context
def plan(ctx, model_uid):
    """Show how each relation would be migrated, without writing anything

    Examples:
        # Whole registry
        docmigrate plan

        # One model
        docmigrate plan --model application::website.website
    """
    cli_context = ctx.obj['cli_context']

    try:
        registry = cli_context.load_registry()
        models = [registry.get(model_uid)] if model_uid else registry.models
        file_model = registry.fixups.file_model

        for model in models:
            click.echo(f"📋 {model.uid} -> {model.collection_name} ({model.global_id})")
            click.echo(f"   Scalars: {len(model.scalar_attributes())}")

            for name, attribute in model.attributes.items():
                if attribute.is_scalar:
                    continue

                relation = resolve_relation(registry, name, attribute, file_model)
                if relation is None:
                    click.echo(f"   {name:<30} skipped (targets a dropped model)")
                    continue

                detail = ''
                if relation.kind is RelationKind.MANY_WAY:
                    detail = f" -> {many_way_join(model, name, attribute).name}"
                elif relation.kind is RelationKind.MANY_TO_MANY:
                    join = many_to_many_join(attribute, relation.inverse)
                    side = 'dominant' if attribute.dominant else 'written by other side'
                    detail = f" -> {join.name} ({side})"
                click.echo(f"   {name:<30} {relation.kind.value}{detail}")

    except MigrationError as e:
        raise click.ClickException(f"Failed to plan migration: {e}")
