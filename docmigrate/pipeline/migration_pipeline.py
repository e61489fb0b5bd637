# docmigrate/pipeline/migration_pipeline.py

from typing import Optional

from ..core.logging import MigrateLogger, log_with_context, INFO, ERROR
from ..core.errors import MigrationError
from ..database.dialects import Dialect, get_dialect
from ..database.target import TargetStore
from ..registry.id_map import IdTranslator
from ..registry.model_registry import ModelRegistry
from ..source.interfaces import SourceStore
from ..transform.links import LinkMaterializer
from ..transform.rows import RowMaterializer
from ..types import FixupConfig, MigrationSummary, ModelDefinition


class MigrationPipeline:
    """
    One-shot migration from the source document store into the target schema.

    Runs in two passes with a hard barrier between them:
    1. Rows: every document of every model becomes a row and gets its id
    2. Links: relations, components and attachments, resolved through the ids

    Nothing of the link pass starts until the row pass has finished for all
    models, so every reference can be resolved no matter the model order.
    """

    def __init__(
        self,
        source: SourceStore,
        target: TargetStore,
        fixups: Optional[FixupConfig] = None,
        dialect: Optional[Dialect] = None,
    ):
        """
        Args:
            source: Document store holding the schema registry and the documents
            target: Relational store with the schema already created
            fixups: Declarative corrections; defaults to none
            dialect: Target dialect hooks; derived from the target when omitted
        """
        self.source = source
        self.target = target
        self.fixups = fixups or FixupConfig()
        self.dialect = dialect
        self.translator = IdTranslator()
        self.registry: Optional[ModelRegistry] = None

        self.logger = MigrateLogger.get_logger('pipeline.migration_pipeline')

    def load_registry(self) -> ModelRegistry:
        if self.registry is None:
            self.registry = ModelRegistry.build(self.source.model_definitions(), self.fixups)
        return self.registry

    def run(self) -> MigrationSummary:
        summary = MigrationSummary()

        try:
            registry = self.load_registry()
            summary.dropped_models = [model.uid for model in registry.dropped_models]

            # Relations are classified before the target is touched
            links = LinkMaterializer(self.target, self.translator, registry)
            for model in registry:
                links.relations_for(model)

            dialect = self.dialect or get_dialect(self.target)
            dialect.drop_all_tables()
            dialect.before_migration()

            self.logger.info("Starting row pass")
            rows = RowMaterializer(self.target, self.translator, registry, self.fixups)
            for model in registry:
                self._migrate_rows(model, rows, summary)

            self.logger.info("Filling in relations")
            for model in registry:
                self._migrate_links(model, links, summary)

            dialect.after_migration()

            log_with_context(self.logger, INFO, "Migration completed",
                             models=len(summary.models),
                             rows=summary.total_rows,
                             links=summary.total_links,
                             dropped=len(summary.dropped_models))
            return summary

        except MigrationError as e:
            log_with_context(self.logger, ERROR, "Migration failed",
                             error=str(e),
                             exception_type=type(e).__name__,
                             stage=e.stage)
            raise

        finally:
            self.source.close()
            self.target.close()

    def _migrate_rows(self, model: ModelDefinition, rows: RowMaterializer, summary: MigrationSummary) -> None:
        collection = model.collection_name
        model_summary = summary.for_model(model.uid, collection)

        total = self.source.count(collection)
        log_with_context(self.logger, INFO, f"Parsing {model.uid} with {total} documents",
                         model_uid=model.uid,
                         collection=collection)

        for document in self.source.iterate(collection):
            model_summary.documents += 1
            rows.write(model, document)
            model_summary.rows_inserted += 1

        self.target.commit()
        log_with_context(self.logger, INFO, f"Inserted {model_summary.rows_inserted}/{total}",
                         model_uid=model.uid,
                         collection=collection)

    def _migrate_links(self, model: ModelDefinition, links: LinkMaterializer, summary: MigrationSummary) -> None:
        model_summary = summary.for_model(model.uid, model.collection_name)

        for document in self.source.iterate(model.collection_name):
            result = links.write(model, document)
            model_summary.links_written += result.links_written
            model_summary.fields_skipped += result.fields_skipped

        self.target.commit()
        log_with_context(self.logger, INFO, "Links written",
                         model_uid=model.uid,
                         collection=model.collection_name,
                         row_count=model_summary.links_written)
