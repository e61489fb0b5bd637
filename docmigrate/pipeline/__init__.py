# docmigrate/pipeline/__init__.py

from .migration_pipeline import MigrationPipeline
