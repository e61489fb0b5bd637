# docmigrate/utils/__init__.py

from .naming import snake_case, camel_case, pascal_case, pluralize, singularize
