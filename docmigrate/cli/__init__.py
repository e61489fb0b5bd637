# docmigrate/cli/__init__.py
