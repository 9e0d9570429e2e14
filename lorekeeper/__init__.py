"""
Lorekeeper
----------

Chronology core for a character and world wiki.

Subpackages:
    - core: exceptions, logging, validation helpers, paths and config
    - chronology: date model, comparator, sorting and the position engine
    - database: SQLAlchemy models, managers and the SQL event store
    - cli: click command line interface
"""

__version__ = "0.3.0"
