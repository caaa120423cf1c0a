"""QueryIQ: natural-language chat over PostgreSQL, MySQL and MongoDB databases."""

__version__ = "0.1.0"
