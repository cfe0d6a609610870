"""Models, query filters, update builders and lookups for a MongoDB-backed application store."""

__version__ = "0.1.0"