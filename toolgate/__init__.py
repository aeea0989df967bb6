"""toolgate: schema-validated tool registry."""

__version__ = "0.1.0"
