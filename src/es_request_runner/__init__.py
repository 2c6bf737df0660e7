"""Find, run and format Elasticsearch requests written in plain text documents."""

__version__ = "0.1.0"
