"""Mirror wiki pages to disk as plain text, Markdown or HTML."""

__version__ = "0.1.0"
