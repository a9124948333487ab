"""Comment board API: submit, list and delete short text comments."""

__version__ = "1.0.0"
