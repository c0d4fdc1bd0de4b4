"""quicknotes: notes backend with interchangeable file and table stores."""

__version__ = "0.1.0"
