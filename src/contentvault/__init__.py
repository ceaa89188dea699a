"""contentvault - a searchable personal collection of clipboard captures."""

__version__ = "0.1.0"
