"""Terminal editor for loot/spawn ``types.xml`` documents."""

__version__ = "0.1.0"
