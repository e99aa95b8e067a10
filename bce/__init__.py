"""bce (bash_complete_extension): grammar-driven shell tab completion."""

__version__ = "0.1.0"
