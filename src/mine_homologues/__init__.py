"""Federated homologue lookup across InterMine instances."""

__version__ = "0.1.0"
