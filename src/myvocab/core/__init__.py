"""Shared contracts: the error taxonomy and capability protocols."""
