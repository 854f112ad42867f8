"""Pricing data sources for Path of Exile."""

from .poe_ninja import PoeNinjaFetcher

__all__ = ['PoeNinjaFetcher']
