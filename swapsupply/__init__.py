"""Uniswap v3 swap -> lending pool supply pipeline."""

__version__ = "0.1.0"
