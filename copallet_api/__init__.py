"""
Top‑level package for the CoPallet API.

This file makes ``copallet_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``copallet_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
