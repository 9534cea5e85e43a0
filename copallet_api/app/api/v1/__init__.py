"""
Version 1 of the CoPallet API.

All routes of this version are mounted under ``/api``.
"""
