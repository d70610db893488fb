"""
Version 1 of the JSON API, served under ``/api``.
"""
