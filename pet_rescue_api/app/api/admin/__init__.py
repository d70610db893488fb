"""
Management endpoints served under ``/admin``.

Administrators sign in with ``/admin/login``, which sets an HttpOnly
session cookie; every other admin route except the password flows
requires that cookie to belong to a user with the ``ADMIN`` role.
"""
