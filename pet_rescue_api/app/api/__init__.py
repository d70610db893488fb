"""
HTTP routes.

``v1`` holds the bearer-token JSON API, ``admin`` the cookie
authenticated management endpoints.  ``deps`` contains the
dependencies and error mapping both of them share.
"""
