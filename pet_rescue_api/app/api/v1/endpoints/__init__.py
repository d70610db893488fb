"""
Endpoint modules of the JSON API.

Each module defines an APIRouter for one domain (auth, pets, foster,
users, stats).  The routers are aggregated in ``router.py`` at the
package level and then included in the main application.
"""
