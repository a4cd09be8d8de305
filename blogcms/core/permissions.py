"""Declarative role requirements per route, resolved once at import time."""

from blogcms.models.user import Role

ANY_AUTHENTICATED: frozenset[Role] = frozenset()
ADMIN_ONLY: frozenset[Role] = frozenset({Role.ADMIN})
STAFF: frozenset[Role] = frozenset({Role.ADMIN, Role.EDITOR})

# Route identifier -> roles allowed. An empty set means any authenticated user.
ROUTE_ROLES: dict[str, frozenset[Role]] = {
    "users.list": ADMIN_ONLY,
    "users.get": ADMIN_ONLY,
    "users.create": ADMIN_ONLY,
    "users.update": ADMIN_ONLY,
    "users.delete": ADMIN_ONLY,
    "users.me": ANY_AUTHENTICATED,
    "users.me.update": ANY_AUTHENTICATED,
    "users.me.password": ANY_AUTHENTICATED,
    "users.me.activity": ANY_AUTHENTICATED,
    "settings.update": ADMIN_ONLY,
    "upload.image": STAFF,
    "upload.cover": STAFF,
    "upload.avatar": STAFF,
    "posts.drafts": STAFF,
    "posts.create": STAFF,
    "posts.update": STAFF,
    "posts.duplicate": STAFF,
    "posts.delete": STAFF,
    "posts.bulk_status": STAFF,
    "posts.bulk_delete": STAFF,
    "posts.stats": STAFF,
    "posts.scheduled": STAFF,
    "categories.create": STAFF,
    "categories.update": STAFF,
    "categories.reorder": STAFF,
    "categories.delete": ADMIN_ONLY,
    "tags.create": STAFF,
    "tags.update": STAFF,
    "tags.merge": STAFF,
    "tags.cleanup": ADMIN_ONLY,
    "tags.delete": ADMIN_ONLY,
    "comments.admin_list": ADMIN_ONLY,
    "comments.approve": ADMIN_ONLY,
    "comments.delete": ADMIN_ONLY,
}


def roles_for(route_id: str) -> frozenset[Role]:
    """Allowed roles for a route. Unknown identifiers raise KeyError so typos fail at startup."""
    try:
        return ROUTE_ROLES[route_id]
    except KeyError:
        raise KeyError(f"No role requirement declared for route {route_id!r}") from None
