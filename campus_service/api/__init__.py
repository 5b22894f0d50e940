from .routes.feed import router as feed_router
from .routes.groups import router as groups_router
from .routes.graph import router as graph_router
from .routes.messages import router as messages_router
from .routes.users import router as users_router


__all__ = [
    # feed.py
    "feed_router",
    # groups.py
    "groups_router",
    # graph.py
    "graph_router",
    # messages.py
    "messages_router",
    # users.py
    "users_router",
]
