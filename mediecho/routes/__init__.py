from mediecho.routes.auth import router as auth_router
from mediecho.routes.logs import router as logs_router
from mediecho.routes.briefs import router as briefs_router
from mediecho.routes.subscription import router as subscription_router
from mediecho.routes.webhooks import router as webhooks_router

__all__ = [
    'auth_router',
    'logs_router',
    'briefs_router',
    'subscription_router',
    'webhooks_router',
]
