"""
ASGI entry point: HTTP goes to Django, WebSockets to the ledger event feed.
"""
import os
import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.settings')

# Apps must be loaded before the routing module imports consumers.
django.setup()

from django.core.asgi import get_asgi_application
from channels.routing import ProtocolTypeRouter, URLRouter
from channels.auth import AuthMiddlewareStack
import ledger_api.routing

application = ProtocolTypeRouter({
    "http": get_asgi_application(),
    "websocket": AuthMiddlewareStack(
        URLRouter(ledger_api.routing.websocket_urlpatterns)
    ),
})
