from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # ws://your-site.com/ws/ledger/
    re_path(r'ws/ledger/$', consumers.LedgerEventsConsumer.as_asgi()),
]
