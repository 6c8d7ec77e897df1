# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket da aplicação board
websocket_urlpatterns = [
    # Eventos de arraste + avisos de mudança persistida do board
    re_path(r'ws/board/(?P<board_id>\d+)/$', consumers.BoardConsumer.as_asgi()),
]
