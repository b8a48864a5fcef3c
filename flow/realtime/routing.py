from django.urls import path

from flow.realtime.consumers import BoardConsumer

websocket_urlpatterns = [
    path("ws/board/<str:stage>/", BoardConsumer.as_asgi()),
]
