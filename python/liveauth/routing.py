"""
URL routing helpers for liveauth.

    # urls.py
    from liveauth.routing import urlpatterns as liveauth_urls
    urlpatterns = [path("", include(liveauth_urls))]

    # asgi.py
    from liveauth.routing import LiveAuthMiddlewareStack, websocket_urlpatterns

    application = ProtocolTypeRouter({
        "http": get_asgi_application(),
        "websocket": LiveAuthMiddlewareStack(URLRouter(websocket_urlpatterns)),
    })
"""

from typing import Any

from django.urls import path

from .views import AuthFormView
from .websocket import AuthFormConsumer


def LiveAuthMiddlewareStack(inner: Any) -> Any:
    """
    ASGI middleware stack for the form consumer.

    Wraps the inner application with session middleware only; the forms do
    not need ``request.user``.
    """
    from channels.sessions import SessionMiddlewareStack

    return SessionMiddlewareStack(inner)


urlpatterns = [
    path("auth/<str:form>/", AuthFormView.as_view(), name="liveauth-form"),
]

websocket_urlpatterns = [
    path("ws/auth/<str:form>/", AuthFormConsumer.as_asgi()),
]
