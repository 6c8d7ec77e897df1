# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin (também serve o login)
    path('admin/', admin.site.urls),

    # Board: endpoints JSON de ordenação e arraste
    path('board/', include('apps.board.urls')),
]
