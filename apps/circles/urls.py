# ==========================================
# apps/circles/urls.py
# ==========================================

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from apps.circles.views import CircleViewSet

app_name = 'circles'

router = DefaultRouter()
router.register(r'', CircleViewSet, basename='circle')

urlpatterns = [
    path('', include(router.urls)),
]
