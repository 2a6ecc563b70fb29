from django.urls import path

from .views import (
    RegisterView,
    LoginView,
    MeView,
    MyPageView,
    MetaView,
    HealthView,
    MetricsView,
)

urlpatterns = [
    path("auth/register", RegisterView.as_view()),
    path("auth/login", LoginView.as_view()),
    path("auth/me", MeView.as_view()),
    path("users/mypage", MyPageView.as_view()),
    path("meta", MetaView.as_view()),
    # Observability
    path("health", HealthView.as_view()),
    path("metrics", MetricsView.as_view()),
]
