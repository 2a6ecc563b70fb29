from django.urls import path

from .views import (
    MissionListView,
    MissionToggleView,
    CompletedMissionsView,
    RankingAllView,
    TotalRankingView,
    DepartmentRankingView,
    CategoryRankingView,
)

urlpatterns = [
    path("missions", MissionListView.as_view()),
    path("missions/completed", CompletedMissionsView.as_view()),
    path("missions/<str:mission_id>/toggle", MissionToggleView.as_view()),
    # Rankings
    path("ranking", TotalRankingView.as_view()),
    path("ranking/all", RankingAllView.as_view()),
    path("ranking/total", TotalRankingView.as_view()),
    path("ranking/department", DepartmentRankingView.as_view()),
    path("ranking/category/<str:category>", CategoryRankingView.as_view()),
]
