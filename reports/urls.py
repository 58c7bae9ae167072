# reports/urls.py

from django.urls import path
from .views import AvailabilityAnalysisView

urlpatterns = [
    path("availability-analysis", AvailabilityAnalysisView.as_view()),
]
