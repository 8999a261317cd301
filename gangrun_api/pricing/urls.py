# pricing/urls.py
"""
URL patterns for the documentation pricing engine.

- POST /api/pricing/calculate/ - Price a product configuration
"""

from django.urls import path

from .views import CalculatePriceView

app_name = "pricing"

urlpatterns = [
    path("calculate/", CalculatePriceView.as_view(), name="calculate-price"),
]
