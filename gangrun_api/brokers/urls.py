# brokers/urls.py
"""
URL patterns for broker/volume pricing.

Public endpoints (no auth required):
- POST /api/brokers/calculate/ - Broker/volume price for one quantity
- POST /api/brokers/preview/ - Price matrix across quantities
- GET /api/brokers/tiers/ - Broker tiers and volume breakpoints
"""

from django.urls import path

from .views import BrokerCalculatePriceView, BrokerTiersView, PricePreviewView

app_name = "brokers"

urlpatterns = [
    path("calculate/", BrokerCalculatePriceView.as_view(), name="calculate-price"),
    path("preview/", PricePreviewView.as_view(), name="price-preview"),
    path("tiers/", BrokerTiersView.as_view(), name="tiers"),
]
