# gangrun_api/urls.py

"""
Root URL configuration for the gangrun_api project.

API Structure:
- /api/pricing/calculate/   - Documentation engine: price a product configuration
- /api/brokers/calculate/   - Broker/volume price for a unit price and quantity
- /api/brokers/preview/     - Price matrix across quantities
- /api/brokers/tiers/       - Broker tiers and volume breakpoints
"""

from django.urls import include, path

urlpatterns = [
    path("api/pricing/", include("pricing.urls", namespace="pricing")),
    path("api/brokers/", include("brokers.urls", namespace="brokers")),
]
