# orders/api/urls.py

from django.urls import path
from rest_framework.routers import SimpleRouter

from orders.api.views import OrderViewSet, QuoteView

router = SimpleRouter()
router.register("", OrderViewSet, basename="orders")

urlpatterns = [
    path("quote/", QuoteView.as_view(), name="order-quote"),
]

urlpatterns += router.urls
