# payouts/api/urls.py

from django.urls import path
from rest_framework.routers import SimpleRouter

from payouts.api.views import GenerateBatchView, PayoutRecordViewSet, ProcessBulkView

router = SimpleRouter()
router.register("", PayoutRecordViewSet, basename="payouts")

urlpatterns = [
    path("generate/", GenerateBatchView.as_view(), name="payouts-generate"),
    path("process-bulk/", ProcessBulkView.as_view(), name="payouts-process-bulk"),
]

urlpatterns += router.urls
