# settlement/api/urls.py

from django.urls import path

from settlement.api.views import EarningsSummaryView, LedgerEntryListView

urlpatterns = [
    path("ledger/", LedgerEntryListView.as_view(), name="settlement-ledger"),
    path("summary/", EarningsSummaryView.as_view(), name="settlement-summary"),
]
