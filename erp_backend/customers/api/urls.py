# customers/api/urls.py

from django.urls import path

from customers.api.views import CustomerAccountStatementView

urlpatterns = [
    path(
        "<uuid:customer_id>/account/",
        CustomerAccountStatementView.as_view(),
        name="customer-account-statement",
    ),
]
