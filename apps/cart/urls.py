"""
URL Configuration for Cart App
"""

from django.urls import path

from . import views

app_name = "cart"

urlpatterns = [
    path("", views.CartView.as_view(), name="cart"),
    path("items/", views.CartItemsView.as_view(), name="items"),
    path("items/<str:product_id>/", views.CartItemDetailView.as_view(), name="item_detail"),
    path("clear/", views.CartClearView.as_view(), name="clear"),
]
