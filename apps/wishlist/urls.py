"""
URL Configuration for Wishlist App
"""

from django.urls import path

from . import views

app_name = "wishlist"

urlpatterns = [
    path("items/", views.WishlistItemsView.as_view(), name="items"),
]
