"""
URL Configuration for Catalog App - storefront browsing
"""

from django.urls import path

from . import views

app_name = "catalog"

urlpatterns = [
    path("products/", views.ProductListView.as_view(), name="product_list"),
    path("products/<str:product_id>/", views.ProductDetailView.as_view(), name="product_detail"),
    path("categories/", views.CategoryListView.as_view(), name="category_list"),
    path("hero/", views.HeroSectionListView.as_view(), name="hero_sections"),
]
