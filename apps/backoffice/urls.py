"""
URL Configuration for the admin back-office
"""

from django.urls import path

from . import views

app_name = "backoffice"

urlpatterns = [
    path("dashboard/", views.DashboardView.as_view(), name="dashboard"),
    # Products
    path("products/", views.ProductListView.as_view(), name="products"),
    path("products/low-stock/", views.LowStockProductsView.as_view(), name="low_stock"),
    path("products/<str:product_id>/", views.ProductDetailView.as_view(), name="product_detail"),
    path("products/<str:product_id>/toggle/", views.ProductToggleView.as_view(), name="product_toggle"),
    # Categories
    path("categories/", views.CategoryListView.as_view(), name="categories"),
    path("categories/<str:category_id>/", views.CategoryDetailView.as_view(), name="category_detail"),
    # Hero sections
    path("hero/", views.HeroSectionListView.as_view(), name="hero_sections"),
    path("hero/<str:section_id>/", views.HeroSectionDetailView.as_view(), name="hero_detail"),
    path("hero/<str:section_id>/toggle/", views.HeroSectionToggleView.as_view(), name="hero_toggle"),
    # Orders
    path("orders/", views.OrderListView.as_view(), name="orders"),
    path("orders/<str:order_id>/status/", views.OrderStatusView.as_view(), name="order_status"),
    # Uploads
    path("uploads/", views.ImageUploadView.as_view(), name="upload_image"),
]
