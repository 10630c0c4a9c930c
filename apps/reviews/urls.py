"""
URL Configuration for Reviews App
"""

from django.urls import path

from . import views

app_name = "reviews"

urlpatterns = [
    path("products/<str:product_id>/", views.ProductReviewsView.as_view(), name="product_reviews"),
    path("products/<str:product_id>/eligibility/", views.ReviewEligibilityView.as_view(), name="eligibility"),
]
