"""
URL Configuration for Users App - storefront session and profile
"""

from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    path("auth/sign-in/", views.SignInView.as_view(), name="sign_in"),
    path("auth/sign-up/", views.SignUpView.as_view(), name="sign_up"),
    path("auth/sign-out/", views.SignOutView.as_view(), name="sign_out"),
    path("auth/me/", views.MeView.as_view(), name="me"),
    path("profile/", views.ProfileView.as_view(), name="profile"),
]
