"""
URL configuration for the storefront service
JSON endpoints only - persistence and auth are handled by the hosted store.
"""

from django.http import HttpRequest, JsonResponse
from django.urls import include, path


# Storefront status endpoint
def storefront_status(request: HttpRequest) -> JsonResponse:
    return JsonResponse({'status': 'healthy', 'service': 'storefront'})


urlpatterns = [
    # Session lifecycle and profile
    path('', include('apps.users.urls')),

    # Browsing
    path('catalog/', include('apps.catalog.urls')),

    # Cart, checkout and order history
    path('cart/', include('apps.cart.urls')),
    path('orders/', include('apps.orders.urls')),

    # Reviews and wishlist
    path('reviews/', include('apps.reviews.urls')),
    path('wishlist/', include('apps.wishlist.urls')),

    # Admin back-office
    path('backoffice/', include('apps.backoffice.urls')),

    # Health check
    path('status/', storefront_status, name='storefront_status'),
]
