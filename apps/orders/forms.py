"""
Checkout Forms for the storefront
Shipping, contact, payment and delivery input validated before any store call.
"""

from typing import Any

from django import forms
from django.utils.translation import gettext_lazy as _

DEFAULT_COUNTRY = 'India'

PAYMENT_METHOD_CHOICES = [
    ('cash_on_delivery', _('Cash on Delivery')),
    ('card', _('Credit/Debit Card')),
    ('upi', _('UPI')),
]

DELIVERY_METHOD_CHOICES = [
    ('standard', _('Standard Delivery')),
    ('express', _('Express Delivery')),
    ('overnight', _('Overnight Delivery')),
]


def _min_length_field(min_length: int, message: str, **kwargs: Any) -> forms.CharField:
    return forms.CharField(
        min_length=min_length,
        error_messages={'required': message, 'min_length': message},
        **kwargs,
    )


class CheckoutForm(forms.Form):
    """Checkout snapshot fields; the country falls back to the store's default market"""

    email = forms.EmailField(error_messages={'invalid': _('Invalid email address')})
    phone = _min_length_field(10, _('Phone number must be at least 10 digits'), max_length=20)
    full_name = _min_length_field(2, _('Full name must be at least 2 characters'), max_length=150)
    address = _min_length_field(10, _('Address must be at least 10 characters'), max_length=500)
    city = _min_length_field(2, _('City is required'), max_length=100)
    state = _min_length_field(2, _('State is required'), max_length=100)
    zip_code = _min_length_field(5, _('ZIP code must be at least 5 digits'), max_length=12)
    country = forms.CharField(max_length=100, required=False)
    payment_method = forms.ChoiceField(choices=PAYMENT_METHOD_CHOICES)
    delivery_method = forms.ChoiceField(choices=DELIVERY_METHOD_CHOICES)
    notes = forms.CharField(max_length=1000, required=False)

    def clean_country(self) -> str:
        country = self.cleaned_data.get('country') or DEFAULT_COUNTRY
        if len(country) < 2:
            raise forms.ValidationError(_('Country is required'))
        return country


class BuyNowForm(forms.Form):
    """Optional single-product checkout; without ``product_id`` the cart is checked out"""

    product_id = forms.CharField(max_length=64, required=False)
    quantity = forms.IntegerField(
        min_value=1,
        required=False,
        error_messages={'min_value': _('Quantity must be at least 1'), 'invalid': _('Enter a whole number.')},
    )

    def clean_quantity(self) -> int:
        quantity = self.cleaned_data.get('quantity')
        return 1 if quantity is None else quantity
