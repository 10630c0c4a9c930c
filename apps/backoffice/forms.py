"""
Back-office Forms
Admin input for products, categories, hero banners and order status.
"""

from typing import Any

from django import forms
from django.utils.translation import gettext_lazy as _

from apps.orders.schemas import ORDER_STATUSES


class ProductForm(forms.Form):
    name = forms.CharField(max_length=200, error_messages={'required': _('Product name is required')})
    description = forms.CharField(required=False)
    price = forms.DecimalField(min_value=0, max_digits=12, decimal_places=2)
    compare_price = forms.DecimalField(min_value=0, max_digits=12, decimal_places=2, required=False)
    category_id = forms.CharField(max_length=64, required=False)
    inventory_count = forms.IntegerField(min_value=0, initial=0)
    sku = forms.CharField(max_length=64, required=False)
    is_active = forms.NullBooleanField(required=False)

    def to_row(self) -> dict[str, Any]:
        """Cleaned values as a products row; blanks are stored as null"""
        data = self.cleaned_data
        return {
            'name': data['name'],
            'description': data['description'] or None,
            'price': data['price'],
            'compare_price': data['compare_price'],
            'category_id': data['category_id'] or None,
            'inventory_count': data['inventory_count'],
            'sku': data['sku'] or None,
            'is_active': data['is_active'] is not False,
        }


class CategoryForm(forms.Form):
    name = forms.CharField(max_length=100, error_messages={'required': _('Category name is required')})
    description = forms.CharField(required=False)


class HeroSectionForm(forms.Form):
    title = forms.CharField(max_length=200, error_messages={'required': _('Title is required')})
    subtitle = forms.CharField(max_length=200, required=False)
    description = forms.CharField(required=False)
    cta_text = forms.CharField(max_length=60, required=False)
    cta_link = forms.CharField(max_length=500, required=False)
    order_index = forms.IntegerField(min_value=0, required=False)
    is_active = forms.NullBooleanField(required=False)

    def to_row(self) -> dict[str, Any]:
        data = self.cleaned_data
        return {
            'title': data['title'],
            'subtitle': data['subtitle'] or None,
            'description': data['description'] or None,
            'cta_text': data['cta_text'] or None,
            'cta_link': data['cta_link'] or None,
            'order_index': data['order_index'] or 0,
            'is_active': data['is_active'] is not False,
        }


class OrderStatusForm(forms.Form):
    status = forms.ChoiceField(choices=[(status, status) for status in ORDER_STATUSES])
