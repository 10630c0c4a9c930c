from django import forms
from django.utils.translation import gettext_lazy as _

MAX_QUANTITY_PER_LINE = 100


class AddToCartForm(forms.Form):
    product_id = forms.CharField(max_length=64)
    quantity = forms.IntegerField(min_value=1, max_value=MAX_QUANTITY_PER_LINE, initial=1, required=False)

    def clean_quantity(self) -> int:
        return self.cleaned_data.get('quantity') or 1


class UpdateQuantityForm(forms.Form):
    """Zero or negative quantities remove the line"""

    quantity = forms.IntegerField(
        max_value=MAX_QUANTITY_PER_LINE,
        error_messages={'required': _('Quantity is required')},
    )
