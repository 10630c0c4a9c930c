from django import forms


class WishlistItemForm(forms.Form):
    product_id = forms.CharField(max_length=64)
