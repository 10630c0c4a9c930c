from django import forms

from .schemas import clamp_rating


class ReviewForm(forms.Form):
    """Out-of-range ratings are clamped rather than rejected"""

    order_id = forms.CharField(max_length=64)
    rating = forms.IntegerField()
    comment = forms.CharField(max_length=2000, required=False)

    def clean_rating(self) -> int:
        return clamp_rating(self.cleaned_data['rating'])
