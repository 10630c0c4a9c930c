"""
Storefront User Forms
Sign-in, sign-up and profile input validation.
"""

from django import forms
from django.utils.translation import gettext_lazy as _

MIN_PASSWORD_LENGTH = 6
MIN_FULL_NAME_LENGTH = 2


class SignInForm(forms.Form):
    email = forms.EmailField(label=_("Email Address"))
    password = forms.CharField(label=_("Password"), strip=False)


class SignUpForm(forms.Form):
    """Customer registration; the full name is stored as auth user metadata"""

    email = forms.EmailField(label=_("Email Address"))
    password = forms.CharField(label=_("Password"), strip=False, min_length=MIN_PASSWORD_LENGTH)
    full_name = forms.CharField(label=_("Full Name"), max_length=150, min_length=MIN_FULL_NAME_LENGTH)


class ProfileForm(forms.Form):
    """Editable profile fields; blanks are allowed and stored as null"""

    full_name = forms.CharField(label=_("Full Name"), max_length=150, required=False)
    phone_number = forms.CharField(label=_("Phone Number"), max_length=20, required=False)
