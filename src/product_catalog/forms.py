from django import forms

from .models import Product


class ProductForm(forms.ModelForm):
    """
    Validates the writable fields of a Product body.

    `id` is not a form field: it is handled by the views, which decide
    whether a supplied id is allowed at all.
    """

    class Meta:
        model = Product
        fields = ["name", "price", "stock"]
