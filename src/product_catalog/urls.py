from django.urls import path

from . import views

app_name = "product_catalog"

urlpatterns = [
    path("products", views.product_list, name="product-list"),
    path("products/<int:product_id>", views.product_detail, name="product-detail"),
    path(
        "products/decrement-stock/<int:product_id>/<int:quantity>",
        views.decrement_stock,
        name="decrement-stock",
    ),
    path(
        "products/add-to-stock/<int:product_id>/<int:quantity>",
        views.add_to_stock,
        name="add-to-stock",
    ),
]
