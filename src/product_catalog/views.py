from __future__ import annotations

import json
from functools import wraps
from typing import Any, Callable

from django.db import connection
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.urls import reverse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .exceptions import (
    InsufficientStock,
    InvalidProductRequest,
    ProductCatalogError,
    ProductNotFound,
)
from .forms import ProductForm
from .models import Product
from .services import get_service


def _error(exc: ProductCatalogError) -> JsonResponse:
    """
    Small helper to keep error bodies consistent across endpoints.
    """
    payload: dict[str, Any] = {"detail": str(exc), "code": exc.code}
    errors = getattr(exc, "errors", None)
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=exc.status)


def catalog_errors(view: Callable[..., HttpResponse]) -> Callable[..., HttpResponse]:
    """
    Translate ProductCatalogError raised by a view into its HTTP status.
    """
    @wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except ProductCatalogError as exc:
            return _error(exc)

    return wrapper


def _read_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        raise InvalidProductRequest("Product data is required.")

    try:
        payload = json.loads(request.body)
    except ValueError as e:
        raise InvalidProductRequest("Request body is not valid JSON.") from e

    if not isinstance(payload, dict):
        raise InvalidProductRequest("Product data is required.")
    return payload


def _body_id(payload: dict[str, Any]) -> int:
    """The `id` of a body; absent or null counts as 0."""
    raw = payload.get("id")
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise InvalidProductRequest("'id' must be a non-negative integer.")

    _, high = connection.ops.integer_field_range(Product._meta.pk.get_internal_type())
    if raw > high:
        raise InvalidProductRequest(f"'id' must not exceed {high}.")
    return raw


def _validated_form(payload: dict[str, Any]) -> ProductForm:
    form = ProductForm(data=payload)
    if not form.is_valid():
        raise InvalidProductRequest(
            "Invalid product data.", errors=form.errors.get_json_data()
        )
    return form


@csrf_exempt  # JSON API, no browser sessions
@require_http_methods(["GET", "POST"])
@catalog_errors
def product_list(request: HttpRequest) -> HttpResponse:
    """
    GET lists every product; POST creates one.

    A POST body without an id (or with id 0) receives an allocated id.
    """
    service = get_service()

    if request.method == "GET":
        return JsonResponse([p.to_dict() for p in service.get_all()], safe=False)

    payload = _read_body(request)
    product_id = _body_id(payload)
    product = _validated_form(payload).save(commit=False)
    product.pk = product_id

    created = service.add(product)

    response = JsonResponse(created.to_dict(), status=201)
    response["Location"] = request.build_absolute_uri(
        reverse("product_catalog:product-detail", args=[created.pk])
    )
    return response


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@catalog_errors
def product_detail(request: HttpRequest, product_id: int) -> HttpResponse:
    service = get_service()

    if request.method == "GET":
        product = service.get_by_id(product_id)
        if product is None:
            raise ProductNotFound(f"Product with ID {product_id} not found.")
        return JsonResponse(product.to_dict())

    if request.method == "DELETE":
        if not service.delete(product_id):
            raise ProductNotFound(f"Product with ID {product_id} not found.")
        return HttpResponse(status=200)

    payload = _read_body(request)
    body_id = _body_id(payload)
    if body_id != 0 and body_id != product_id:
        raise InvalidProductRequest("Updating 'Id' is not allowed.")

    form = _validated_form(payload)
    updated = service.update(product_id, form.cleaned_data)
    if updated is None:
        raise ProductNotFound(f"Product with ID {product_id} not found.")
    return JsonResponse(updated.to_dict())


@csrf_exempt
@require_http_methods(["PUT"])
@catalog_errors
def decrement_stock(request: HttpRequest, product_id: int, quantity: int) -> HttpResponse:
    if not get_service().decrement_stock(product_id, quantity):
        raise InsufficientStock("Insufficient stock")
    return HttpResponse(status=200)


@csrf_exempt
@require_http_methods(["PUT"])
@catalog_errors
def add_to_stock(request: HttpRequest, product_id: int, quantity: int) -> HttpResponse:
    if not get_service().add_to_stock(product_id, quantity):
        raise InvalidProductRequest(f"Cannot add to stock of product {product_id}.")
    return HttpResponse(status=200)
