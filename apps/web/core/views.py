"""
User API views - read-only access to the customer's saved addresses.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from platter_schemas import AddressListResponse, AddressSchema

from apps.web.core.decorators import api_login_required
from apps.web.core.models import Address
from apps.web.core.responses import json_response


def serialize_address(address: Address) -> AddressSchema:
    return AddressSchema(
        id=address.pk,
        label=address.label,
        address=address.address,
        city=address.city,
        pincode=address.pincode,
        is_default=address.is_default,
    )


@require_GET
@api_login_required
def address_list(request: HttpRequest) -> JsonResponse:
    """
    GET /api/users/addresses

    Returns the user's saved addresses, default first.
    """
    addresses = Address.objects.for_user(request).order_by("-is_default", "created_at")
    response = AddressListResponse(
        addresses=[serialize_address(a) for a in addresses],
    )
    return json_response(response.model_dump(mode="json"))
