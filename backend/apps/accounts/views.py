from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from apps.accounts.serializers import (
    RequisitesSerializer,
    ResolveUserSerializer,
    UserProfileSerializer,
    UserSerializer,
)
from apps.accounts.services.identity_service import IdentityService


# ============================
# Resolve
# ============================

@extend_schema(
    tags=['Users'],
    request=ResolveUserSerializer,
    responses={200: UserSerializer, 201: UserSerializer},
)
@api_view(["POST"])
def resolve_user(request):
    """
    Get or create the user for an external id.
    Returns 201 when the user was created, 200 otherwise.
    """
    serializer = ResolveUserSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user, created = IdentityService.resolve_or_create(
        serializer.validated_data["external_id"],
        serializer.validated_data["username"]
    )

    return Response(
        UserSerializer(user).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


# ============================
# Profile
# ============================

@extend_schema(tags=['Users'], responses={200: UserProfileSerializer, 404: OpenApiResponse(description='User not found')})
@api_view(["GET"])
def user_profile(request, external_id):
    """
    User data with completed deals and traded volume per currency.
    """
    user = IdentityService.get_by_external_id(external_id)
    return Response(UserProfileSerializer(user).data)


# ============================
# Requisites
# ============================

@extend_schema(tags=['Users'], request=RequisitesSerializer)
@api_view(["PUT"])
def update_requisites(request, external_id):
    """
    Update any subset of wallet, card and messaging requisites.
    """
    serializer = RequisitesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    IdentityService.update_requisites(external_id, **serializer.validated_data)
    return Response({"success": True})
