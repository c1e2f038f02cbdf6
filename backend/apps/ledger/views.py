"""
Platform statistics view.
"""
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view
from rest_framework.response import Response
from apps.ledger.services.ledger_service import LedgerService


@extend_schema(tags=['Stats'])
@api_view(["GET"])
def platform_stats(request):
    """
    Completed deals, registered users and active orders.
    """
    return Response(LedgerService.platform_stats())
