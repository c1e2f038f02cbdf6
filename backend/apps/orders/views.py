"""
Order views and API endpoints.
Clients identify themselves by external id in the payload.
"""
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from rest_framework.views import APIView
from apps.accounts.services.identity_service import IdentityService
from apps.orders.serializers import (
    CreateOrderSerializer,
    JoinOrderSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    PublicOrderQuerySerializer,
    UpdateStatusSerializer,
)
from apps.orders.services.order_service import OrderService
from apps.orders.services.participant_registry import ParticipantRegistry
from apps.orders.services.state_machine import StateMachine
from common.throttling import JoinThrottle, OrderCreateThrottle, StatusUpdateThrottle


# ============================
# Create / Public Listing
# ============================

class OrderListCreateView(APIView):
    """
    GET: public listing of orders by status, newest first.
    POST: create an order for the given seller.
    """

    def get_throttles(self):
        # Listing is read-only; only creation is throttled
        if self.request.method == "POST":
            return [OrderCreateThrottle()]
        return []

    @extend_schema(
        tags=['Orders'],
        parameters=[
            OpenApiParameter('status', str, description='Order status (default: active)'),
            OpenApiParameter('limit', int, description='Max orders to return (default: 50, max: 200)'),
        ],
        responses=OrderSerializer(many=True),
    )
    def get(self, request):
        query = PublicOrderQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        orders = OrderService.list_public(
            status=query.validated_data['status'],
            limit=query.validated_data.get('limit')
        )
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(
        tags=['Orders'],
        request=CreateOrderSerializer,
        responses={201: OrderSerializer, 400: OpenApiResponse(description='Validation error')},
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        seller = IdentityService.get_by_external_id(data['seller_external_id'])
        order = OrderService.create_order(
            seller=seller,
            type=data['type'],
            payment_method=data['payment_method'],
            amount=data['amount'],
            currency=data['currency'],
            description=data['description'],
            seller_requisites=data['seller_requisites']
        )

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


# ============================
# Order Detail
# ============================

@extend_schema(
    tags=['Orders'],
    parameters=[
        OpenApiParameter('viewer', str, description='External id of the viewing user; adds their role to the response'),
    ],
    responses={200: OrderDetailSerializer, 404: OpenApiResponse(description='Order or viewer not found')},
)
@api_view(["GET"])
def order_detail(request, identifier):
    """
    Get an order by public code or internal id.
    With ?viewer=<external_id> the response carries that user's role
    (seller, buyer or none), which decides the actions the client offers.
    """
    order = OrderService.lookup(identifier)
    data = OrderDetailSerializer(order).data

    viewer = request.query_params.get('viewer')
    if viewer:
        user = IdentityService.get_by_external_id(viewer)
        data['role'] = str(ParticipantRegistry.role_of(order, user))

    return Response(data)


# ============================
# User Orders
# ============================

@extend_schema(tags=['Orders'], responses=OrderSerializer(many=True))
@api_view(["GET"])
def user_orders(request, external_id):
    """
    Orders where the user is seller or buyer, newest first.
    """
    user = IdentityService.get_by_external_id(external_id)
    orders = OrderService.list_for_user(user)
    return Response(OrderSerializer(orders, many=True).data)


# ============================
# Join
# ============================

@extend_schema(tags=['Orders'], request=JoinOrderSerializer)
@api_view(["POST"])
@throttle_classes([JoinThrottle])
def join_order(request, identifier):
    """
    Join an active order as its buyer.
    Joining again as the same buyer succeeds without changes.
    """
    serializer = JoinOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    buyer = IdentityService.get_by_external_id(serializer.validated_data['buyer_external_id'])
    order, joined = OrderService.join_order(identifier, buyer)

    message = "You joined the order" if joined else "You have already joined this order"
    return Response({
        "success": True,
        "message": message,
        "order": OrderSerializer(order).data,
    })


# ============================
# Status
# ============================

@extend_schema(tags=['Orders'], request=UpdateStatusSerializer)
@api_view(["PUT"])
@throttle_classes([StatusUpdateThrottle])
def update_status(request, identifier):
    """
    Move an order to a new status.
    Transitions: active -> paid -> transferred -> completed, active -> cancelled.
    """
    serializer = UpdateStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    StateMachine.validate_status(data['status'])

    user = IdentityService.get_by_external_id(data['user_external_id'])
    order, changed = OrderService.change_status(
        identifier,
        data['status'],
        user,
        reason=data.get('reason', '')
    )

    return Response({
        "success": True,
        "changed": changed,
        "order": OrderSerializer(order).data,
    })
