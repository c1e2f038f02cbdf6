"""
Custom throttle classes for marketplace write endpoints and polling.
Clients are anonymous (identified by external id), so limits are per IP.
"""
from rest_framework.throttling import AnonRateThrottle


class OrderCreateThrottle(AnonRateThrottle):
    """
    Throttle for order creation.
    Limits clients to 30 new orders per hour to prevent code-space flooding.
    """
    rate = '30/hour'
    scope = 'order_create'


class JoinThrottle(AnonRateThrottle):
    """
    Throttle for joining orders as a buyer.
    """
    rate = '60/hour'
    scope = 'order_join'


class StatusUpdateThrottle(AnonRateThrottle):
    """
    Throttle for order status transitions.
    """
    rate = '120/hour'
    scope = 'order_status'


class PollingThrottle(AnonRateThrottle):
    """
    Throttle for notification polling.
    The web client polls every 3 seconds, so this allows one poll per
    second with some headroom for several open tabs.
    """
    rate = '3600/hour'
    scope = 'polling'
