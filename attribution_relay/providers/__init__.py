"""
Delivery Providers

Outbound analytics adapters for the attribution relay.
"""

from .amplitude import AmplitudeProvider
from .base import DeliveryProvider

__all__ = ["DeliveryProvider", "AmplitudeProvider"]
