"""
Routing component - road geometry from an external routing provider.
"""

from .osrm_client import OSRMClient, OverlayError, RoutingProviderError

__all__ = [
    'OSRMClient',
    'OverlayError',
    'RoutingProviderError'
]
