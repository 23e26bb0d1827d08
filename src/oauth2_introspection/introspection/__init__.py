"""Wire exchange with the remote introspection endpoint."""

from oauth2_introspection.introspection.client import IntrospectionClient, IntrospectionSender
from oauth2_introspection.introspection.discovery import DiscoveryDocument, EndpointDiscovery

__all__ = [
    "DiscoveryDocument",
    "EndpointDiscovery",
    "IntrospectionClient",
    "IntrospectionSender",
]
