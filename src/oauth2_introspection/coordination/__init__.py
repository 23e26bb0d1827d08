"""Request coalescing for concurrent introspections of the same token."""

from oauth2_introspection.coordination.single_flight import SingleFlight

__all__ = ["SingleFlight"]
