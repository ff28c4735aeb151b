"""Clients for the external authorization policy engine."""

from .http_engine import HttpPolicyEngine

__all__ = ["HttpPolicyEngine"]
