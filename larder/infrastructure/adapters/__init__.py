"""Outbound adapters: payment gateways and notification services."""
