"""Shared models and enumerations."""
