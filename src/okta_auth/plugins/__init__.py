"""Concrete backends for the interactive login capability."""
