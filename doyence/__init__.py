"""Doyence Estimating desktop client.

Session lifecycle, profile-driven routing and the CustomTkinter host
shell for the Doyence Estimating SaaS backend.
"""

__version__ = "0.3.0"
