"""Fetch, verify and install the TP-Link Omada Software Controller."""

__version__ = "0.3.0"
