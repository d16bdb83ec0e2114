"""Offline pipeline turning publisher XHTML writings into a reading manifest."""
