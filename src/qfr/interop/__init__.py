"""Interoperability between ``qfr`` and external frameworks."""
