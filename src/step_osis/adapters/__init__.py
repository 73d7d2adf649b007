"""Bridges to external tools used once the OSIS document exists."""
