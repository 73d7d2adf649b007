"""Bundled XSLT stylesheets mapping each source dialect to OSIS."""
