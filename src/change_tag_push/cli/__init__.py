"""Command line interface for change-tag-push."""
