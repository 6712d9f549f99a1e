"""Command line interface for sealbid."""
