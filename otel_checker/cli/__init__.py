"""Command line interface for otel-checker."""
