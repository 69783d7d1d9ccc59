"""Configuration, chart rendering and the batch entry point."""
