"""Constants shared across the exporter."""
