"""Exporter for the Hitron CODA56 cable modem.

The modem exposes everything we care about as JSON under `/data/*.asp` (no login required) so
unlike the HTML scraping approach, each endpoint gets its own small decoder in parse.py.
Other Hitron CODA models seem to serve the same endpoints but the CODA56 is the only one I've
tested against.
"""
