"""Command line interface (``ventylab``)."""
