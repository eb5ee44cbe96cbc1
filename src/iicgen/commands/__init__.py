"""Command implementations dispatched by :mod:`iicgen.cli`."""
