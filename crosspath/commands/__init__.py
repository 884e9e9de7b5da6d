"""Command implementations behind the ``crosspath`` CLI."""
