"""Command line interface for walletchat."""
