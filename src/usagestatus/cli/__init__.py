"""Command-line interface for usagestatus."""
