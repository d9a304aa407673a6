"""Display utilities for usagestatus."""
