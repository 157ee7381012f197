"""HTTP surface for the web UI."""
