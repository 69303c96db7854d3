"""Command line interface for playing and simulating Tonk."""
