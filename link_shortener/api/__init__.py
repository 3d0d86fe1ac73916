"""HTTP API for the link shortener."""
