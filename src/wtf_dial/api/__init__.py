"""HTTP API for the WTF Dial application."""
