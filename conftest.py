"""
Pytest configuration.
Uses in-memory SQLite database for fast, isolated tests.
"""
import os

# Set testing environment before importing app
os.environ["TESTING"] = "True"
os.environ["DEBUG"] = "False"
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("QUERY_CACHE_ENABLED", "False")
