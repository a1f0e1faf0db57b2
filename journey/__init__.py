"""
Backend package for the Love Journey API.

This package provides a FastAPI application that stores travel destinations
in MongoDB, with an in-memory store so the service can run locally and in
tests without a database.
"""
