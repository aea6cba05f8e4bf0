"""
FastAPI REST service for the Book Inventory collection.

This package provides:
- A gateway over the MongoDB books collection
- CRUD routes for listing, fetching, uploading, updating and deleting books
- Uniform JSON message responses for failures
"""
