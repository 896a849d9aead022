"""
Backend package for the Sponta API.

This package provides the FastAPI application together with the document
store, photo storage and identity abstractions it runs on. The scheduled
and Firestore-triggered Cloud Functions in main.py reuse its repositories
and services.
"""
