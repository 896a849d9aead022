"""
Business logic for the Sponta API, built on the collection repositories.
"""
