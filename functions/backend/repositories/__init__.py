"""
Data access for each Firestore collection.
"""
