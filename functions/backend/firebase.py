"""
Firebase Admin SDK initialization shared by Firestore, Auth and Storage.
"""

from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import credentials

from backend.config import Settings

logger = logging.getLogger(__name__)


def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """Returns the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket

    credential = None
    if settings.firebase_credentials_path:
        credential = credentials.Certificate(settings.firebase_credentials_path)

    logger.info(
        "Initializing Firebase app for project %s",
        settings.firebase_project_id or "<from credentials>",
    )
    return firebase_admin.initialize_app(credential, options or None)
