import os
from typing import Optional

from google.cloud import firestore

from plan_directory.config import FIRESTORE_EMULATOR_HOST, logger


def _resolve_credentials_path(credentials_path: str) -> str:
    if os.path.isabs(credentials_path):
        return credentials_path

    app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    project_root = os.path.dirname(app_dir)

    # Check common locations (order matters - check most likely first)
    possible_paths = [
        os.path.join(project_root, credentials_path),
        os.path.join(project_root, os.path.basename(credentials_path)),
        credentials_path,  # Try as-is (current working directory)
    ]
    for path in possible_paths:
        if os.path.exists(path):
            logger.debug("Found Firestore credentials at: %s", path)
            return os.path.abspath(path)

    raise FileNotFoundError(
        f"Firestore credentials file not found. Tried: {', '.join(possible_paths)}. "
        f"Set FIRESTORE_CREDENTIALS_PATH to an absolute path or ensure the file exists."
    )


def create_firestore_client(
    project_id: str,
    database: str = "(default)",
    credentials_path: Optional[str] = None,
) -> firestore.Client:
    """
    Build a Firestore client for the plans store.

    With ``credentials_path`` a service-account key is used; otherwise the
    library falls back to Application Default Credentials, or to anonymous
    credentials when ``FIRESTORE_EMULATOR_HOST`` is set.
    """
    if not project_id:
        raise RuntimeError("FIRESTORE_PROJECT_ID must be configured")

    if credentials_path:
        resolved = _resolve_credentials_path(credentials_path)
        client = firestore.Client.from_service_account_json(
            resolved, project=project_id, database=database
        )
    else:
        client = firestore.Client(project=project_id, database=database)

    if FIRESTORE_EMULATOR_HOST:
        logger.info("Firestore client using emulator at %s (project %s)", FIRESTORE_EMULATOR_HOST, project_id)
    else:
        logger.info("Firestore client initialized for project %s, database %s", project_id, database)
    return client
