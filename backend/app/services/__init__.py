from app.services.credential_store import CredentialStore, DETAILED_REQUIRED_FIELDS, PROFILE_FIELDS
from app.services.uploads import (
    remove_upload,
    save_bytes,
    store_upload,
    upload_root,
    validate_upload,
)
from app.services.content import (
    get_legal_page,
    get_or_create_stats,
    get_singleton,
    save_legal_page,
    save_singleton,
)

__all__ = [
    "CredentialStore",
    "DETAILED_REQUIRED_FIELDS",
    "PROFILE_FIELDS",
    "remove_upload",
    "save_bytes",
    "store_upload",
    "upload_root",
    "validate_upload",
    "get_legal_page",
    "get_or_create_stats",
    "get_singleton",
    "save_legal_page",
    "save_singleton",
]
