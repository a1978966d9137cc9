"""
Storage for the captured lead - persists one contact record to JSON.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .config import settings
from .models import LeadData

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

REQUIRED_FIELDS = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "company": "Company is required",
}


def _store_path(path: Optional[Path] = None) -> Path:
    return Path(path) if path is not None else settings.storage.resolved_lead_store_path


def _load_storage(path: Path) -> Dict[str, Any]:
    """Load storage from disk."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Failed to load lead store %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def validate_lead(lead: LeadData) -> Dict[str, str]:
    """
    Validate contact fields.

    Args:
        lead: Lead to validate

    Returns:
        Field name -> error message; empty when the lead is valid
    """
    errors = {}
    for field_name, message in REQUIRED_FIELDS.items():
        if not getattr(lead, field_name, "").strip():
            errors[field_name] = message

    email = lead.email.strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "Please enter a valid email address"
    return errors


def save_lead(lead: LeadData, path: Optional[Path] = None) -> bool:
    """
    Save the lead under the fixed lead key, replacing any previous record.

    Args:
        lead: Validated lead data
        path: Store file (defaults to the configured lead store)

    Returns:
        True if written, False if the write failed
    """
    path = _store_path(path)
    storage = _load_storage(path)
    storage[settings.storage.lead_key] = lead.to_dict()
    storage["savedAt"] = datetime.now().isoformat()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(storage, f, indent=2)
    except OSError as e:
        logger.error("Failed to save lead to %s: %s", path, e)
        return False

    logger.info("Saved lead for %s", lead.company)
    return True


def load_lead(path: Optional[Path] = None) -> Optional[LeadData]:
    """
    Load the stored lead.

    Returns:
        LeadData or None if nothing is stored or the record is unreadable
    """
    data = _load_storage(_store_path(path)).get(settings.storage.lead_key)
    if not isinstance(data, dict):
        return None
    return LeadData.from_dict(data)


def clear_lead(path: Optional[Path] = None) -> bool:
    """
    Remove the stored lead.

    Returns:
        True if a lead was removed, False if none was stored
    """
    path = _store_path(path)
    storage = _load_storage(path)
    if settings.storage.lead_key not in storage:
        return False

    del storage[settings.storage.lead_key]
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(storage, f, indent=2)
    except OSError as e:
        logger.error("Failed to clear lead in %s: %s", path, e)
        return False
    return True
