"""
Identity uplift modeler.

Aggregates publisher domains into composite inputs, estimates identity,
CAPI and media-performance uplift, and projects 36 months of revenue under
competing commercial models.
"""

from .catalog import DomainCatalog, get_catalog
from .config import Settings, load_settings, settings
from .models import AggregatedInputs, AudienceProfile, DomainRecord, LeadData, QuizResult

__version__ = "1.0.0"

__all__ = [
    # catalog.py
    "DomainCatalog",
    "get_catalog",
    # config.py
    "Settings",
    "load_settings",
    "settings",
    # models.py
    "AggregatedInputs",
    "AudienceProfile",
    "DomainRecord",
    "LeadData",
    "QuizResult",
]
