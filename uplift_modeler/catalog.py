"""
Domain catalog loader for publisher properties.

Parses the domain catalog YAML into immutable domain records, category labels
and selection presets. The catalog is reference data: it is loaded once and
never mutated at runtime.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import DEFAULT_DOMAINS_PATH, read_yaml
from .models import DomainRecord

logger = logging.getLogger(__name__)


class DomainCatalog:
    """Loads and indexes the static domain catalog."""

    def __init__(self, filepath: Union[str, Path] = DEFAULT_DOMAINS_PATH):
        self.filepath = Path(filepath)
        self._domains: Dict[str, DomainRecord] = {}
        self._category_labels: Dict[str, str] = {}
        self._presets: Dict[str, List[str]] = {}
        self._load()

    def _load(self) -> None:
        """Load the YAML file and build the id index."""
        data = read_yaml(self.filepath)
        for entry in data.get("domains", []):
            record = DomainRecord.from_dict(entry)
            if record.id in self._domains:
                raise ValueError(f"Duplicate domain id in catalog: '{record.id}'")
            self._domains[record.id] = record
        self._category_labels = dict(data.get("category_labels", {}))
        self._presets = {name: list(ids) for name, ids in data.get("presets", {}).items()}
        logger.info("Loaded %d domains from %s", len(self._domains), self.filepath)

    def __len__(self) -> int:
        return len(self._domains)

    def __contains__(self, domain_id: object) -> bool:
        return domain_id in self._domains

    def list_domains(self) -> List[DomainRecord]:
        """Return domains in catalog order."""
        return list(self._domains.values())

    def list_ids(self) -> List[str]:
        return list(self._domains.keys())

    def get(self, domain_id: str) -> Optional[DomainRecord]:
        return self._domains.get(domain_id)

    def category_label(self, category: str) -> str:
        return self._category_labels.get(category, category)

    def preset(self, name: str) -> List[str]:
        """
        Return the domain ids for a named preset.

        "full" is always available and selects the whole catalog.
        """
        if name == "full":
            return self.list_ids()
        if name not in self._presets:
            raise ValueError(
                f"Unknown preset: '{name}'. Available presets: {sorted(self._presets) + ['full']}"
            )
        return list(self._presets[name])

    def total_monthly_pageviews(self) -> float:
        return sum(d.monthly_pageviews for d in self._domains.values())

    def total_monthly_impressions(self) -> float:
        return sum(d.monthly_pageviews * d.ads_per_page for d in self._domains.values())

    def poc_monthly_pageviews(self) -> float:
        return sum(d.monthly_pageviews for d in self._domains.values() if d.in_poc)


_catalog: Optional[DomainCatalog] = None


def get_catalog() -> DomainCatalog:
    """Get the process-wide catalog, loading it on first use."""
    global _catalog
    if _catalog is None:
        _catalog = DomainCatalog()
    return _catalog
