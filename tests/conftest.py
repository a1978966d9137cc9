import pytest
import yaml

from uplift_modeler.catalog import DomainCatalog
from uplift_modeler.engine import aggregate_domain_inputs, calculate_scenario, get_benchmarks


SMALL_CATALOG = {
    "domains": [
        {
            "id": "alpha",
            "name": "Alpha",
            "monthly_pageviews": 3000000,
            "display_cpm": 4.0,
            "video_cpm": 12.0,
            "display_video_split": 80,
            "category": "news",
            "audience_profile": {"tech_savvy": 0.6, "safari_share": 0.30},
        },
        {
            "id": "beta",
            "name": "Beta",
            "monthly_pageviews": 1000000,
            "display_cpm": 8.0,
            "video_cpm": 20.0,
            "display_video_split": 60,
            "category": "lifestyle",
            "in_poc": True,
            "audience_profile": {"tech_savvy": 1.0, "safari_share": 0.50},
        },
        {
            "id": "dormant",
            "name": "Dormant",
            "monthly_pageviews": 0,
            "display_cpm": 2.0,
            "video_cpm": 9.0,
            "display_video_split": 50,
            "category": "news",
            "audience_profile": {"tech_savvy": 0.1, "safari_share": 0.9},
        },
    ],
    "category_labels": {"news": "News", "lifestyle": "Lifestyle"},
    "presets": {"pair": ["alpha", "beta"]},
}


@pytest.fixture
def small_catalog(tmp_path):
    path = tmp_path / "domains.yaml"
    path.write_text(yaml.safe_dump(SMALL_CATALOG))
    return DomainCatalog(path)


@pytest.fixture
def benchmarks():
    return get_benchmarks()


@pytest.fixture
def poc_scenario():
    inputs = aggregate_domain_inputs(["the-verge", "vox", "nymag", "the-cut", "vulture", "grub-street"])
    return calculate_scenario(inputs)
