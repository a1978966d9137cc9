import itertools

import pytest

from uplift_modeler.catalog import DomainCatalog, get_catalog
from uplift_modeler.engine import (
    DeploymentTier,
    aggregate_domain_inputs,
    deployment_tier_for,
    pageview_weights,
    select_domains,
)


def test_weighted_average_by_pageviews(small_catalog):
    result = aggregate_domain_inputs(["alpha", "beta"], catalog=small_catalog)

    assert result.total_monthly_pageviews == 4000000
    # (4.0 * 3 + 8.0 * 1) / 4
    assert result.display_cpm == pytest.approx(5.0)
    assert result.video_cpm == pytest.approx(14.0)
    assert result.weighted_display_video_split == pytest.approx(75.0)
    assert result.weighted_safari_share == pytest.approx(0.35)
    assert result.weighted_tech_savvy == pytest.approx(0.7)
    assert [d.id for d in result.selected_domains] == ["alpha", "beta"]


def test_order_and_duplicates_do_not_matter(small_catalog):
    a = aggregate_domain_inputs(["alpha", "beta"], catalog=small_catalog)
    b = aggregate_domain_inputs(["beta", "alpha", "beta"], catalog=small_catalog)
    assert a == b


def test_unknown_ids_are_ignored(small_catalog):
    result = aggregate_domain_inputs(["alpha", "nope"], catalog=small_catalog)
    assert result.domain_count == 1
    assert result.display_cpm == pytest.approx(4.0)


def test_empty_selection_returns_default_composite(small_catalog):
    result = aggregate_domain_inputs([], catalog=small_catalog)

    assert result.is_default
    assert result.total_monthly_pageviews == 0
    assert result.display_cpm == pytest.approx(4.50)
    assert result.video_cpm == pytest.approx(15.00)
    assert result.weighted_display_video_split == pytest.approx(80)
    assert result.weighted_safari_share == pytest.approx(0.38)
    assert result.weighted_tech_savvy == pytest.approx(0.70)


def test_zero_pageview_selection_falls_back_to_default(small_catalog):
    result = aggregate_domain_inputs(["dormant"], catalog=small_catalog)
    assert result.total_monthly_pageviews == 0
    assert result.weighted_safari_share == pytest.approx(0.38)


def test_cpm_overrides_replace_weighted_values(small_catalog):
    result = aggregate_domain_inputs(["alpha", "beta"], display_cpm=6.5, video_cpm=25.0, catalog=small_catalog)
    assert result.display_cpm == 6.5
    assert result.video_cpm == 25.0
    assert result.weighted_safari_share == pytest.approx(0.35)

    empty = aggregate_domain_inputs([], display_cpm=6.5, catalog=small_catalog)
    assert empty.display_cpm == 6.5


def test_pageview_overrides(small_catalog):
    result = aggregate_domain_inputs(
        ["alpha", "beta"], pageview_overrides={"alpha": 1000000}, catalog=small_catalog
    )
    assert result.total_monthly_pageviews == 2000000
    assert result.display_cpm == pytest.approx(6.0)

    with pytest.raises(ValueError):
        select_domains(["alpha"], pageview_overrides={"alpha": -1}, catalog=small_catalog)


def test_pageview_weights(small_catalog):
    domains = select_domains(["alpha", "beta"], catalog=small_catalog)
    assert pageview_weights(domains) == {"alpha": 0.75, "beta": 0.25}
    assert pageview_weights(select_domains(["dormant"], catalog=small_catalog)) == {}


@pytest.mark.parametrize(
    "count, tier",
    [
        (0, DeploymentTier.SINGLE),
        (1, DeploymentTier.SINGLE),
        (2, DeploymentTier.MULTI),
        (14, DeploymentTier.MULTI),
        (15, DeploymentTier.FULL),
        (40, DeploymentTier.FULL),
    ],
)
def test_deployment_tier_for(count, tier):
    assert deployment_tier_for(count) == tier


def test_catalog_presets_and_totals(small_catalog):
    assert len(small_catalog) == 3
    assert "beta" in small_catalog
    assert small_catalog.preset("pair") == ["alpha", "beta"]
    assert small_catalog.preset("full") == ["alpha", "beta", "dormant"]
    assert small_catalog.poc_monthly_pageviews() == 1000000
    assert small_catalog.category_label("news") == "News"
    with pytest.raises(ValueError):
        small_catalog.preset("missing")


def test_duplicate_catalog_ids_rejected(tmp_path):
    path = tmp_path / "domains.yaml"
    entry = (
        "  - {id: a, name: A, monthly_pageviews: 1, display_cpm: 1, video_cpm: 1, "
        "display_video_split: 50, category: news, audience_profile: {tech_savvy: 0.5, safari_share: 0.5}}\n"
    )
    path.write_text("domains:\n" + entry + entry)
    with pytest.raises(ValueError):
        DomainCatalog(path)


def test_shipped_catalog_loads():
    catalog = get_catalog()
    assert len(catalog) == 13
    poc = catalog.preset("poc")
    assert all(domain_id in catalog for domain_id in poc)


WEIGHTED_FIELDS = {
    "display_cpm": lambda d: d.display_cpm,
    "video_cpm": lambda d: d.video_cpm,
    "weighted_display_video_split": lambda d: d.display_video_split,
    "weighted_safari_share": lambda d: d.audience_profile.safari_share,
    "weighted_tech_savvy": lambda d: d.audience_profile.tech_savvy,
}


def test_weighted_fields_stay_within_selected_range():
    catalog = get_catalog()
    for size in (1, 2, 3):
        for ids in itertools.combinations(catalog.list_ids(), size):
            result = aggregate_domain_inputs(ids, catalog=catalog)
            for name, raw in WEIGHTED_FIELDS.items():
                values = [raw(d) for d in result.selected_domains]
                assert min(values) <= getattr(result, name) <= max(values), (ids, name)


def test_single_domain_composite_equals_catalog_values():
    result = aggregate_domain_inputs(["sbnation"])
    domain = get_catalog().get("sbnation")

    assert result.display_cpm == domain.display_cpm
    assert result.video_cpm == domain.video_cpm
    assert result.weighted_safari_share == domain.audience_profile.safari_share


def test_zero_pageview_override_marks_composite_default():
    result = aggregate_domain_inputs(["the-verge"], pageview_overrides={"the-verge": 0})
    assert result.is_default
    assert result.domain_count == 1

    assert not aggregate_domain_inputs(["the-verge"]).is_default
