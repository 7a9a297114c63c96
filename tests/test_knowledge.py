import random

from hazardscan.risk import knowledge
from hazardscan.risk.knowledge import (
    DEFAULT_BASELINE,
    URBAN_FACTORS,
    baseline_for,
    find_profile,
    pick_narrative,
    seed_score,
)
from hazardscan.risk.models import SeismicProfile


class FixedRng:
    def __init__(self, uniform_value=0.0, index=0):
        self.uniform_value = uniform_value
        self.index = index

    def uniform(self, a, b):
        return self.uniform_value

    def randrange(self, n):
        return min(self.index, n - 1)


def test_first_matching_key_wins():
    profile = find_profile("Sicily, Italy")
    assert profile is not None
    assert profile.baseline_risk == 85


def test_location_is_normalized():
    assert find_profile("  ROME, ITALY ").baseline_risk == 70
    assert find_profile("Cape Town, South Africa").baseline_risk == 25
    assert find_profile("San Francisco Bay").baseline_risk == 90


def test_unknown_or_empty_location():
    assert find_profile("Tokyo") is None
    assert find_profile("") is None
    assert find_profile(None) is None
    assert baseline_for(None) == DEFAULT_BASELINE


def test_injected_table_order_is_respected():
    first = SeismicProfile(1, "first", ("a",), ("b",))
    second = SeismicProfile(2, "second", ("c",), ("d",))
    table = (("italy", first), ("sicily", second))

    assert find_profile("Sicily, Italy", table) is first


def test_seed_score_clamps_to_range():
    assert seed_score(85, FixedRng(15.0)) == 99
    assert seed_score(12, FixedRng(-15.0)) == 5
    assert seed_score(45, FixedRng(0.0)) == 45


def test_seed_score_stays_in_variance_band():
    rng = random.Random(3)
    for _ in range(200):
        assert 70 <= seed_score(85, rng) <= 99


def test_seismic_narrative_uses_profile_lists():
    profile = find_profile("sicily")
    details = pick_narrative("seismic", profile, FixedRng(index=2))

    assert details.prime == profile.geological_factors[2]
    assert details.secondary == profile.structural_themes[2]
    assert details.tertiary == URBAN_FACTORS[2]


def test_narrative_without_profile_uses_generic_lists():
    details = pick_narrative("seismic", None, FixedRng(index=0))

    assert details.prime == knowledge.GEOLOGICAL_FACTORS[0]
    assert details.secondary == knowledge.STRUCTURAL_FACTORS[0]


def test_other_hazards_ignore_seismic_profile():
    profile = find_profile("sicily")
    details = pick_narrative("wildfire", profile, random.Random(1))

    assert details.prime in knowledge.VEGETATION_FACTORS
    assert details.secondary in knowledge.CLIMATE_FACTORS
    assert details.tertiary in knowledge.INTERFACE_FACTORS
