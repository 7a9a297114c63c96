import random
from typing import Optional, Sequence, Tuple

from hazardscan.risk.models import ChunkDetails, SeismicProfile
from hazardscan.risk.rules import round_half_up


DEFAULT_BASELINE = 45
BASELINE_VARIATION = 15.0
SEED_MIN = 5
SEED_MAX = 99

GEOLOGICAL_FACTORS = (
    "Located near active fault lines with high tectonic stress.",
    "Loose, sandy soil prone to significant liquefaction.",
    "Unstable slope composition with potential for landslides.",
    "Soft alluvial deposits that amplify seismic waves.",
    "Stable granite bedrock with minimal wave amplification.",
    "Inland plateau with low historical seismic strain.",
)

STRUCTURAL_FACTORS = (
    "Pre-code masonry structures with minimal reinforcement.",
    "High-rise buildings lacking modern dampers.",
    "Critical infrastructure nearing design life capacity.",
    "Mixed-age building stock with varying compliance.",
    "Seismically retrofitted facilities with reinforced cores.",
    "State-of-the-art base isolation systems implemented.",
)

URBAN_FACTORS = (
    "High population density with narrow evacuation routes.",
    "Critical proximity to hazardous storage facilities.",
    "Limited accessibility for emergency rescue services.",
    "Moderate urban density with planned open spaces.",
    "Low-density suburban area with wide clearance zones.",
    "Well-mapped emergency zones and rapid response hubs.",
)

VEGETATION_FACTORS = (
    "Dense chaparral with high dead-fuel loading.",
    "Continuous conifer canopy allowing crown fire spread.",
    "Cured grassland that ignites and spreads rapidly.",
    "Mixed woodland with moderate understory fuels.",
    "Irrigated agricultural land acting as a firebreak.",
    "Sparse, rocky terrain with little combustible material.",
)

CLIMATE_FACTORS = (
    "Prolonged drought has pushed fuel moisture to critical lows.",
    "Seasonal offshore winds drive fast, erratic fire runs.",
    "High summer temperatures with very low relative humidity.",
    "Moderate seasonal dryness with occasional heat spikes.",
    "Reliable seasonal rainfall keeps fuels green most of the year.",
    "Cool maritime influence limits fire weather days.",
)

INTERFACE_FACTORS = (
    "Homes built directly into the wildland-urban interface.",
    "Single access roads that complicate evacuation.",
    "Steep slopes that accelerate uphill fire spread.",
    "Defensible space maintained around most structures.",
    "Fire stations and hydrant coverage within short response times.",
    "Open buffers separating settlements from wildland fuels.",
)

ATMOSPHERIC_FACTORS = (
    "Warm sea-surface temperatures feeding intense convection.",
    "Frequent tropical cyclone tracks cross this coastline.",
    "Strong jet-stream dynamics producing severe squall lines.",
    "Seasonal monsoon rainfall with intermittent bursts.",
    "Sheltered position with reduced wind exposure.",
    "Stable climate with infrequent severe weather.",
)

HYDROLOGICAL_FACTORS = (
    "Low-lying floodplain with poor natural drainage.",
    "Storm-surge exposure along a shallow continental shelf.",
    "Saturated soils that turn heavy rain into rapid runoff.",
    "Rivers with moderate flood return periods.",
    "Elevated terrain that drains quickly after rainfall.",
    "Well-regulated catchment with upstream retention.",
)

INFRASTRUCTURE_FACTORS = (
    "Overhead power lines vulnerable to wind damage.",
    "Combined sewers that overflow during heavy rain.",
    "Aging levees and flood walls below current design standards.",
    "Mixed building stock with partial wind-load compliance.",
    "Modern drainage and storm-hardened utilities.",
    "Dedicated shelters and early-warning sirens in place.",
)

HAZARD_FACTOR_LISTS = {
    "seismic": (GEOLOGICAL_FACTORS, STRUCTURAL_FACTORS, URBAN_FACTORS),
    "wildfire": (VEGETATION_FACTORS, CLIMATE_FACTORS, INTERFACE_FACTORS),
    "storm": (ATMOSPHERIC_FACTORS, HYDROLOGICAL_FACTORS, INFRASTRUCTURE_FACTORS),
}

# Order matters: "sicily" must be tried before "italy".
SEISMIC_KNOWLEDGE_BASE: Tuple[Tuple[str, SeismicProfile], ...] = (
    ("sicily", SeismicProfile(
        baseline_risk=85,
        description="High seismic zone (Zone 1) with active tectonic processes.",
        geological_factors=(
            "Located near the African-Eurasian plate collision zone.",
            "High concentration of active fault lines in eastern Sicily.",
            "Volcanic soil from Etna can amplify certain seismic frequencies.",
        ),
        structural_themes=(
            "Historical masonry structures with high seismic vulnerability.",
            "Dense urban centers with narrow, high-risk arterial roads.",
            "Variable compliance with modern anti-seismic building codes.",
        ),
    )),
    ("italy", SeismicProfile(
        baseline_risk=70,
        description="Mediterranean tectonic activity zone with variable risk levels.",
        geological_factors=(
            "Complex fault systems throughout the Apennines.",
            "Soft sediment basins that amplify ground motion.",
        ),
        structural_themes=(
            "Aging infrastructure requiring seismic retrofitting.",
            "Rich architectural heritage with unique preservation challenges.",
        ),
    )),
    ("upington", SeismicProfile(
        baseline_risk=12,
        description="Stable intraplate region with low natural seismicity.",
        geological_factors=(
            "Located on the stable Kaapvaal Craton foundation.",
            "Dry, consolidated soil with low liquefaction potential.",
            "Minimal historical records of major tectonic events.",
        ),
        structural_themes=(
            "Predominantly low-rise structures with standard masonry.",
            "Wide open spaces reducing secondary urban risk factors.",
        ),
    )),
    ("south africa", SeismicProfile(
        baseline_risk=25,
        description="Intraplate region with moderate risk, often mining-induced.",
        geological_factors=(
            "Generally stable geological basement rocks.",
            "Local risks primarily associated with deep-level mining.",
        ),
        structural_themes=(
            "Modern urban centers following updated safety guidelines.",
            "Variable structural resilience in older mining districts.",
        ),
    )),
    ("san francisco", SeismicProfile(
        baseline_risk=90,
        description="Major plate boundary zone with frequent activity.",
        geological_factors=(
            "Direct proximity to the San Andreas Fault system.",
            "Significant areas of reclaimed land prone to liquefaction.",
        ),
        structural_themes=(
            "Advanced seismic engineering in high-rise districts.",
            "Older soft-story buildings requiring mandatory retrofitting.",
        ),
    )),
)


def normalize_location(location: Optional[str]) -> str:
    return (location or "").lower().strip()


def find_profile(
    location: Optional[str],
    knowledge_base: Sequence[Tuple[str, SeismicProfile]] = SEISMIC_KNOWLEDGE_BASE,
) -> Optional[SeismicProfile]:
    normalized = normalize_location(location)
    if not normalized:
        return None

    for key, profile in knowledge_base:
        if key in normalized:
            return profile
    return None


def baseline_for(profile: Optional[SeismicProfile]) -> int:
    return profile.baseline_risk if profile is not None else DEFAULT_BASELINE


def seed_score(baseline: float, rng: random.Random) -> int:
    variation = rng.uniform(-BASELINE_VARIATION, BASELINE_VARIATION)
    return max(SEED_MIN, min(SEED_MAX, round_half_up(baseline + variation)))


def _pick(options: Sequence[str], rng: random.Random) -> str:
    return options[rng.randrange(len(options))]


def pick_narrative(
    hazard: str,
    profile: Optional[SeismicProfile],
    rng: random.Random,
    factor_lists=None,
) -> ChunkDetails:
    """
    Draws one phrase per narrative slot.
    A regional profile only flavours seismic runs; other hazards always use
    their generic lists.
    """
    factor_lists = factor_lists or HAZARD_FACTOR_LISTS
    prime_list, secondary_list, tertiary_list = factor_lists[hazard]

    if hazard == "seismic" and profile is not None:
        prime_list = profile.geological_factors or prime_list
        secondary_list = profile.structural_themes or secondary_list

    return ChunkDetails(
        prime=_pick(prime_list, rng),
        secondary=_pick(secondary_list, rng),
        tertiary=_pick(tertiary_list, rng),
    )
