from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class ChunkDetails:
    prime: str
    secondary: str
    tertiary: str


@dataclass(frozen=True)
class GridChunk:
    id: str
    row: int
    col: int
    risk_score: int
    risk_level: str
    reason: str
    details: ChunkDetails


@dataclass(frozen=True)
class TrendPoint:
    time: str
    value1: float
    value2: float


@dataclass(frozen=True)
class DistributionPoint:
    label: str
    probability: float


@dataclass(frozen=True)
class FactorValue:
    name: str
    value: float


@dataclass(frozen=True)
class ReportData:
    temporal_trend: List[TrendPoint]
    magnitude_dist: List[DistributionPoint]
    factor_comparison: List[FactorValue]
    justification: Optional[str] = None
    unit1: Optional[str] = None
    unit2: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    chunks: List[GridChunk]
    average_risk: int
    high_risk_count: int
    report_data: ReportData
    is_ai_verified: bool
    detected_region: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HazardEvent:
    id: str
    lat: float
    lng: float
    magnitude: float
    intensity: float
    label: str
    details: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SeismicProfile:
    baseline_risk: int
    description: str
    geological_factors: Tuple[str, ...]
    structural_themes: Tuple[str, ...]


@dataclass(frozen=True)
class SampledCell:
    id: str
    row: int
    col: int
    risk_score: int


@dataclass(frozen=True)
class SampledGrid:
    chunks: List[SampledCell]
    total_risk: float


@dataclass
class Enrichment:
    """
    Outcome of one AI enrichment call.
    data is the parsed (untrusted) JSON object, error_code is set only
    when the call itself failed.
    """
    data: Optional[Dict[str, Any]] = None
    error_code: Optional[str] = None
    raw_text: Optional[str] = field(default=None, repr=False)
