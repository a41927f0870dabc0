"""
Data types produced by sensitivity analysis.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class ParameterRange:
    min: float
    max: float
    baseline: float  # used when no baseline is supplied


@dataclass
class PerturbationSample:
    label: str
    parameters: Dict[str, float]
    outcome: float


@dataclass
class ParameterSensitivity:
    param: str
    avg_effect: float


@dataclass
class SensitivitySummary:
    mean: float
    std: float
    mean_effect: Tuple[float, float]  # mean -/+ 1.96 std
    effect_range: Tuple[float, float]  # observed (min, max)
    most_sensitive: str
    least_sensitive: str


@dataclass
class SensitivityResult:
    samples: List[PerturbationSample]
    summary: SensitivitySummary
    ranking: List[ParameterSensitivity]
    analysis_notes: str = ""


@dataclass
class TornadoEntry:
    param: str
    base_value: float
    range_percentage: Tuple[float, float]
    avg_outcome: float
    min_outcome: float
    max_outcome: float
    range_delta: float
    raw_outcomes: List[float] = field(default_factory=list)


@dataclass
class TornadoResult:
    entries: List[TornadoEntry]
    most_sensitive_parameter: str
    samples_per_parameter: int
    perturbation_range_percent: float
