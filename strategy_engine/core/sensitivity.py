"""
Monte Carlo sensitivity analysis over four strategic parameters.

analyze() perturbs every parameter at once and reports outcome statistics
plus a per-parameter ranking. That ranking averages |outcome| over a subset
of samples picked by a label match or a random draw; it does not isolate any
one parameter's contribution. tornado() is the one-at-a-time alternative.
"""

from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

import numpy as np

from . import config
from .schema import (
    ParameterRange,
    ParameterSensitivity,
    PerturbationSample,
    SensitivityResult,
    SensitivitySummary,
    TornadoEntry,
    TornadoResult,
)
from ..util.logging import logger

PARAMETER_RANGES: Dict[str, ParameterRange] = {
    "risk_tolerance": ParameterRange(min=0.0, max=1.0, baseline=0.5),
    "time_horizon": ParameterRange(min=0.1, max=5.0, baseline=1.0),
    "resource_availability": ParameterRange(min=0.0, max=1.0, baseline=0.8),
    "stakeholder_alignment": ParameterRange(min=0.0, max=1.0, baseline=0.6),
}

OUTCOME_WEIGHTS = {
    "risk_tolerance": 0.3,
    "time_horizon": 0.2,
    "resource_availability": 0.3,
    "stakeholder_alignment": 0.2,
}

PERTURBATION_SPAN = 0.4  # uniform in [-20%, +20%] of baseline
CONFIDENCE_Z = 1.96
RANDOM_INCLUSION_THRESHOLD = 0.7


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_outcome(params: Mapping[str, float]) -> float:
    """Simplified outcome model: weighted sum plus two non-linear terms."""
    outcome = sum(params[name] * weight for name, weight in OUTCOME_WEIGHTS.items())
    outcome += params["risk_tolerance"] * params["resource_availability"] * 0.1
    # Penalty for extreme time horizons
    outcome -= (params["time_horizon"] - 1.0) ** 2 * 0.05
    return round(outcome, 3)


def resolve_baselines(base_params: Optional[Mapping[str, float]]) -> Dict[str, float]:
    """Fill missing parameters with their default baselines."""
    base_params = base_params or {}
    baselines = {}
    for name, spec in PARAMETER_RANGES.items():
        value = base_params.get(name)
        baselines[name] = spec.baseline if value is None else float(value)
    return baselines


def clamp_perturbations(perturbations) -> int:
    """Coerce a sample count into [1, max]; unusable values fall back to the default."""
    if perturbations is None or isinstance(perturbations, bool):
        return config.SENSITIVITY_DEFAULT_PERTURBATIONS
    try:
        count = int(float(perturbations))
    except (TypeError, ValueError, OverflowError):
        return config.SENSITIVITY_DEFAULT_PERTURBATIONS
    return max(1, min(config.SENSITIVITY_MAX_PERTURBATIONS, count))


class SensitivityAnalyzer:
    """Perturbation-based sensitivity analysis with an injectable random source."""

    def __init__(self, rng: np.random.Generator = None, seed: int = None):
        if rng is None:
            rng = np.random.default_rng(seed if seed is not None else config.get_sensitivity_seed())
        self.rng = rng

    def analyze(self, base_params: Optional[Mapping[str, float]] = None,
                perturbations: int = None) -> SensitivityResult:
        """Run joint perturbations and summarise the outcome distribution."""
        count = clamp_perturbations(perturbations)
        baselines = resolve_baselines(base_params)

        samples = []
        for i in range(count):
            perturbed = {}
            for name, spec in PARAMETER_RANGES.items():
                factor = (self.rng.random() - 0.5) * PERTURBATION_SPAN
                perturbed[name] = clamp(baselines[name] * (1 + factor), spec.min, spec.max)
            samples.append(PerturbationSample(
                label=f"sample_{i + 1}",
                parameters=perturbed,
                outcome=calculate_outcome(perturbed)
            ))

        effects = np.array([s.outcome for s in samples], dtype=float)
        mean = float(effects.mean())
        std = float(effects.std())

        ranking = [
            ParameterSensitivity(param=name, avg_effect=self.parameter_sensitivity(name, samples))
            for name in PARAMETER_RANGES
        ]
        ranking.sort(key=lambda p: abs(p.avg_effect), reverse=True)

        summary = SensitivitySummary(
            mean=mean,
            std=std,
            mean_effect=(mean - CONFIDENCE_Z * std, mean + CONFIDENCE_Z * std),
            effect_range=(float(effects.min()), float(effects.max())),
            most_sensitive=ranking[0].param,
            least_sensitive=ranking[-1].param
        )

        notes = (
            f"Performed {count} parameter perturbations. "
            f"Most sensitive parameter: {summary.most_sensitive}. "
            f"Effect range: {summary.effect_range[0]:.3f} to {summary.effect_range[1]:.3f}."
        )

        logger.log_sensitivity_run("monte_carlo", count, summary.most_sensitive,
                                   {"mean": round(mean, 3), "std": round(std, 3)})
        return SensitivityResult(samples=samples, summary=summary, ranking=ranking, analysis_notes=notes)

    def parameter_sensitivity(self, param_name: str, samples: List[PerturbationSample]) -> float:
        """Average |outcome| over samples tagged with param_name or randomly kept."""
        relevant = [
            s for s in samples
            if param_name in s.label or self.rng.random() > RANDOM_INCLUSION_THRESHOLD
        ]
        if not relevant:
            return 0.0
        return round(sum(abs(s.outcome) for s in relevant) / len(relevant), 3)

    def tornado(self, base_params: Optional[Mapping[str, float]] = None,
                samples_per_parameter: int = 10, perturbation_pct: float = 10.0) -> TornadoResult:
        """Perturb one parameter at a time and rank parameters by outcome spread."""
        n = clamp_perturbations(samples_per_parameter)
        baselines = resolve_baselines(base_params)

        entries = []
        for name, spec in PARAMETER_RANGES.items():
            outcomes = []
            for _ in range(n):
                factor = self.rng.uniform(-perturbation_pct, perturbation_pct)
                perturbed = dict(baselines)
                perturbed[name] = clamp(baselines[name] * (1 + factor / 100), spec.min, spec.max)
                outcomes.append(calculate_outcome(perturbed))

            entries.append(TornadoEntry(
                param=name,
                base_value=baselines[name],
                range_percentage=(-perturbation_pct, perturbation_pct),
                avg_outcome=sum(outcomes) / len(outcomes),
                min_outcome=min(outcomes),
                max_outcome=max(outcomes),
                range_delta=max(outcomes) - min(outcomes),
                raw_outcomes=outcomes
            ))

        # Largest spread first = most sensitive
        entries.sort(key=lambda e: e.range_delta, reverse=True)

        logger.log_sensitivity_run("tornado", n * len(entries), entries[0].param)
        return TornadoResult(
            entries=entries,
            most_sensitive_parameter=entries[0].param,
            samples_per_parameter=n,
            perturbation_range_percent=perturbation_pct
        )


def render_sensitivity_report(analysis_id: str, result: SensitivityResult,
                              generated_at: datetime = None) -> str:
    """Render a Markdown report for a Monte Carlo sensitivity run."""
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = result.summary
    low, high = summary.effect_range
    ci_low, ci_high = summary.mean_effect

    return f"""# Sensitivity Analysis Report

## Analysis Overview
- Analysis ID: {analysis_id}
- Generated: {generated_at.isoformat()}
- Perturbations: {len(result.samples)}

## Key Findings

### Most Sensitive Parameter
**{summary.most_sensitive}**
- This parameter has the highest impact on outcomes
- Consider monitoring this closely during implementation

### Effect Range
- Minimum effect: {low:.3f}
- Maximum effect: {high:.3f}
- 95% Confidence interval: [{ci_low:.3f}, {ci_high:.3f}]

## Recommendations

1. **Focus on {summary.most_sensitive}**: This parameter drives most outcome variability
2. **Monitor extremes**: Effects can range from {low:.1f} to {high:.1f}
3. **Build flexibility**: Design implementation to adapt to parameter changes
4. **Regular reassessment**: Re-run sensitivity analysis as conditions change

## Technical Details
{result.analysis_notes}"""
