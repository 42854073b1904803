"""
Scoring Configuration

Every constant the scoring pipeline depends on (weights, baselines, filter
thresholds, spread-builder limits) lives in these dataclasses and is passed
into the pipeline explicitly.

Two named profiles exist because the builder limits drifted between call
sites over time:

- strict: the recommender limits (composite liquidity guard, 1.5 R/R floor)
- relaxed: the looser limits (per-leg liquidity guard, 1.0 R/R floor)

Schema (YAML, every key optional):
- profile: strict | relaxed
- long_weights / day_trade_weights / short_weights
- long_baselines / short_baselines
- theta_pain / lambda_compression / score_scale
- term_structure / regime
- scan_filters / credit_spread / debit_spread / spread_scoring / recommender
"""

import copy
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from optscore.exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class Baseline:
    """Fixed mean/std used for cross-scan comparable z-scores."""
    mean: float
    std: float


@dataclass(slots=True)
class LongWeights:
    """Composite weights for long premium (buyer) scoring."""
    lambda_: float = 0.40
    gamma_efficiency: float = 0.30
    theta_burn: float = 0.15       # subtracted
    delta_bonus: float = 0.15
    pain_multiplier: float = 1.0


def _day_trade_weights() -> LongWeights:
    # Short-dated mode: time decay matters less than gamma
    return LongWeights(
        lambda_=0.40,
        gamma_efficiency=0.50,
        theta_burn=0.05,
        delta_bonus=0.15,
        pain_multiplier=0.2,
    )


@dataclass(slots=True)
class ShortWeights:
    """Composite weights for short premium (seller) scoring."""
    edge: float = 0.50
    pop: float = 0.30
    spread: float = 0.20           # subtracted


@dataclass(slots=True)
class LongBaselines:
    """Reference distribution for long metrics."""
    lambda_: Baseline = field(default_factory=lambda: Baseline(8.0, 4.0))
    gamma_efficiency: Baseline = field(default_factory=lambda: Baseline(0.02, 0.015))
    theta_burn: Baseline = field(default_factory=lambda: Baseline(0.03, 0.02))


@dataclass(slots=True)
class ShortBaselines:
    """Reference distribution for short metrics."""
    edge: Baseline = field(default_factory=lambda: Baseline(0.8, 0.4))
    pop: Baseline = field(default_factory=lambda: Baseline(0.7, 0.15))
    spread: Baseline = field(default_factory=lambda: Baseline(0.03, 0.03))


@dataclass(slots=True)
class ThetaPainConfig:
    """Quadratic theta-burn penalty above a safe zone."""
    safe_zone: float = 0.005       # 0.5% of premium per day
    scale: float = 100.0
    coefficient: float = 0.5
    scan_cap: float = 10.0
    position_cap: float = 50.0


@dataclass(slots=True)
class LambdaCompression:
    """Soft cap for leverage above a threshold."""
    threshold: float = 20.0
    decay: float = 0.1


@dataclass(slots=True)
class ScoreScale:
    """Mapping of the raw composite onto 0-100."""
    center: float = 50.0
    multiplier: float = 12.5
    deal_breaker_spread_pct: float = 0.15


@dataclass(slots=True)
class TermStructureConfig:
    """Tenors and sanity bounds for the IV term ratio."""
    near_tenor: int = 30
    far_tenor: int = 90
    min_ratio: float = 0.5
    max_ratio: float = 2.0
    contango_below: float = 0.95
    backwardation_above: float = 1.05


@dataclass(slots=True)
class RegimeThresholds:
    """Thresholds for the volatility regime classifier."""
    # Sigmoid fallback (no realized vol available)
    sigmoid_k: float = 12.0
    sigmoid_x0: float = 1.10
    factor_floor: float = 0.9
    factor_span: float = 0.4
    adjustment_scale: float = 5.0

    # Quadrant classification
    contango_below: float = 1.0
    backwardation_above: float = 1.05
    cheap_below: float = 0.95
    expensive_above: float = 1.1
    value_zone: float = 2.5
    momentum_zone: float = 1.0
    trap_zone: float = -2.0
    fear_zone: float = -3.0

    # Mode selection
    credit_term_above: float = 1.05
    credit_iv_rv_above: float = 1.35
    debit_term_below: float = 0.95
    debit_iv_rv_below: float = 0.85


@dataclass(slots=True)
class ScanFilters:
    """Hard filters applied before single-leg scoring."""
    dte_min: int = 20
    dte_max: int = 60
    strike_range_pct: float = 0.25
    min_volume: int = 50
    max_spread_pct: float = 0.10
    min_delta: float = 0.0
    max_delta: float = 1.0
    direction: str = "all"         # all | call | put
    top_n: int = 20


@dataclass(slots=True)
class CreditSpreadProfile:
    """Limits and weights for credit spread construction."""
    anchor_delta_min: float = 0.20
    anchor_delta_max: float = 0.40
    widths: Tuple[float, ...] = (5.0, 10.0)
    wide_widths: Tuple[float, ...] = (10.0, 20.0)
    wide_width_spot: float = 500.0
    strike_tolerance: float = 0.1
    min_credit: float = 0.10
    max_spread_pct: float = 0.15
    liquidity_basis: str = "composite"   # composite | short_leg
    min_roi_pct: float = 15.0
    earnings_block_days: int = 10
    earnings_penalty: float = 25.0
    weight_roi: float = 0.35
    weight_pop: float = 0.30
    weight_distance: float = 0.15
    weight_dte: float = 0.20
    top_n: int = 5


@dataclass(slots=True)
class DebitSpreadProfile:
    """Limits and weights for debit spread construction."""
    anchor_delta_min: float = 0.45
    anchor_delta_max: float = 0.70
    widths: Tuple[float, ...] = (2.5, 5.0)
    strike_tolerance: float = 0.1
    cost_ceiling: float = 0.55
    min_risk_reward: float = 1.5
    max_leg_spread_pct: float = 0.15
    risk_reward_full_score: float = 3.0
    pop_haircut: float = 0.05
    weight_lambda: float = 0.40
    weight_risk_reward: float = 0.35
    weight_delta: float = 0.25
    top_n: int = 5


@dataclass(slots=True)
class SpreadScoring:
    """Shared spread scoring settings."""
    regime_points_scale: float = 6.0
    account_risk_limit: float = 57.0
    contract_multiplier: int = 100


@dataclass(slots=True)
class RecommenderConfig:
    """Strategy recommender settings."""
    strike_window_pct: float = 0.15
    single_leg_delta_min: float = 0.25
    single_leg_delta_max: float = 0.60
    single_leg_top_n: int = 5
    max_dte: int = 730


@dataclass(slots=True)
class ScoringConfig:
    """Complete scoring configuration."""

    profile: str = "strict"
    long_weights: LongWeights = field(default_factory=LongWeights)
    day_trade_weights: LongWeights = field(default_factory=_day_trade_weights)
    day_trade_max_dte: int = 5
    short_weights: ShortWeights = field(default_factory=ShortWeights)
    long_baselines: LongBaselines = field(default_factory=LongBaselines)
    short_baselines: ShortBaselines = field(default_factory=ShortBaselines)
    theta_pain: ThetaPainConfig = field(default_factory=ThetaPainConfig)
    lambda_compression: LambdaCompression = field(default_factory=LambdaCompression)
    score_scale: ScoreScale = field(default_factory=ScoreScale)
    term_structure: TermStructureConfig = field(default_factory=TermStructureConfig)
    regime: RegimeThresholds = field(default_factory=RegimeThresholds)
    scan_filters: ScanFilters = field(default_factory=ScanFilters)
    credit_spread: CreditSpreadProfile = field(default_factory=CreditSpreadProfile)
    debit_spread: DebitSpreadProfile = field(default_factory=DebitSpreadProfile)
    spread_scoring: SpreadScoring = field(default_factory=SpreadScoring)
    recommender: RecommenderConfig = field(default_factory=RecommenderConfig)

    @classmethod
    def for_profile(cls, name: str = "strict") -> "ScoringConfig":
        """
        Create the configuration for a named profile.

        Raises:
            ConfigurationError: If the profile name is unknown
        """
        key = name.strip().lower()
        if key not in PROFILES:
            raise ConfigurationError(
                f"Unknown profile: {name!r}. Available: {sorted(PROFILES)}"
            )
        return cls.from_dict({"profile": key, **copy.deepcopy(PROFILES[key])})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringConfig":
        """
        Create config from a dictionary with nested dataclass instantiation.

        The named profile (``profile`` key, default strict) is applied first
        and the remaining keys override it.
        """
        data = dict(data or {})
        profile = str(data.get("profile") or "strict").strip().lower()
        merged = _deep_merge(copy.deepcopy(PROFILES.get(profile, {})), data)
        merged["profile"] = profile
        return _build(cls, merged)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (YAML friendly)."""
        return _unbuild(self)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.profile not in PROFILES:
            errors.append(f"Unknown profile: {self.profile}")

        for name, baseline in (
            ("long_baselines.lambda_", self.long_baselines.lambda_),
            ("long_baselines.gamma_efficiency", self.long_baselines.gamma_efficiency),
            ("long_baselines.theta_burn", self.long_baselines.theta_burn),
            ("short_baselines.edge", self.short_baselines.edge),
            ("short_baselines.pop", self.short_baselines.pop),
            ("short_baselines.spread", self.short_baselines.spread),
        ):
            if baseline.std <= 0:
                errors.append(f"{name}.std must be positive: {baseline.std}")

        if self.lambda_compression.threshold <= 0:
            errors.append("lambda_compression.threshold must be positive")
        if not (0 <= self.lambda_compression.decay <= 1):
            errors.append("lambda_compression.decay must be between 0 and 1")

        ts = self.term_structure
        if not (0 < ts.near_tenor < ts.far_tenor):
            errors.append(f"term_structure tenors must satisfy 0 < near < far: {ts.near_tenor}/{ts.far_tenor}")
        if not (0 < ts.min_ratio < 1 < ts.max_ratio):
            errors.append(f"term_structure ratio bounds must straddle 1.0: [{ts.min_ratio}, {ts.max_ratio}]")

        sf = self.scan_filters
        if sf.dte_min > sf.dte_max:
            errors.append(f"scan_filters.dte_min > dte_max: {sf.dte_min} > {sf.dte_max}")
        if not (0 <= sf.min_delta <= sf.max_delta <= 1):
            errors.append(f"scan_filters delta range invalid: [{sf.min_delta}, {sf.max_delta}]")
        if sf.direction not in ("all", "call", "put"):
            errors.append(f"scan_filters.direction must be all|call|put: {sf.direction}")
        if sf.top_n < 1:
            errors.append("scan_filters.top_n must be >= 1")

        cs = self.credit_spread
        if any(w <= 0 for w in (*cs.widths, *cs.wide_widths)):
            errors.append("credit_spread widths must be positive")
        elif not (0 < cs.strike_tolerance <= min((*cs.widths, *cs.wide_widths), default=1.0) / 2):
            errors.append(f"credit_spread.strike_tolerance must be in (0, half the smallest width]: {cs.strike_tolerance}")
        if not (0 <= cs.anchor_delta_min <= cs.anchor_delta_max <= 1):
            errors.append("credit_spread anchor delta range invalid")
        if cs.liquidity_basis not in ("composite", "short_leg"):
            errors.append(f"credit_spread.liquidity_basis must be composite|short_leg: {cs.liquidity_basis}")

        ds = self.debit_spread
        if any(w <= 0 for w in ds.widths):
            errors.append("debit_spread widths must be positive")
        elif not (0 < ds.strike_tolerance <= min(ds.widths, default=1.0) / 2):
            errors.append(f"debit_spread.strike_tolerance must be in (0, half the smallest width]: {ds.strike_tolerance}")
        if not (0 <= ds.anchor_delta_min <= ds.anchor_delta_max <= 1):
            errors.append("debit_spread anchor delta range invalid")
        if not (0 < ds.cost_ceiling <= 1):
            errors.append(f"debit_spread.cost_ceiling must be in (0, 1]: {ds.cost_ceiling}")

        return errors


# Profile overrides, applied on top of the dataclass defaults (= strict)
PROFILES: Dict[str, Dict[str, Any]] = {
    "strict": {},
    "relaxed": {
        "credit_spread": {
            "min_credit": 0.15,
            "max_spread_pct": 0.10,
            "liquidity_basis": "short_leg",
            "weight_roi": 0.40,
            "weight_pop": 0.40,
            "weight_distance": 0.20,
            "weight_dte": 0.0,
            "earnings_penalty": 0.0,
        },
        "debit_spread": {
            "anchor_delta_min": 0.40,
            "cost_ceiling": 0.50,
            "min_risk_reward": 1.0,
            "max_leg_spread_pct": 0.10,
        },
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into base recursively (override wins, None values are skipped)."""
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _build(cls, data: Dict[str, Any]):
    """Instantiate a (possibly nested) config dataclass from a dictionary."""
    kwargs = {}
    known = {f.name: f for f in fields(cls)}

    for key, value in data.items():
        name = "lambda_" if key == "lambda" else key
        if name not in known:
            logger.warning(f"Ignoring unknown config key {cls.__name__}.{key}")
            continue
        # An empty YAML key (`regime:`) keeps the default
        if value is None:
            continue

        default = _default_of(known[name])
        if isinstance(default, Baseline):
            kwargs[name] = Baseline(**value) if isinstance(value, dict) else Baseline(*value)
        elif is_dataclass(default) and isinstance(value, dict):
            kwargs[name] = _build(type(default), value)
        elif isinstance(default, tuple):
            kwargs[name] = tuple(float(v) for v in value)
        else:
            kwargs[name] = value

    return cls(**kwargs)


def _default_of(f) -> Any:
    if f.default_factory is not None and f.default_factory is not MISSING:
        return f.default_factory()
    return f.default


def _unbuild(obj) -> Any:
    if isinstance(obj, Baseline):
        return {"mean": obj.mean, "std": obj.std}
    if is_dataclass(obj):
        return {f.name: _unbuild(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, tuple):
        return list(obj)
    return obj


