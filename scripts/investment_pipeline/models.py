"""
Data models and schemas.
"""
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Union
from datetime import datetime, UTC

import pandas as pd


ItemId = Union[int, str]


@dataclass(frozen=True)
class CatalogEntry:
    """A tradeable item as described by the catalog collaborator."""
    id: ItemId
    name: Optional[str]
    daily_volume: Optional[float] = None
    unit_limit: Optional[int] = None
    members: Optional[bool] = None
    price_hint: Optional[float] = None


@dataclass(frozen=True)
class PricePoint:
    """One normalized observation."""
    timestamp: pd.Timestamp
    price: float
    volume: Optional[float] = None


Series = List[PricePoint]


@dataclass(frozen=True)
class Features:
    """Scalar features derived from a series."""
    price_change_pct: float = 0.0
    volatility_pct: float = 0.0
    momentum_pct: float = 0.0


@dataclass(frozen=True)
class AnalysisResult:
    """Result of analysing one candidate."""
    id: ItemId
    name: str
    current_price: float
    start_price: float
    units_affordable: int
    price_change_pct: float
    volatility_pct: float
    momentum_pct: float
    investment_score: float
    source_volume: Optional[float] = None
    data_points: int = 0
    members: Optional[bool] = None
    risk_level: str = 'low'
    volume_category: str = 'Very Low'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'currentPrice': self.current_price,
            'startPrice': self.start_price,
            'unitsCanBuy': self.units_affordable,
            'priceChange': round(self.price_change_pct, 2),
            'volatility': round(self.volatility_pct, 2),
            'momentum': round(self.momentum_pct, 2),
            'investmentScore': round(self.investment_score, 1),
            'volume': self.source_volume,
            'volumeCategory': self.volume_category,
            'dataPoints': self.data_points,
            'members': self.members,
            'riskLevel': self.risk_level,
        }


def _utc_now() -> str:
    return datetime.now(UTC).isoformat().replace('+00:00', 'Z')


@dataclass
class PipelineResult:
    """Complete pipeline execution result."""
    market: str
    budget: float
    started_at: str
    completed_at: Optional[str] = None

    # Counters
    catalog_count: int = 0
    total_checked: int = 0
    total_analyzed: int = 0
    elapsed_seconds: float = 0.0

    # Data collected: every accepted item, and the ranked top of it
    analyzed: List[AnalysisResult] = field(default_factory=list)
    recommendations: List[AnalysisResult] = field(default_factory=list)

    # Errors
    errors: List[Dict[str, str]] = field(default_factory=list)

    # Metadata
    execution_log: List[Dict[str, Any]] = field(default_factory=list)

    def add_error(self, step: str, error: str):
        """Add an error to the result."""
        self.errors.append({
            'step': step,
            'error': error,
            'timestamp': _utc_now()
        })

    def add_log(self, step: str, status: str, message: str = None):
        """Add a log entry."""
        entry = {
            'step': step,
            'status': status,
            'timestamp': _utc_now()
        }
        if message:
            entry['message'] = message
        self.execution_log.append(entry)

    @property
    def analysis_time(self) -> str:
        """Elapsed time as '<m>m <s>s'."""
        seconds = int(round(self.elapsed_seconds))
        return f"{seconds // 60}m {seconds % 60}s"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'market': self.market,
            'budget': self.budget,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
            'catalogCount': self.catalog_count,
            'totalChecked': self.total_checked,
            'totalAnalyzed': self.total_analyzed,
            'elapsedSeconds': round(self.elapsed_seconds, 3),
            'recommendations': [r.to_dict() for r in self.recommendations],
            'errors': self.errors,
            'execution_log': self.execution_log
        }
