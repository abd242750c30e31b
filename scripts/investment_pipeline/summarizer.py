"""
Summary generation for pipeline execution.
"""
import json
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, Optional

from .config import Config, MarketProfile
from .models import PipelineResult
from .ranking import group_by_risk

logger = logging.getLogger(__name__)


class SummaryGenerator:
    """Writes the run's recommendations and metadata as JSON."""

    def __init__(self, output_dir: Path = Config.OUTPUT_DIR):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def build(
        self,
        market: MarketProfile,
        result: PipelineResult,
        budget_input: Optional[str] = None
    ) -> Dict[str, Any]:
        """Summary payload for a finished run."""
        summary = {
            'recommendations': [r.to_dict() for r in result.recommendations],
            'totalAnalyzed': result.total_analyzed,
            'totalChecked': result.total_checked,
            'budget': result.budget,
            'budgetString': budget_input,
            'metadata': {
                'market': market.display_name,
                'currency': market.currency,
                'budget': budget_input or f"{result.budget:,.0f}",
                'itemsAnalyzed': result.total_analyzed,
                'totalChecked': result.total_checked,
                'catalogCount': result.catalog_count,
                'analysisTime': result.analysis_time,
                'startedAt': result.started_at,
                'completedAt': result.completed_at,
                'timestamp': datetime.now(UTC).isoformat().replace('+00:00', 'Z'),
            },
            'insights': self._generate_insights(result),
            'errors': result.errors,
        }

        # Groups draw on everything analysed, not only the top recommendations
        if market.has_tiers:
            summary['groups'] = {
                name: [r.to_dict() for r in items]
                for name, items in group_by_risk(result.analyzed).items()
            }
        return summary

    def build_error(self, market: MarketProfile, error: str, budget_input: Optional[str] = None) -> Dict[str, Any]:
        """Summary payload for a failed run."""
        return {
            'error': error,
            'metadata': {
                'market': market.display_name,
                'budget': budget_input,
                'timestamp': datetime.now(UTC).isoformat().replace('+00:00', 'Z'),
                'failed': True,
            }
        }

    def write(self, market: MarketProfile, summary: Dict[str, Any]) -> Path:
        output_file = self.output_dir / f'{market.key}-results.json'
        with open(output_file, 'w') as f:
            json.dump(summary, f, indent=2, default=str)
        logger.info(f"[SUCCESS] Results saved to: {output_file}")
        return output_file

    def _generate_insights(self, result: PipelineResult) -> Dict[str, Any]:
        """Score and volatility statistics for the kept recommendations."""
        insights = {}

        if result.recommendations:
            scores = [r.investment_score for r in result.recommendations]
            volatilities = [r.volatility_pct for r in result.recommendations]
            insights['score_statistics'] = {
                'max': max(scores),
                'min': min(scores),
                'avg': sum(scores) / len(scores),
                'count': len(scores)
            }
            insights['volatility_statistics'] = {
                'max': max(volatilities),
                'min': min(volatilities),
                'avg': sum(volatilities) / len(volatilities),
            }
            insights['high_risk_count'] = sum(1 for r in result.recommendations if r.risk_level == 'high')

        return insights
