"""
Ranking and grouping of analysis results.
"""
from typing import Dict, Iterable, List, Optional

from .config import Config
from .models import AnalysisResult


def rank_results(results: Iterable[AnalysisResult], limit: Optional[int] = None) -> List[AnalysisResult]:
    """
    Sort by investment score, highest first, and keep the top ``limit``.

    The sort is stable, so equal scores keep their discovery order.
    """
    ranked = sorted(results, key=lambda r: r.investment_score, reverse=True)
    if limit is None:
        return ranked
    return ranked[:max(limit, 0)]


def group_by_risk(
    results: Iterable[AnalysisResult],
    per_group: int = Config.GROUP_SIZE
) -> Dict[str, List[AnalysisResult]]:
    """Top items per membership tier and risk level."""
    results = list(results)
    groups = {
        'highRiskMembers': [r for r in results if r.members and r.risk_level == 'high'],
        'lowRiskMembers': [r for r in results if r.members and r.risk_level == 'low'],
        'highRiskF2P': [r for r in results if not r.members and r.risk_level == 'high'],
        'lowRiskF2P': [r for r in results if not r.members and r.risk_level == 'low'],
    }
    return {name: rank_results(items, per_group) for name, items in groups.items()}
