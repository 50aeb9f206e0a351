"""Monthly KPI trend series"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from collections_kpi.domain.kpis import calculate_kpis
from collections_kpi.domain.models import Invoice, MonthlyStats
from collections_kpi.domain.parameters import DEFAULT_PARAMETERS, GlobalParameters
from collections_kpi.domain.periods import basis_date
from collections_kpi.utils.date_utils import month_key


def calculate_monthly_stats(
    invoices: Sequence[Invoice],
    params: GlobalParameters = DEFAULT_PARAMETERS,
    today: Optional[date] = None,
) -> List[MonthlyStats]:
    """Bucket invoices by YYYY-MM of the configured date basis, oldest month first"""
    today = today or date.today()

    grouped: Dict[str, List[Invoice]] = {}
    for inv in invoices:
        grouped.setdefault(month_key(basis_date(inv, params.date_basis)), []).append(inv)

    stats = []
    for month in sorted(grouped):
        kpis = calculate_kpis(grouped[month], params, today)
        stats.append(
            MonthlyStats(
                month=month,
                sales=kpis.total_amount,
                collected=kpis.total_collected,
                outstanding=kpis.total_outstanding,
                dso=kpis.dso,
                cei=kpis.cei,
                collection_rate=kpis.collection_rate,
            )
        )
    return stats
