"""
CSV export of a till reconciliation summary.
"""

from __future__ import annotations

import csv
from io import StringIO

from balcao.datetime_utils import format_br_datetime, to_local
from balcao.services.till_service import ReconciliationSummary

HEADER = ["Tipo", "Nome", "Quantidade/Valor"]


def _money(value: float, currency_symbol: str) -> str:
    return f"{currency_symbol} {value:.2f}"


def summary_rows(
    summary: ReconciliationSummary,
    timezone_name: str = "America/Sao_Paulo",
    currency_symbol: str = "R$",
) -> list[list[str]]:
    """Rows of the export, before CSV encoding. Empty lists are blank separator lines."""
    rows: list[list[str]] = [HEADER, ["Resumo do Caixa"]]
    rows.append(["Data de Abertura", format_br_datetime(summary.opened_at, timezone_name)])
    if summary.closed_at:
        rows.append(["Data de Fechamento", format_br_datetime(summary.closed_at, timezone_name)])
    rows.append(["Valor Inicial", _money(summary.initial_amount, currency_symbol)])
    rows.append(["Total", _money(summary.total_sales, currency_symbol)])
    if summary.is_open:
        rows.append(
            ["Valor Final Estimado", _money(summary.estimated_final_amount, currency_symbol)]
        )
    rows.append(["Pedidos com Resgate de Pontos", str(summary.loyalty_orders_count)])
    rows.append([])

    rows.append(["Pedidos por Canal"])
    rows.extend([entry.source, str(entry.count)] for entry in summary.orders_by_source)
    rows.append([])

    rows.append(["Vendas por Forma de Pagamento"])
    rows.extend(
        [entry.method, _money(entry.total, currency_symbol)]
        for entry in summary.payment_method_totals
    )
    rows.append([])

    rows.append(["Produtos Vendidos"])
    rows.extend([entry.name, f"{entry.quantity} unidades"] for entry in summary.products_sold)
    return rows


def export_summary(
    summary: ReconciliationSummary,
    timezone_name: str = "America/Sao_Paulo",
    currency_symbol: str = "R$",
) -> str:
    """
    Render the summary as comma-separated text.

    Values containing a comma, quote or line break are quoted with inner
    quotes doubled, so `csv.reader` reads back every value unchanged.
    """
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerows(summary_rows(summary, timezone_name, currency_symbol))
    return buffer.getvalue()


def export_filename(summary: ReconciliationSummary, timezone_name: str = "America/Sao_Paulo") -> str:
    opened = to_local(summary.opened_at, timezone_name)
    return f"resumo_caixa_{opened:%Y%m%d_%H%M}.csv"
