"""
Display projections of backend report summaries.

The backend is the source of truth for every number shown here: fields are
renamed and shaped, never recomputed. A missing field raises instead of
defaulting to zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from coinview.errors import MalformedPayload
from coinview.normalize.model import RunDetail

# display attribute -> backend report key
REPORT_FIELDS: dict[str, str] = {
    "buys": "buy",
    "sells": "sell",
    "avg_buy": "buy_avg",
    "avg_sell": "sell_avg",
    "buy_volume": "buy_vol",
    "sell_volume": "sell_vol",
    "fees": "fees",
    "wallet": "wallet",
    "profit": "profit",
}


@dataclass(frozen=True)
class DisplayMetrics:
    """Per-coin trading summary for the report cards."""

    coin: str
    buys: int
    sells: int
    avg_buy: float
    avg_sell: float
    buy_volume: float
    sell_volume: float
    fees: float
    wallet: float
    profit: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_display(self) -> dict[str, str]:
        """Return a label → value dict for UI rendering."""
        return {
            "Buy / Sell": f"{self.buys} / {self.sells}",
            "Avg Buy / Sell": f"{self.avg_buy:.2f} / {self.avg_sell:.2f}",
            "Vol Buy / Sell": f"{self.buy_volume:.4f} / {self.sell_volume:.4f}",
            "Fees": f"{self.fees:.2f}",
            "Value": f"{self.wallet:.2f}",
            "PnL": f"{self.profit:+.2f}",
        }


def _field(report: Mapping[str, Any], coin: str, key: str) -> Any:
    if key not in report or report[key] is None:
        raise MalformedPayload(f"report[{coin!r}]: missing '{key}'")
    value = report[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayload(f"report[{coin!r}].{key}: expected a number, got {value!r}")
    return value


def project_report(coin: str, report: Mapping[str, Any]) -> DisplayMetrics:
    values = {attr: _field(report, coin, key) for attr, key in REPORT_FIELDS.items()}
    return DisplayMetrics(
        coin=coin,
        buys=int(values["buys"]),
        sells=int(values["sells"]),
        avg_buy=float(values["avg_buy"]),
        avg_sell=float(values["avg_sell"]),
        buy_volume=float(values["buy_volume"]),
        sell_volume=float(values["sell_volume"]),
        fees=float(values["fees"]),
        wallet=float(values["wallet"]),
        profit=float(values["profit"]),
    )


def aggregate(reports: Mapping[str, Mapping[str, Any]]) -> dict[str, DisplayMetrics]:
    """Project every coin's raw report into :class:`DisplayMetrics`."""
    if not isinstance(reports, Mapping):
        raise MalformedPayload(f"report: expected an object, got {type(reports).__name__}")
    projected: dict[str, DisplayMetrics] = {}
    for coin, report in reports.items():
        if not isinstance(report, Mapping):
            raise MalformedPayload(f"report[{coin!r}]: expected an object")
        projected[str(coin)] = project_report(str(coin), report)
    return projected


def detail_display(detail: RunDetail) -> dict[str, str]:
    """Label → value dict for a single run summary card."""
    result = detail.result
    display = {
        "Coin": detail.coin,
        "Duration": f"{detail.duration}m",
        "Trades": str(result.trades),
        "Fees": f"{result.fees:.2f}",
        "PnL": f"{result.pnl:+.2f}",
        "Value": f"{result.value:.2f}",
        "Coins": f"{result.coins:g}",
        "Threshold": f"{result.threshold:g}",
    }
    if detail.prev is not None or detail.next is not None:
        display["Prev / Next"] = f"{detail.prev} / {detail.next}"
    return display
