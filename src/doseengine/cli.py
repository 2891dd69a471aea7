import argparse
import csv
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .types import SimulationSettings
from .dosing import daily_doses, combine_regimens
from .simulate import run
from .metrics import cmax, tmax, auc_trapz, peak_to_trough_ratio, fluctuation_index
from .helpers import from_epoch_ms

logger = logging.getLogger(__name__)


def parse_dose(text: str) -> Tuple[datetime, float]:
    """'2024-05-01T08:00,30' -> (datetime(2024, 5, 1, 8, 0), 30.0)"""
    try:
        when, amount = text.split(",")
        return datetime.fromisoformat(when.strip()), float(amount)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"dose must look like YYYY-MM-DDTHH:MM,MG (got {text!r})") from exc


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationSettings()
    parser = argparse.ArgumentParser(description="Simulate plasma concentration for a dose schedule")
    parser.add_argument("--dose", type=parse_dose, action="append", required=True,
                        help="Dose as YYYY-MM-DDTHH:MM,MG (local time); repeat for more doses")
    parser.add_argument("--daily", type=int, default=1,
                        help="Repeat every --dose daily for this many days")
    parser.add_argument("--half-life", type=float, default=defaults.half_life_h, help="Elimination half-life (h)")
    parser.add_argument("--days", type=float, default=defaults.simulation_days, help="Simulation window (days)")
    parser.add_argument("--step", type=float, default=defaults.time_step_h, help="Time step (h)")
    parser.add_argument("--tmax", type=float, default=defaults.target_tmax_h, help="Target time-to-peak (h)")
    parser.add_argument("--csv", type=str, default="concentration.csv", help="Output CSV path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run_cli(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        regimen = combine_regimens(*(daily_doses(amount, when, args.daily) for when, amount in args.dose))
    except ValueError as exc:
        parser.error(str(exc))

    settings = SimulationSettings(
        half_life_h=args.half_life,
        simulation_days=args.days,
        time_step_h=args.step,
        target_tmax_h=args.tmax,
    )
    series = run(regimen, settings)
    logger.info("simulated %d doses, %d points", len(regimen), len(series))

    with open(args.csv, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time_ms", "local_time", "hours", "concentration"])
        for t_ms, h, c in zip(series.times_ms, series.hours, series.values):
            writer.writerow([int(t_ms), from_epoch_ms(int(t_ms)).isoformat(timespec="minutes"), float(h), float(c)])

    if not series.is_empty:
        summary = f"Cmax {cmax(series):.3f} at {from_epoch_ms(tmax(series)):%Y-%m-%d %H:%M} | AUC {auc_trapz(series):.1f}"
        if args.daily > 1:
            # dosing interval is one day; ratios over the last 24 h of the window
            summary += (f" | PTR {peak_to_trough_ratio(series, interval_h=24):.2f}"
                        f" FI {fluctuation_index(series, interval_h=24):.2f} (last 24 h)")
        print(summary)


if __name__ == "__main__":
    run_cli()
