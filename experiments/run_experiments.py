"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs the replications of each scenario, prints one report block per
replication, and summarizes every measure with a confidence interval.

    python -m experiments.run_experiments --scenario transit --report dynamic.out
"""

from __future__ import annotations
import argparse, copy, logging, math, os, sys
from typing import Callable, Dict, List, Optional
from statistics import mean, stdev

import yaml
from scipy.stats import t

from experiments.scenarios import SCENARIOS
from tandem.config import SimConfig, read_params_file
from tandem.errors import QueueOverflow, TandemError
from tandem.metrics import ReplicationReport, format_header, format_report
from tandem.simulation import ReplicationDriver
from tandem.trace import attach_trace_file, detach

# baseline.yaml ships inside the package, so this works from an install too
DEFAULT_CFG = os.path.join(os.path.dirname(os.path.abspath(__file__)), "baseline.yaml")
DEFAULT_PLOT_DIR = "output"

logger = logging.getLogger("experiments")

def load_cfg(path: str = DEFAULT_CFG) -> Dict:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new

def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a Student t critical value with n-1 df."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, half

def sample_stddev(values: List[float]) -> float:
    """Return sample standard deviation or 0 if insufficient data."""
    if len(values) < 2:
        return 0.0
    return stdev(values)

def series(reports: List[ReplicationReport], extractor: Callable[[ReplicationReport], float]) -> List[float]:
    """Collect a numeric series from each replication report."""
    return [float(extractor(r)) for r in reports]

# (label, extractor, unit) in report order
MEASURES = [
    ("Avg delay in system", lambda r: r.mean_delay, "min"),
    ("Avg delay in queue 1", lambda r: r.stage_mean_delay[0], "min"),
    ("Avg delay in queue 2", lambda r: r.stage_mean_delay[1], "min"),
    ("Avg number in queue 1", lambda r: r.stage_mean_queue[0], ""),
    ("Avg number in queue 2", lambda r: r.stage_mean_queue[1], ""),
    ("Avg number in transit", lambda r: r.mean_in_flight, ""),
    ("Max number in transit", lambda r: r.max_in_flight, ""),
    ("Server 1 utilization", lambda r: r.utilization[0], ""),
    ("Server 2 utilization", lambda r: r.utilization[1], ""),
]

def summarize_replications(reports: List[ReplicationReport], confidence: float) -> Dict[str, tuple[float, float, float]]:
    """Map measure label -> (mean, CI half-width, sample std dev) across replications."""
    out: Dict[str, tuple[float, float, float]] = {}
    if not reports:
        return out
    for label, extractor, _ in MEASURES:
        if extractor(reports[0]) is None:
            continue  # transit measures without a transit link
        vals = series(reports, extractor)
        mu, half = mean_ci(vals, confidence)
        out[label] = (mu, half, sample_stddev(vals))
    return out

def plot_replications(reports: List[ReplicationReport], scenario_name: str, out_dir: str = DEFAULT_PLOT_DIR) -> Optional[str]:
    """
    Persist a PNG with per-replication mean delay (top) and server
    utilizations (bottom) to eyeball the spread between replications.
    """
    if not reports:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    x = [r.replication for r in reports]
    fig, (ax_d, ax_u) = plt.subplots(2, 1, figsize=(9, 6), sharex=True)
    ax_d.plot(x, [r.mean_delay for r in reports], marker="o", color="#d97706", label="System")
    ax_d.plot(x, [r.stage_mean_delay[0] for r in reports], marker=".", color="#2563eb", label="Queue 1")
    ax_d.plot(x, [r.stage_mean_delay[1] for r in reports], marker=".", color="#059669", label="Queue 2")
    ax_d.set_ylabel("Mean delay (minutes)")
    ax_d.legend()
    ax_d.grid(True, linestyle="--", alpha=0.4)
    ax_u.plot(x, [r.utilization[0] for r in reports], marker="o", color="#2563eb", label="Server 1")
    ax_u.plot(x, [r.utilization[1] for r in reports], marker="o", color="#059669", label="Server 2")
    ax_u.set_ylim(0, 1)
    ax_u.set_xlabel("Replication")
    ax_u.set_ylabel("Utilization")
    ax_u.legend()
    ax_u.grid(True, linestyle="--", alpha=0.4)
    fig.suptitle(f"{scenario_name}: per-replication measures")
    os.makedirs(out_dir, exist_ok=True)
    safe_name = scenario_name.lower().replace(" ", "_")
    out_path = os.path.join(out_dir, f"{safe_name}_replications.png")
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
    plt.close(fig)
    return out_path

def run_scenario(base_cfg: Dict, scenario: Dict, report_file=None, plot: bool = False,
                 plot_dir: str = DEFAULT_PLOT_DIR) -> List[ReplicationReport]:
    """Run every replication of one scenario and print the reports and CI summary."""
    sc_cfg = apply_overrides(base_cfg, scenario["overrides"])
    cfg = SimConfig.from_dict(sc_cfg)
    confidence = float((sc_cfg.get("experiments") or {}).get("confidence_level", 0.95))
    header = format_header(cfg)
    print(f"Scenario: {scenario['name']} (replications={cfg.replications}, seed {cfg.seed})")
    print(header)
    if report_file is not None:
        report_file.write(header + "\n")

    def _emit(report: ReplicationReport):
        block = format_report(report)
        print(block)
        if report_file is not None:
            report_file.write(block + "\n")

    reports = ReplicationDriver(cfg, on_report=_emit).run()

    print(f"Summary over {len(reports)} replications ({confidence*100:.1f}% CI):")
    for label, (mu, half, sd) in summarize_replications(reports, confidence).items():
        print(f"  {label}: {mu:.3f} ± {half:.3f} (std dev {sd:.3f})")
    if plot:
        path = plot_replications(reports, scenario["name"], out_dir=plot_dir)
        if path:
            print(f"  Per-replication plot saved to: {path}")
    print("-")
    return reports

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Tandem queueing network replications")
    p.add_argument("--config", default=DEFAULT_CFG, help="YAML config (default: the bundled baseline.yaml)")
    p.add_argument("--scenario", action="append", help="scenario name to run (repeatable; default: all)")
    p.add_argument("--params", help="legacy input file: interarrival, service 1, service 2, run length")
    p.add_argument("--report", help="also write the report blocks to this file")
    p.add_argument("--trace", help="write the per-event debug trace to this file")
    p.add_argument("--plot", action="store_true", help="save per-replication plots")
    p.add_argument("--plot-dir", default=DEFAULT_PLOT_DIR, help="directory for --plot figures (default: ./output)")
    p.add_argument("-v", "--verbose", action="store_true", help="log replication progress")
    return p

def main(argv: Optional[List[str]] = None) -> int:
    """Entry point: drive the selected scenarios and report KPIs."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    cfg = load_cfg(args.config)
    if args.params:
        cfg = apply_overrides(cfg, read_params_file(args.params))

    scenarios = SCENARIOS
    if args.scenario:
        sc_index = {s["name"]: s for s in SCENARIOS}
        missing = [n for n in args.scenario if n not in sc_index]
        if missing:
            logger.error("unknown scenario(s): %s (known: %s)", ", ".join(missing), ", ".join(sc_index))
            return 1
        scenarios = [sc_index[n] for n in args.scenario]

    report_file = open(args.report, "w") if args.report else None
    trace_handler = None
    try:
        if args.trace:
            trace_handler = attach_trace_file(args.trace)
        for sc in scenarios:
            run_scenario(cfg, sc, report_file=report_file, plot=args.plot, plot_dir=args.plot_dir)
    except TandemError as exc:
        # fatal: the remaining replications and scenarios are abandoned
        if isinstance(exc, QueueOverflow):
            logger.error("queue overflow at %s, simulated time %.3f: %s", exc.stage, exc.time, exc)
        else:
            logger.error("simulation aborted: %s", exc)
        if report_file is not None:
            report_file.write(f"\n{exc}\n")
        return 2
    finally:
        if report_file is not None:
            report_file.close()
        if trace_handler is not None:
            detach(trace_handler)
    return 0

if __name__ == "__main__":
    sys.exit(main())
