"""
Benchmark runner for the huffpack compressor

Runs the full compress -> decompress pipeline over synthetic datasets,
with repeated runs, and writes the results for later comparison

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset and size)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --sizes_kb 1,4,16,64 --generators zipf128,english_like
"""

from __future__ import annotations

import argparse
import csv
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

import huffcontainer
from hufflog import logger


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, weights: List[float], size: int) -> List[int]:
    # Inverse-CDF sampling by binary search; returns indexes into weights
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(lo)
    return out

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return bytes(_sample_cdf(rng, weights, size))

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return bytes(ord(chars[i]) for i in _sample_cdf(rng, weights, size))

def gen_single_symbol(size: int, seed: int = 0) -> bytes:
    return b'a' * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}; choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int
    max_code_bits: int

    analyze_ms: float  # frequency + tree + codes + packing
    decompress_ms: float
    total_ms: float

    bit_length: int
    header_bytes: int
    payload_bytes: int
    artifact_bytes: int
    bits_per_symbol: float
    compression_ratio: float

    correctness_ok: int  # 1 or 0


def run_one(data: bytes, dataset_name: str = "", run_id: int = 0) -> MetricRow:
    t0 = now_ns()
    report = huffcontainer.analyze(data)
    t1 = now_ns()
    decoded = huffcontainer.decompress(report.artifact)
    t2 = now_ns()

    analyze_ms = ns_to_ms(t1 - t0)
    decompress_ms = ns_to_ms(t2 - t1)

    return MetricRow(
        dataset_name=dataset_name,
        file_size_bytes=len(data),
        run_id=run_id,
        unique_symbols=len(report.frequencies),
        max_code_bits=max((len(c) for c in report.codes.values()), default=0),
        analyze_ms=analyze_ms,
        decompress_ms=decompress_ms,
        total_ms=analyze_ms + decompress_ms,
        bit_length=report.bit_length,
        header_bytes=report.header_bytes,
        payload_bytes=report.payload_bytes,
        artifact_bytes=report.artifact_bytes,
        bits_per_symbol=report.bit_length / max(1, len(data)),
        compression_ratio=report.compression_ratio,
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("compression_ratio", "bits_per_symbol", "analyze_ms", "decompress_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by dataset_name and file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (dataset_name, size_b), items in sorted(key_to.items()):
            row = {"dataset_name": dataset_name, "file_size_bytes": size_b, "n_runs": len(items)}
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            row["correctness_ok_rate"] = sum(x.correctness_ok for x in items) / len(items)
            w.writerow(row)


# Plotting

def plot_ratio_by_dataset(rows: List[MetricRow], outdir: Path) -> None:
    if not rows:
        return
    largest = max(r.file_size_bytes for r in rows)
    at_size = [r for r in rows if r.file_size_bytes == largest]
    datasets = sorted(set(r.dataset_name for r in at_size))
    x = list(range(len(datasets)))

    payload = [statistics.mean(r.payload_bytes / r.file_size_bytes for r in at_size if r.dataset_name == d) for d in datasets]
    artifact = [statistics.mean(r.compression_ratio for r in at_size if r.dataset_name == d) for d in datasets]

    plt.figure()
    plt.plot(x, payload, marker="o", label="payload only")
    plt.plot(x, artifact, marker="o", label="payload + header")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title(f"Compression Ratio by Dataset ({largest // 1024} KB)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "compression_ratio.png", dpi=200)
    plt.close()


def plot_scaling(rows: List[MetricRow], outdir: Path, field: str, ylabel: str, filename: str) -> None:
    if not rows:
        return
    plt.figure()
    for dataset in sorted(set(r.dataset_name for r in rows)):
        ds_rows = [r for r in rows if r.dataset_name == dataset]
        sizes = sorted(set(r.file_size_bytes for r in ds_rows))
        y = [statistics.mean(getattr(r, field) for r in ds_rows if r.file_size_bytes == s) for s in sizes]
        plt.plot(sizes, y, marker="o", label=dataset)
    plt.xscale("log", base=2)
    plt.xlabel("File Size (bytes)")
    plt.ylabel(ylabel)
    plt.title(f"{ylabel} vs Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / filename, dpi=200)
    plt.close()


def run_experiments(generators: List[str], sizes: List[int], runs: int, seed: int) -> List[MetricRow]:
    rows: List[MetricRow] = []
    for gen_name in generators:
        for size_b in sizes:
            for run_id in range(1, runs + 1):
                data = generate_dataset(gen_name, size_b, seed + size_b + run_id)
                row = run_one(data, gen_name, run_id)
                logger.debug(f"{gen_name} {size_b}B run {run_id}: ratio {row.compression_ratio:.3f}, {row.total_ms:.1f} ms")
                rows.append(row)
    return rows


# Main

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--sizes_kb", type=str, default="4,16,64,256", help="Comma-separated dataset sizes in KB")
    ap.add_argument("--generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")
    ap.add_argument("-v", "--verbose", action="store_true", help="Print every run")
    args = ap.parse_args(argv)

    logger.set_logger_id("experiments")
    logger.set_verbose(args.verbose)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    sizes = [max(1, int(s)) * 1024 for s in parse_csv_list(args.sizes_kb)]
    rows = run_experiments(parse_csv_list(args.generators), sizes, max(1, args.runs), args.seed)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_ratio_by_dataset(rows, outdir)
        plot_scaling(rows, outdir, "total_ms", "Total Time (ms)", "total_time.png")
        plot_scaling(rows, outdir, "bits_per_symbol", "Bits per Symbol", "bits_per_symbol.png")

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    logger.log(f"Wrote {len(rows)} rows to {metrics_csv}")
    logger.log(f"Wrote grouped summary to {summary_csv}")
    logger.log(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        logger.log("Charts saved in:", outdir.resolve())
    return 0 if ok_rate == 1.0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
