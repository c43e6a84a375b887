"""
Huffman tree coding: demo and compression experiments

Runs the whole pipeline (count -> build -> code table -> encode -> decode)
on synthetic text, with repeated runs, and reports how well it compresses

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --text "aaabbbbbccddd"
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --sizes 1000,10000 --generators uniform,english_like
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[str, int]) -> float:
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values())

def average_code_length(ft: Dict[str, int], code_map: Dict[str, str]) -> float:
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return sum(ft[s] * len(code_map[s]) for s in ft) / total


def do_it_all(text: str, out: Callable[[str], None] = print) -> str:
    """
    Runs every step on one text and reports each intermediate result
    Returns the decoded text
    """
    uncompressed_size = len(text) * 8
    ft = huff.count_frequencies(text)
    out("Character map:")
    for symbol, count in ft.items():
        out(f"{symbol!r}: {count}")

    tree = huff.build_tree(ft)
    code_map = huff.generate_code_table(tree)
    out("Huffman codes:")
    for symbol, code in code_map.items():
        out(f"{symbol!r}: {code}")

    encoded = huff.encode(text, code_map)
    out("Encoded string:")
    out(encoded)

    decoded = huff.decode(tree, encoded)
    out("Decoded string:")
    out(decoded)
    out(f"Uncompressed size: {uncompressed_size} bits")
    out(f"Compressed size: {len(encoded)} bits")
    return decoded


# Synthetic dataset generators

ALPHABET = string.ascii_letters + string.digits + string.punctuation + " \n"

def _sample(rng: random.Random, chars: str, weights: List[float], size: int) -> str:
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
        out.append(chars[lo])
    return "".join(out)

def gen_uniform(size: int, alphabet: str = ALPHABET, seed: int = 0) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: str = "a", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = [c for c in ALPHABET if c != dominant]
    return "".join(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: str = ALPHABET, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(len(alphabet))]
    return _sample(rng, alphabet, weights, size)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        ".,\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in ".,\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(rng, chars, weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform": lambda size, seed: gen_uniform(size, seed=seed),
    "zipf": lambda size, seed: gen_zipf_like(size, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, str]:
    """
    Unknown dataset names fall back to uniform so a typo does not abort a long run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform", gen_uniform(size, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    dataset_name: str
    text_length: int
    run_id: int
    unique_symbols: int
    tree_height: int

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    uncompressed_bits: int
    compressed_bits: int
    compression_ratio: float
    avg_code_length: float
    entropy_bits: float
    correctness_ok: int  # 1 or 0


def run_one(text: str) -> MetricRow:
    ft = huff.count_frequencies(text)

    t0 = now_ns()
    tree = huff.build_tree(ft)
    code_map = huff.generate_code_table(tree)
    t1 = now_ns()
    build_ms = ns_to_ms(t1 - t0)

    t2 = now_ns()
    encoded = huff.encode(text, code_map)
    t3 = now_ns()
    encode_ms = ns_to_ms(t3 - t2)

    t4 = now_ns()
    try:
        decoded = huff.decode(tree, encoded)
    except huff.MalformedStreamError as e:
        print(f"Decode failed: {e}")
        decoded = None
    t5 = now_ns()
    decode_ms = ns_to_ms(t5 - t4)

    uncompressed_bits = len(text) * 8
    return MetricRow(
        dataset_name="",
        text_length=len(text),
        run_id=0,
        unique_symbols=len(ft),
        tree_height=tree.height,
        build_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        uncompressed_bits=uncompressed_bits,
        compressed_bits=len(encoded),
        compression_ratio=len(encoded) / max(1, uncompressed_bits),
        avg_code_length=average_code_length(ft, code_map),
        entropy_bits=shannon_entropy(ft),
        correctness_ok=1 if decoded == text else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by dataset_name, text_length and compute mean/stdev
    """
    key_to: Dict[Tuple[str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.dataset_name, r.text_length), []).append(r)

    averaged = ["compression_ratio", "avg_code_length", "entropy_bits", "build_ms", "encode_ms", "decode_ms", "total_ms"]
    summary_fields = ["dataset_name", "text_length", "n_runs"]
    for field in averaged:
        summary_fields += [f"{field}_mean", f"{field}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (dataset_name, length), items in sorted(key_to.items()):
            out = {"dataset_name": dataset_name, "text_length": length, "n_runs": len(items)}
            for field in averaged:
                m, s = mean_stdev([getattr(x, field) for x in items])
                out[f"{field}_mean"] = m
                out[f"{field}_stdev"] = s
            out["correctness_ok_rate"] = sum(x.correctness_ok for x in items) / len(items)
            w.writerow(out)


# Plotting

def plot_by_dataset(rows: List[MetricRow], outdir: Path) -> None:
    if not rows:
        return

    datasets = sorted(set(r.dataset_name for r in rows))
    largest = max(r.text_length for r in rows)
    x = list(range(len(datasets)))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in rows if r.dataset_name == dataset and r.text_length == largest]
        return statistics.mean(vals) if vals else float("nan")

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_length") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", linestyle="--", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title(f"Average Code Length vs Entropy ({largest} chars)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "code_length_vs_entropy.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(x, [mean_for(d, "compression_ratio") for d in datasets], marker="o")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Encoded Bits / Uncompressed Bits")
    plt.title(f"Compression Ratio by Distribution ({largest} chars)")
    plt.tight_layout()
    plt.savefig(outdir / "compression_ratio.png", dpi=200)
    plt.close()


def plot_size_scaling(rows: List[MetricRow], outdir: Path) -> None:
    if not rows:
        return

    plt.figure()
    for dist in sorted(set(r.dataset_name for r in rows)):
        dist_rows = [r for r in rows if r.dataset_name == dist]
        sizes = sorted(set(r.text_length for r in dist_rows))
        y = [statistics.mean(r.total_ms for r in dist_rows if r.text_length == s) for s in sizes]
        plt.plot(sizes, y, marker="o", label=dist)
    plt.xlabel("Text Length (chars)")
    plt.ylabel("Total Time (ms) (build + encode + decode)")
    plt.title("Total Runtime vs Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "total_time_vs_size.png", dpi=200)
    plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman tree coding demo and experiments")
    ap.add_argument("--text", type=str, default=None, help="Encode and decode this text, print every step, then exit")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--sizes", type=str, default="1000,10000,100000",
                    help="Comma-separated text lengths in characters")
    ap.add_argument("--generators", type=str, default="uniform,zipf,repetitive90,english_like",
                    help="Comma-separated dataset generator names")
    ap.add_argument("--no_plots", action="store_true", help="Skip writing charts")

    args = ap.parse_args(argv)

    if args.text is not None:
        try:
            decoded = do_it_all(args.text)
        except huff.HuffmanError as e:
            print(f"Error: {e}")
            return 1
        return 0 if decoded == args.text else 1

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    sizes = [max(1, int(s)) for s in parse_csv_list(args.sizes)]
    rows: List[MetricRow] = []

    for gen_name in parse_csv_list(args.generators):
        for size in sizes:
            for run_id in range(1, args.runs + 1):
                dataset_name, text = generate_dataset(gen_name, size, args.seed + size + run_id)
                row = run_one(text)
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_by_dataset(rows, outdir)
        plot_size_scaling(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
