import csv

import pytest

import experiments as exp


def test_do_it_all_reports_and_roundtrips():
    lines = []
    assert exp.do_it_all("aaabbbbbccddd", out=lines.append) == "aaabbbbbccddd"
    assert "Uncompressed size: 104 bits" in lines
    assert "Compressed size: 26 bits" in lines
    assert "'b': 5" in lines


def test_do_it_all_single_symbol():
    lines = []
    assert exp.do_it_all("aaaa", out=lines.append) == "aaaa"
    assert "Compressed size: 4 bits" in lines


@pytest.mark.parametrize("name", sorted(exp.GENERATOR_REGISTRY))
def test_generators_are_deterministic(name):
    a = exp.generate_dataset(name, 200, seed=7)
    b = exp.generate_dataset(name, 200, seed=7)
    assert a == b
    assert a[0] == name
    assert len(a[1]) == 200


def test_unknown_generator_falls_back():
    name, text = exp.generate_dataset("nope", 50, seed=1)
    assert name == "nope_fallback_uniform"
    assert len(text) == 50


def test_run_one_metrics():
    row = exp.run_one("aaabbbbbccddd")
    assert row.correctness_ok == 1
    assert row.unique_symbols == 4
    assert row.uncompressed_bits == 104
    assert row.compressed_bits == 26
    assert row.avg_code_length == pytest.approx(2.0)
    assert row.entropy_bits <= row.avg_code_length < row.entropy_bits + 1


def test_run_one_empty_text():
    row = exp.run_one("")
    assert row.correctness_ok == 1
    assert row.compressed_bits == 0
    assert row.compression_ratio == 0.0


def test_main_text_mode(capsys):
    assert exp.main(["--text", "dagoth ur was a hotep"]) == 0
    assert "Decoded string:" in capsys.readouterr().out


def test_main_writes_csv_and_plots(tmp_path):
    rc = exp.main([
        "--outdir", str(tmp_path), "--runs", "2", "--sizes", "50,200",
        "--generators", "uniform,repetitive90",
    ])
    assert rc == 0

    with (tmp_path / "metrics.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2 * 2 * 2
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (tmp_path / "summary.csv").open(encoding="utf-8") as f:
        summary = list(csv.DictReader(f))
    assert len(summary) == 4
    assert all(float(r["correctness_ok_rate"]) == 1.0 for r in summary)

    assert (tmp_path / "compression_ratio.png").exists()
    assert (tmp_path / "total_time_vs_size.png").exists()
