import csv
import json

import pytest

from backpropviz.reporting import CsvSink, JsonlSink, MetricsCapture, PlotAdapter, write_summary
from backpropviz.reporting.summary import compute_auc, summarise


def test_jsonl_and_csv_sinks_record_epochs(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", dataset="xor", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for epoch, loss in enumerate([0.3, 0.2], start=1):
        jsonl.on_epoch(epoch, {"loss": loss, "accuracy": 0.5})
        csv_sink(epoch, {"loss": loss, "accuracy": 0.5})

    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert [r["epoch"] for r in records] == [1, 2]
    assert records[0]["dataset"] == "xor"
    assert records[0]["sha"] == "abc"
    assert records[1]["loss"] == 0.2

    rows = list(csv.DictReader((tmp_path / "m.csv").open()))
    assert len(rows) == 2
    assert set(rows[0]) == {"epoch", "loss", "accuracy"}


def test_summary_is_deterministic(tmp_path):
    metrics = tmp_path / "metrics.jsonl"
    metrics.write_text(
        "\n".join(json.dumps({"epoch": i, "seed": 0, "loss": 1.0 / i}) for i in range(1, 6))
    )
    first = write_summary(metrics, tmp_path / "a.json", tail=3)
    second = write_summary(metrics, tmp_path / "b.json", tail=3)
    assert open(first, "rb").read() == open(second, "rb").read()

    summary = json.loads(open(first).read())
    assert summary["records"] == 5
    assert summary["last_epoch"] == 5
    assert "seed" not in summary["metrics"]
    assert summary["metrics"]["loss"]["last"] == pytest.approx(0.2)
    assert summary["metrics"]["loss"]["max"] == pytest.approx(1.0)


def test_compute_auc_trapezoid():
    assert compute_auc([]) == 0.0
    assert compute_auc([1.0]) == 0.0
    assert compute_auc([0.0, 1.0, 1.0]) == pytest.approx(1.5)
    assert summarise([])["records"] == 0


def test_metrics_capture_keeps_history():
    capture = MetricsCapture()
    capture.on_epoch(1, {"loss": 0.5})
    capture.on_epoch(2, {"loss": 0.25})
    assert [epoch for epoch, _ in capture.history] == [1, 2]
    assert capture.last == {"loss": 0.25}


def test_plot_adapter_headless(tmp_path):
    pytest.importorskip("matplotlib")
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"loss": 0.3, "accuracy": 0.5})
    adapter.on_epoch(2, {"loss": 0.1, "accuracy": 1.0})
    path = adapter.close()
    assert path == tmp_path / "loss.png"
    assert path.exists()


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "run", enable_plots=False)
    adapter.on_epoch(1, {"loss": 0.3})
    assert adapter.close() is None
    assert not (tmp_path / "run").exists()
