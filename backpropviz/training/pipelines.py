"""Preset configurations and end-to-end training runs."""

from __future__ import annotations

import json
import os
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from ..core.errors import ConfigurationError
from ..core.network import DEFAULT_LEARNING_RATE, FeedforwardNetwork
from ..core.types import RunResult
from ..data import get_dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import collect_predictions, default_metrics
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [4]},
        "train": {
            "epochs": 5000,
            "lr": 0.5,
            "seed": 7,
            "target_accuracy": 1.0,
            "target_error": 0.01,
            "eval_every": 10,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "and": {
        "data": {"name": "and", "options": {}},
        "model": {"hidden": [4]},
        "train": {
            "epochs": 2000,
            "lr": 0.5,
            "seed": 1,
            "eval_every": 10,
            "run_dir": "runs/and",
            "enable_plots": False,
        },
    },
    "or": {
        "data": {"name": "or", "options": {}},
        "model": {"hidden": [3]},
        "train": {
            "epochs": 1000,
            "lr": 0.5,
            "seed": 2,
            "eval_every": 10,
            "run_dir": "runs/or",
            "enable_plots": False,
        },
    },
    "patterns": {
        "data": {
            "name": "patterns",
            "options": {"noisy_copies": 4, "noise": 0.08, "seed": 0},
        },
        "model": {"hidden": [8]},
        "train": {
            "epochs": 300,
            "lr": 0.5,
            "seed": 3,
            "target_accuracy": 1.0,
            "target_error": 0.005,
            "run_dir": "runs/patterns",
            "enable_plots": False,
        },
    },
    "xor-hidden-sweep": {
        "sweep": {"hidden": [[2], [4], [4, 4]], "seeds": [0, 1]},
        "data": {"name": "xor", "options": {}},
        "model": {},
        "train": {
            "epochs": 3000,
            "lr": 0.5,
            "target_accuracy": 1.0,
            "eval_every": 50,
            "run_dir": "runs/xor-sweep",
            "enable_plots": False,
        },
    },
}

_DEFAULT_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def _preset_dir() -> Path:
    return Path(os.environ.get("BACKPROPVIZ_PRESET_DIR") or _DEFAULT_PRESET_DIR)


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    directory = _preset_dir()
    if not directory.exists():
        return presets
    for file in sorted(directory.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = _REQUIRED_SECTIONS - set(data)
        if missing:
            missing_str = ", ".join(sorted(missing))
            raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
        presets[file.stem] = json.loads(json.dumps(data))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise ConfigurationError(f"Config is missing sections: {', '.join(sorted(missing))}")
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(config["train"].get("run_dir", "runs/sweep"))
    results: List[RunResult] = []
    for hidden in sweep_cfg.get("hidden", [config["model"].get("hidden", [])]):
        for seed in sweep_cfg.get("seeds", [config["train"].get("seed", 0)]):
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            cfg["model"] = dict(cfg["model"], hidden=list(hidden))
            layout = "x".join(str(h) for h in hidden) or "none"
            cfg["train"] = dict(
                cfg["train"],
                seed=seed,
                run_dir=str(base_dir / f"hidden-{layout}" / f"seed-{seed}"),
            )
            results.append(_train_single(cfg))
    return results


def _build_dims(model_cfg: Mapping[str, object], d_in: int, d_out: int) -> List[int]:
    for key, observed in (("d_in", d_in), ("d_out", d_out)):
        if key in model_cfg and int(model_cfg[key]) != observed:
            raise ConfigurationError(
                f"Configured {key}={model_cfg[key]} but the dataset provides {observed}"
            )
    hidden = model_cfg.get("hidden", [])
    if isinstance(hidden, (int, str)) or not isinstance(hidden, Sequence):
        raise ConfigurationError(f"model.hidden must be a list of widths, got {hidden!r}")
    return [d_in, *(int(h) for h in hidden), d_out]


def _train_single(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    optimizer_name = str(train_cfg.get("optimizer", "sgd")).lower()
    if optimizer_name != "sgd":
        raise ConfigurationError("Only online 'sgd' training is supported")

    dataset = get_dataset(str(data_cfg["name"]), **data_cfg.get("options", {}))
    data_spec = dataset.data_spec
    dims = _build_dims(model_cfg, data_spec.d_in, data_spec.d_out)

    seed = int(train_cfg.get("seed", 0))
    lr = float(train_cfg.get("lr", DEFAULT_LEARNING_RATE))
    epochs = int(train_cfg.get("epochs", 1000))
    target_accuracy = train_cfg.get("target_accuracy")
    target_error = train_cfg.get("target_error")
    metric_names = train_cfg.get("metrics") or default_metrics(data_spec.task_type)
    if isinstance(metric_names, str):
        metric_names = [m.strip() for m in metric_names.split(",") if m.strip()]

    network = FeedforwardNetwork(dims, learning_rate=lr, seed=seed)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=dims,
        examples=len(dataset),
        lr=lr,
        epochs=epochs,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", dataset=dataset.name, seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    capture = MetricsCapture()
    trainer = Trainer(network, callbacks=[jsonl, csv_sink, plots, capture])

    result = trainer.run(
        dataset,
        epochs,
        target_accuracy=float(target_accuracy) if target_accuracy is not None else None,
        target_error=float(target_error) if target_error is not None else None,
        eval_every=int(train_cfg.get("eval_every", 1)),
        metric_names=metric_names,
    )
    plots.close()

    predictions, _ = collect_predictions(network, dataset)
    (run_dir / "predictions.json").write_text(
        json.dumps(
            [
                {
                    "label": example.label,
                    "inputs": list(example.inputs),
                    "targets": list(example.targets),
                    "outputs": [round(float(v), 6) for v in row],
                }
                for example, row in zip(dataset, predictions)
            ],
            indent=2,
        )
    )

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network={
            "layer_sizes": dims,
            "parameters": network.parameter_count(),
            "epochs": result.epochs,
            "steps": result.steps,
            "reason": result.reason,
        },
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=result.epochs,
        accuracy=result.final_accuracy,
        loss=result.final_loss,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(train_cfg["run_dir"])
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Iterable[int],
    examples: int,
    lr: float,
    epochs: int,
    param_count: int,
) -> None:
    print("=== backpropviz run ===")
    print(f"Dataset       : {dataset_name} ({examples} examples)")
    print(f"Layer sizes   : {list(dims)}")
    print(f"Learning rate : {lr}")
    print(f"Max epochs    : {epochs}")
    print(f"Parameters    : {param_count}")
    print("=======================")


__all__ = ["load_preset", "presets", "read_config_file", "run_pipeline"]
