import io
import json
from pathlib import Path

import pytest

from cli.main import interactive_loop, main
from nnlib.core.network import Network
from nnlib.data import get_dataset


def _last_json(out):
    return json.loads(out.strip().splitlines()[-1])


def test_cli_sign_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "sign-sigmoid", "--epochs", "2"])
    payload = _last_json(capsys.readouterr().out)
    assert payload["epochs"] == 2
    run_dir = Path("runs/sign-sigmoid")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert Path(payload["summary"]).exists()


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert "sign-sigmoid" in names and "mnist-relu" in names


def test_cli_overrides_and_dump_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  run_dir: custom-run\n  eta: 0.5\n")
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "sign-relu",
            "--config",
            str(override),
            "--nonlinearity",
            "sigmoid",
            "--seed",
            "4",
            "--epochs",
            "1",
            "--dump-config",
            str(dump),
        ]
    )
    resolved = json.loads(dump.read_text())
    assert resolved["model"]["nonlinearity"] == "sigmoid"
    assert resolved["train"]["seed"] == 4
    assert resolved["train"]["eta"] == 0.5
    assert resolved["train"]["mini_batch_size"] == 10
    payload = _last_json(capsys.readouterr().out)
    assert payload["metrics"] == str(Path("custom-run") / "metrics.jsonl")


def test_cli_show_predictions_for_images(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "small.json"
    override.write_text(json.dumps({"data": {"options": {"offline_train": 10, "offline_test": 2}}}))
    main(["--preset", "mnist-sigmoid", "--config", str(override), "--epochs", "1", "--show-predictions", "2"])
    out = capsys.readouterr().out
    assert out.count("Actual:") == 2
    assert "█" in out
    assert _last_json(out)["epochs"] == 1


def test_cli_mnist_dir_requires_mnist_preset(tmp_path):
    with pytest.raises(SystemExit):
        main(["--preset", "sign-sigmoid", "--mnist-dir", str(tmp_path)])


def test_interactive_loop_classifies_stdin_lines():
    dataset = get_dataset("sign", n_train=0, n_test=0)
    network = Network([1, 2], seed=0)
    out = io.StringIO()
    interactive_loop(network, dataset, stdin=io.StringIO("1.5\n\nnot-a-number\n-2\n"), out=out)
    lines = out.getvalue().splitlines()
    assert lines[0] == "Input: [1.5]"
    assert lines[1].startswith("Output: [")
    assert lines[2] in {"Prediction: positive", "Prediction: negative"}
    assert len(lines) == 6


def test_interactive_loop_requires_single_input():
    dataset = get_dataset("mnist", offline=True, offline_train=0, offline_test=0)
    with pytest.raises(SystemExit):
        interactive_loop(Network([784, 10], seed=0), dataset, stdin=io.StringIO(""))
