import random

import pytest

from fxnet.mathops import format_audusd_data, format_expected_output_audusd
from fxnet.trainer import NetworkTrainer, progress_bar


def _seeded(seed=0):
    rng = random.Random(seed)
    return lambda: rng.uniform(-1.0, 1.0)


def _rows(count):
    return [[0.7 + 0.001 * n, 0.69 + 0.001 * n, 0.695 + 0.001 * n, 0.5] for n in range(count)]


def _write_csv(path, count):
    lines = []
    for n in range(count):
        high = 0.71 + 0.001 * n
        lines.append(f"2020.01.01 00:{n:02d}\t0.7\t{high}\t0.69\t0.705\t100\r\n")
    path.write_bytes("".join(lines).encode("ascii"))


@pytest.mark.parametrize("percent", [0.0, 10.1, 50.5, 75.8, 33.3])
def test_progress_bar_shape(percent):
    bar = progress_bar(percent)
    prefix = f"{percent:f}% "
    assert bar.startswith(prefix)
    body = bar[len(prefix):]
    assert body.count("█") == int(percent) + 1
    assert len(body) == 100


def test_progress_bar_markers():
    assert progress_bar(50.5)[len("50.500000% "):].count("|") == 1
    assert "#" in progress_bar(10.8)
    assert "/" in progress_bar(10.3)
    assert progress_bar(0.0) == "0.000000% █" + "-" * 99


def test_train_without_data_raises():
    trainer = NetworkTrainer(4, [3, 5], _seeded())
    with pytest.raises(RuntimeError):
        trainer.train(format_expected_output_audusd, 1, 0.1, 1, 1)


def test_train_too_many_datapoints_raises():
    trainer = NetworkTrainer(4, [3, 5], _seeded())
    trainer.data = _rows(5)
    with pytest.raises(ValueError):
        trainer.train(format_expected_output_audusd, 1, 0.1, 6, 1)
    with pytest.raises(ValueError):
        trainer.train(format_expected_output_audusd, 1, 0.1, 0, 1)
    with pytest.raises(ValueError):
        trainer.train(format_expected_output_audusd, 1, 0.1, 5, 1)


def test_train_history_length_and_values(capsys):
    trainer = NetworkTrainer(8, [4, 5], _seeded(1))
    trainer.data = _rows(10)
    history = trainer.train(format_expected_output_audusd, 2, 0.05, 6, 2)
    assert len(history) == 6
    assert all(value >= 0 for value in history)
    assert trainer.network.alpha == 0.05
    assert "complete, Average Error" in capsys.readouterr().out


def test_train_zero_print_after_records_nothing(capsys):
    trainer = NetworkTrainer(4, [3, 5], _seeded(2))
    trainer.data = _rows(6)
    assert trainer.train(format_expected_output_audusd, 1, 0.1, 4, 0) == []


def test_train_passes_following_rows_to_formatter(capsys):
    trainer = NetworkTrainer(8, [3, 5], _seeded(3))
    rows = _rows(8)
    trainer.data = [list(row) for row in rows]
    calls = []

    def record(current, last):
        calls.append((list(current), list(last)))
        return format_expected_output_audusd(current, last)

    history = trainer.train(record, 1, 0.1, 5, 1)
    assert len(history) == 5
    assert [current for current, _ in calls] == rows[2:7]
    assert [last for _, last in calls] == rows[1:6]


def test_load_reads_rows(tmp_path, capsys):
    path = tmp_path / "data.csv"
    _write_csv(path, 3)
    trainer = NetworkTrainer(4, [3, 5], _seeded())
    trainer.load(path, format_audusd_data, -1)
    assert len(trainer.data) == 3
    assert trainer.data[0][:3] == pytest.approx([0.71, 0.69, 0.705])
    assert "Loaded 3 Lines" in capsys.readouterr().out


def test_load_respects_max_lines(tmp_path, capsys):
    path = tmp_path / "data.csv"
    _write_csv(path, 6)
    trainer = NetworkTrainer(4, [3, 5], _seeded())
    trainer.load(path, format_audusd_data, 4)
    assert len(trainer.data) == 4


def test_load_missing_file_raises(tmp_path, capsys):
    trainer = NetworkTrainer(4, [3, 5], _seeded())
    with pytest.raises(FileNotFoundError):
        trainer.load(tmp_path / "missing.csv", format_audusd_data, -1)


def test_save_and_load_weights_round_trip(tmp_path):
    path = tmp_path / "weights.fbp"
    path.write_text("")
    source = NetworkTrainer(3, [2, 4], _seeded(4))
    length = source.save_weights(path)
    assert int(path.read_text().split("\n", 1)[0]) == length

    target = NetworkTrainer(3, [2, 4], _seeded(5))
    target.load_weights(path)
    for layer_a, layer_b in zip(source.network.weights, target.network.weights):
        for neuron_a, neuron_b in zip(layer_a, layer_b):
            assert neuron_b == pytest.approx(neuron_a, abs=1e-6)
    assert target.network.inputs == 3