import random

import pytest

from fxnet.cli import main, next_power_of_two
from fxnet.network import NeuralNetwork


@pytest.mark.parametrize("n", [1, 2, 3, 5, 17, 1000, 5000, 100000])
def test_next_power_of_two_invariants(n):
    result = next_power_of_two(n)
    assert result >= n
    assert result < 2 * n or result == 1
    assert result & (result - 1) == 0


def test_next_power_of_two_exact_powers():
    assert next_power_of_two(1024) == 1024
    assert next_power_of_two(1) == 1


def test_next_power_of_two_rejects_non_positive():
    with pytest.raises(ValueError):
        next_power_of_two(0)


def _write_csv(path, count):
    lines = []
    for n in range(count):
        close = 0.705 + 0.001 * n
        lines.append(f"2020.01.01 00:{n:02d}\t0.7\t0.71\t0.69\t{close}\t100\r\n")
    path.write_bytes("".join(lines).encode("ascii"))


def test_main_trains_and_saves(tmp_path, capsys):
    data = tmp_path / "data.csv"
    _write_csv(data, 10)
    weights = tmp_path / "weights.fbp"
    weights.write_text("")
    status = main([
        "--data", str(data),
        "--save", str(weights),
        "--layers", "3,5",
        "--inputs", "4",
        "--datapoints", "3",
        "--epochs", "1",
        "--learning-rate", "0.1",
        "--print-after", "1",
    ])
    assert status == 0
    rng = random.Random(0)
    network = NeuralNetwork(1, [1], lambda: rng.uniform(-1, 1))
    network.load_weights(weights)
    assert network.inputs == 4
    assert [len(layer) for layer in network.weights] == [3, 5]
    assert all(len(neuron) == 5 for neuron in network.weights[0])


def test_main_missing_data_fails(tmp_path, capsys):
    status = main(["--data", str(tmp_path / "missing.csv"), "--save", str(tmp_path / "w")])
    assert status == 1
    assert "fxnet:" in capsys.readouterr().err


def test_main_rejects_bad_layers(capsys):
    with pytest.raises(SystemExit):
        main(["--layers", "a,b"])