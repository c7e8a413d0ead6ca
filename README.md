# fxnet

fxnet is a small feed-forward neural network in plain Python. It has no
dependencies outside the standard library. Every neuron uses a sigmoid
activation. The network learns one sample at a time by backpropagation on a
mean-squared-error loss. The package can also read tab-separated price files,
such as 15-minute AUD/USD candles, and train a network on them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
fxnet
```

This command loads a price file and trains a network on it, printing progress
as it goes. When training ends, it writes the weights to a file. The options
and their defaults are:

| Option | Default | Meaning |
| --- | --- | --- |
| `--data` | `Data/Stock/AUDUSD/Data15M.csv` | price data file |
| `--save` | `WeightsSaves/WeightsRCT.fbp` | weights file; it must already exist |
| `--layers` | `350,200,135,90,60,20,5` | comma-separated layer sizes |
| `--inputs` | `20` | number of network inputs |
| `--datapoints` | `100000` | samples per epoch |
| `--epochs` | `50` | number of passes over the samples |
| `--learning-rate` | `0.02` | step size |
| `--print-after` | `25` | report every this many samples; `0` turns reports off |

The command reads up to the next power of two of `--datapoints` rows from the
data file.

The command returns 0 on success. If a file error, a value error or a runtime
error occurs, it prints `fxnet: <message>` to standard error and returns 1.

## Library use

```python
import random

from fxnet.network import NeuralNetwork
from fxnet.trainer import NetworkTrainer
from fxnet.mathops import format_audusd_data, format_expected_output_audusd

# A network with 8 inputs and layers of 5, 3 and 2 neurons.
net = NeuralNetwork(8, [5, 3, 2], lambda: random.uniform(-1, 1))
outputs = net.run([0.1] * 8)
error = net.learn([0.1] * 8, [0.0, 1.0])   # loss before the step

# Train from a data file.
trainer = NetworkTrainer(20, [350, 200, 135, 90, 60, 20, 5])
trainer.load("Data/Stock/AUDUSD/Data15M.csv", format_audusd_data, 131072)
errors = trainer.train(format_expected_output_audusd, 50, 0.02, 100000, 25)
trainer.save_weights("WeightsSaves/WeightsRCT.fbp")
```

### `fxnet.network.NeuralNetwork`

- `weights[layer][neuron]` is a list whose first entry is the neuron's bias.
  The entries after it are the weights for each output of the previous layer.
  For the first layer, they are the weights for each network input.
- `alpha` is the learning rate. It defaults to 0.01.
- `run(inputs)` returns the outputs of the last layer.
- `learn(inputs, expected)` takes one gradient step and returns the loss that
  was measured before the step.
- `extract_biases()`, `extract_weights()`, `inject_biases(...)` and
  `inject_weights(...)` separate the biases from the input weights, and put
  them back.
- `save_weights(filename)` writes a length header line followed by a text
  body, and returns the length of the body. The file must already exist; it
  is written from its start. `load_weights(filename)` reads that format back.
  It replaces the weights and the input count.

### `fxnet.trainer.NetworkTrainer`

`NetworkTrainer(inputs, layers, rand_func=None)` owns a network and its data
rows. By default, the starting weights are drawn uniformly from -1 to 1.

- `load(filename, parser, max_lines)` fills `data` with the rows the parser
  returns.
- `train(format_expected, epochs, learning_rate, datapoints, print_after)`
  trains the network on sliding windows of data.
  - Each input vector joins `inputs // row_width` consecutive rows.
  - The target is `format_expected(next_row, previous_row)`.
  - The return value is the error recorded at every reporting step.
  - It raises `RuntimeError` when no data is loaded. It raises `ValueError`
    when there are not enough rows.
- `progress_bar(percent)` draws the text progress bar that is shown while
  training.

### `fxnet.mathops`

This module holds the helpers the network uses:

- vector and matrix helpers: `add`, `subtract`, `dot_product`,
  `outer_product`, `scalar_multiply`, `matrix_vector_multiply`,
  `vector_matrix_multiply`, `transpose` and `transpose_layers`;
- activation and loss functions: `sigmoid`, `sigmoid_derivative`, `loss`,
  `loss_derivative` and `squared_error`;
- network helpers: `weighted_sum`, `weighted_sums`, `layer_outputs` and
  `network_run_sum`;
- small utilities: `millis_to_string`, `sum_first` and `max_value`.

When two shapes do not match, these functions raise `ShapeMismatchError`,
which is a subclass of `ValueError`.

### Input format

Each line of a data file has this shape, and ends with a carriage return:

```
date time\topen\thigh\tlow\tclose\tvolume\r\n
```

`parse_datapoint` skips the first two fields and keeps high, low, close and
volume. It replaces the volume with `1 - |1 / volume|`. Only fields that end
in a tab or a carriage return are kept. On a line without the closing `\r`,
the volume field is therefore lost. `format_audusd_data` reads at most
`max_lines` rows; with no limit given, it reads at most 200000.

`format_expected_output_audusd(current, last)` builds a five-value target:

- the four current values;
- the relative change of the close price from `last` to `current`.

## What it does not do

- There is no command that runs a saved network on new data to make
  predictions. Use `NeuralNetwork.load_weights` and `run` from Python.
- Training runs on the CPU only, one sample at a time.
- Weights can only be saved into a file that already exists.