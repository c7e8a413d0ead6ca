[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "fxnet"
version = "0.1.0"
description = "A small feed-forward sigmoid neural network trained on tab-separated currency price data"
requires-python = ">=3.10"
dependencies = []
keywords = ["neural network", "backpropagation", "sigmoid", "forex", "time series"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fxnet = "fxnet.cli:main"

[tool.setuptools.packages.find]
include = ["fxnet*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
