"""
Utils Module for Scripts
========================

Contains utility functions for scripts: argument validators and the construction
of a GLRM from a YAML configuration.

A configuration looks like:

    rank: 2
    seed: 42
    init: svd
    losses: quadratic            # or one entry per column
    rx: {name: quadratic, scale: 0.1}
    ry: zero
    params:
      stepsize: 1.0
      max_iter: 100
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from proxglrm.algorithms.proxgrad import ProxGradParams
from proxglrm.losses import LOSSES, Loss
from proxglrm.models.glrm import GLRM
from proxglrm.preprocessing.dataloader import DataLoader
from proxglrm.regularizers import REGULARIZERS, Regularizer
from proxglrm.utils import load_yaml

Entry = Union[str, Dict[str, Any]]


def _build(entry: Entry, registry: Dict[str, type], kind: str) -> Any:
    if isinstance(entry, str):
        name, kwargs = entry, {}
    elif isinstance(entry, dict) and "name" in entry:
        kwargs = dict(entry)
        name = kwargs.pop("name")
    else:
        raise TypeError(
            f"A {kind} must be given as a name or a mapping with a `name` key, "
            f"got {entry!r}."
        )
    if name not in registry:
        raise ValueError(
            f"Unknown {kind} '{name}'. Expected one of {sorted(registry)}."
        )
    return registry[name](**kwargs)


def build_loss(entry: Entry) -> Loss:
    """Instantiate a loss from its configuration entry."""
    return _build(entry, LOSSES, "loss")


def build_regularizer(entry: Entry) -> Regularizer:
    """Instantiate a regularizer from its configuration entry."""
    return _build(entry, REGULARIZERS, "regularizer")


def build_losses(entries: Union[Entry, List[Entry]], nb_features: int) -> List[Loss]:
    """
    Instantiate one loss per feature.

    Args:
        entries (Union[Entry, List[Entry]]): A single entry shared by every feature
            or a list with one entry per feature.
        nb_features (int): Number of features.

    Returns:
        List[Loss]: The losses.

    Raises:
        ValueError: If a list of the wrong length is given.
    """
    if isinstance(entries, list):
        if len(entries) != nb_features:
            raise ValueError(
                f"Expected {nb_features} losses in the configuration, got {len(entries)}."
            )
        return [build_loss(entry) for entry in entries]
    return [build_loss(entries) for _ in range(nb_features)]


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load and check a fit configuration.

    Args:
        config_path (Path): Path of the YAML configuration.

    Returns:
        Dict[str, Any]: The configuration.

    Raises:
        KeyError: If `rank` is missing.
        ValueError: If `init` is neither "random" nor "svd".
    """
    logger = logging.getLogger("load_config")
    logger.debug("Loading configuration: %s", config_path)
    config = load_yaml(config_path)
    if "rank" not in config:
        raise KeyError(
            "rank not found in configuration file. "
            "Make sure it is set before running the script again."
        )
    if config.get("init", "random") not in ("random", "svd"):
        raise ValueError(
            f"`init` must be either 'random' or 'svd', got {config['init']!r}."
        )
    return config


def build_model(dataloader: DataLoader, config: Dict[str, Any]) -> GLRM:
    """
    Build the GLRM described by `config` on the data of `dataloader`.

    Args:
        dataloader (DataLoader): The loaded data.
        config (Dict[str, Any]): A configuration returned by `load_config`.

    Returns:
        GLRM: The initialized model.
    """
    nb_features = dataloader.matrix.shape[1]
    glrm = GLRM(
        dataloader.matrix,
        losses=build_losses(config.get("losses", "quadratic"), nb_features),
        rx=build_regularizer(config.get("rx", "zero")),
        ry=build_regularizer(config.get("ry", "zero")),
        k=config["rank"],
        observed_features=dataloader.observed_features,
        observed_examples=dataloader.observed_examples,
        seed=config.get("seed"),
    )
    if config.get("init", "random") == "svd":
        glrm.init_svd()
    return glrm


def build_params(config: Dict[str, Any]) -> ProxGradParams:
    """Proximal gradient parameters of `config`, defaults when absent."""
    return ProxGradParams.from_dict(config.get("params") or {})


def csv_file(path: str) -> Path:
    """Validate that the given path exists and points to a CSV file.

    Args:
        path (str): The file-system path to check.

    Returns:
        Path: A pathlib.Path instance for the validated CSV file.

    Raises:
        argparse.ArgumentTypeError: If the path does not exist or does not end with “.csv”.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise argparse.ArgumentTypeError(f"'{path}' does not exist.")
    if file_path.suffix.lower() != ".csv":
        raise argparse.ArgumentTypeError(f"'{path}' is not a CSV file.")
    return file_path


def yaml_file(path: str) -> Path:
    """Validate that the given path exists and points to a YAML file.

    Args:
        path (str): The file-system path to check.

    Returns:
        Path: A pathlib.Path instance for the validated YAML file.

    Raises:
        argparse.ArgumentTypeError: If the path does not exist or does not end with
            “.yaml” or “.yml”.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise argparse.ArgumentTypeError(f"'{path}' does not exist.")
    if file_path.suffix.lower() not in (".yaml", ".yml"):
        raise argparse.ArgumentTypeError(f"'{path}' is not a YAML file.")
    return file_path


def output_dir(path: str) -> Path:
    """
    Ensure that the given path exists as a directory, creating it (and any
    missing parent directories) if necessary.

    Args:
        path (str): Filesystem path to the desired output directory.

    Returns:
        Path: A pathlib.Path object for the created or existing directory.
    """
    file_path = Path(path)
    file_path.mkdir(parents=True, exist_ok=True)
    return file_path
