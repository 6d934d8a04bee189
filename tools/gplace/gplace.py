# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Global placement of an analog circuit.

The circuit is read from a YAML (or JSON) file, placed with the analytical
placer and the resulting locations are printed or written into a new file.
"""

import argparse
import logging
from typing import Any, Optional

from aplace.circuit.circuit import Circuit
from aplace.nlp.config import PlacerConfig, STEPS, INITS
from aplace.nlp.placer import GlobalPlacer, PlacementResult

logger = logging.getLogger(__name__)


def parse_options(prog: Optional[str] = None, args: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Parse the command-line arguments for the tool
    :param prog: tool name
    :param args: command-line arguments
    :return: a dictionary with the arguments
    """
    parser = argparse.ArgumentParser(prog=prog, description="Analytical global placement of an analog circuit")
    parser.add_argument("--circuit", required=True, help="input file (circuit)")
    parser.add_argument("--config", help="configuration file of the placer (YAML or JSON)")
    parser.add_argument("-i", "--iterations", type=int, help="maximum number of iterations")
    parser.add_argument("-a", "--alpha", type=float, help="smoothing parameter of the objective")
    parser.add_argument("--sequential", action="store_true", help="run the tasks sequentially")
    parser.add_argument("--workers", type=int, help="number of threads of the pool")
    parser.add_argument("--seed", type=int, help="seed of the random initial placement")
    parser.add_argument("--init", choices=INITS, help="initial placement")
    parser.add_argument("--step", choices=STEPS, help="update step of the iterations")
    parser.add_argument("--out-circuit", help="output file (circuit with locations)")
    parser.add_argument("-v", "--verbose", action="store_true", help="print the objective at every iteration")
    return vars(parser.parse_args(args))


def build_config(options: dict[str, Any]) -> PlacerConfig:
    """
    Creates the configuration of the placer: the configuration file (if any)
    overridden by the command-line options
    :param options: the command-line options
    :return: the configuration
    """
    config = PlacerConfig.from_yaml(options["config"]) if options["config"] is not None else PlacerConfig()
    overrides = {"max_iter": options["iterations"], "alpha": options["alpha"], "num_workers": options["workers"],
                 "seed": options["seed"], "init": options["init"], "step": options["step"]}
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if options["sequential"]:
        config.execution = "sequential"
    return config


def gplace(circuit: Circuit, config: PlacerConfig) -> PlacementResult:
    """
    Places a circuit. The locations are written into the circuit
    :param circuit: the circuit
    :param config: the configuration of the placer
    :return: the result of the placement
    """
    return GlobalPlacer(circuit, config).solve()


def main(prog: Optional[str] = None, args: Optional[list[str]] = None) -> None:
    """Main function."""
    options = parse_options(prog, args)
    logging.basicConfig(level=logging.DEBUG if options["verbose"] else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    circuit = Circuit(options["circuit"])
    config = build_config(options)
    result = gplace(circuit, config)
    logger.info("%d iterations, %s", result.iterations, result.record)

    if options["out_circuit"] is not None:
        circuit.write_yaml(options["out_circuit"])
    else:
        for name, loc in result.locations.items():
            print(f"{name}: {loc}")


if __name__ == "__main__":
    main()
