from __future__ import annotations

import argparse
from pathlib import Path

from typing_extensions import override

from qfr._cli.subcommands._load import load_circuit
from qfr._cli.subcommands.base import QFRSubCommand


class InfoQFRSubCommand(QFRSubCommand):
    @staticmethod
    @override
    def add_subcommand(
        main_parser: argparse._SubParsersAction[argparse.ArgumentParser],
    ) -> None:
        parser: argparse.ArgumentParser = main_parser.add_parser(
            "info",
            description="Print statistics about a circuit followed by its operations.",
        )
        parser.add_argument(
            "input",
            help="A circuit file (.real, .qasm, .txt or .qpy).",
            type=Path,
        )
        parser.set_defaults(func=InfoQFRSubCommand.execute)

    @staticmethod
    @override
    def execute(args: argparse.Namespace) -> None:
        circuit = load_circuit(args.input)
        circuit.print_statistics()
        print(circuit)
