from __future__ import annotations

import argparse
from pathlib import Path

from typing_extensions import override

from qfr._cli.subcommands._load import load_circuit
from qfr._cli.subcommands.base import QFRSubCommand


class ConvertQFRSubCommand(QFRSubCommand):
    @staticmethod
    @override
    def add_subcommand(
        main_parser: argparse._SubParsersAction[argparse.ArgumentParser],
    ) -> None:
        parser: argparse.ArgumentParser = main_parser.add_parser(
            "convert",
            description="Read a circuit and write it back in the format given by the "
            "extension of the output file.",
        )
        parser.add_argument(
            "input",
            help="A circuit file (.real, .qasm, .txt or .qpy).",
            type=Path,
        )
        parser.add_argument(
            "output",
            help="Path of the file to write (.qasm or .py).",
            type=Path,
        )
        parser.add_argument(
            "--strip-idle",
            help="Remove the trailing qubits no operation acts on before writing.",
            action="store_true",
        )
        parser.set_defaults(func=ConvertQFRSubCommand.execute)

    @staticmethod
    @override
    def execute(args: argparse.Namespace) -> None:
        circuit = load_circuit(args.input)
        if args.strip_idle:
            circuit.strip_trailing_idle_qubits()
        circuit.dump(args.output)
        if args.output.exists():
            print(f"Circuit '{circuit.name}' written to '{args.output}'.")
