"""Top-level statements of OpenQASM 2.0 files.

Register declarations, ``include``, ``barrier``, ``if``, ``snapshot`` and
``show_probabilities`` are handled here. Gate calls, measurements, resets and
gate declarations are delegated to :class:`~qfr.parsers.qasm.Parser`.

"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import TYPE_CHECKING, Final, TextIO

from qfr.operations import ClassicControlledOperation, NonUnitaryOperation
from qfr.parsers.qasm import QOP_START, Parser, Scanner, TokenKind
from qfr.utils.exceptions import QFRError, QFRWarning

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit

STANDARD_LIBRARY: Final[str] = "qelib1.inc"


def _register_declaration(parser: Parser) -> tuple[str, int]:
    parser.scan()
    parser.check(TokenKind.IDENTIFIER)
    name = parser.token.text
    parser.check(TokenKind.LBRACK)
    parser.check(TokenKind.NNINTEGER)
    size = int(parser.token.text)
    parser.check(TokenKind.RBRACK)
    parser.check(TokenKind.SEMICOLON)
    return name, size


def _skip_statement(parser: Parser) -> None:
    while parser.sym not in (TokenKind.SEMICOLON, TokenKind.EOF):
        parser.scan()
    parser.check(TokenKind.SEMICOLON)


def _qubits(parser: Parser) -> list[int]:
    return [start + i for start, size in parser.argument_list() for i in range(size)]


def import_openqasm(circuit: Circuit, stream: TextIO, include_dir: Path | None = None) -> None:
    """Append the content of the OpenQASM ``stream`` to ``circuit``.

    Args:
        circuit: the circuit to fill.
        stream: the OpenQASM source.
        include_dir: directory included files are resolved from. Defaults to
            the current working directory.

    Raises:
        QFRError: if the source is not valid OpenQASM 2.0, if a qubit register is
            declared twice or if a statement uses an undefined gate or register.
        QFRFileError: if an included file cannot be read.

    """
    parser = Parser(Scanner(stream, include_dir), circuit.qregs, circuit.cregs, circuit.nqubits)
    parser.scan()
    parser.check(TokenKind.OPENQASM)
    parser.check(TokenKind.REAL)
    parser.check(TokenKind.SEMICOLON)

    while parser.sym != TokenKind.EOF:
        match parser.sym:
            case TokenKind.QREG:
                name, size = _register_declaration(parser)
                if name in circuit.qregs:
                    raise QFRError(f"Qubit register {name} declared twice.")
                circuit.add_qubit_register(size, name)
                parser.nqubits = circuit.nqubits
            case TokenKind.CREG:
                name, size = _register_declaration(parser)
                circuit.add_classical_register(size, name)
            case kind if kind in QOP_START:
                circuit.append(parser.qop())
            case TokenKind.GATE:
                parser.gate_declaration()
            case TokenKind.OPAQUE:
                parser.opaque_declaration()
            case TokenKind.INCLUDE:
                parser.scan()
                parser.check(TokenKind.STRING)
                filename = parser.token.text
                # The lookahead is the semicolon, so the included tokens come right after it.
                if filename != STANDARD_LIBRARY:
                    parser.scanner.add_file_input(filename)
                parser.check(TokenKind.SEMICOLON)
            case TokenKind.BARRIER:
                parser.scan()
                qubits = _qubits(parser)
                parser.check(TokenKind.SEMICOLON)
                circuit.append(NonUnitaryOperation.barrier(circuit.nqubits, qubits))
            case TokenKind.IF:
                _if_statement(circuit, parser)
            case TokenKind.SNAPSHOT:
                parser.scan()
                parser.check(TokenKind.LPAR)
                parser.check(TokenKind.NNINTEGER)
                snapshot_id = int(parser.token.text)
                parser.check(TokenKind.RPAR)
                arguments = parser.argument_list()
                parser.check(TokenKind.SEMICOLON)
                if any(size != 1 for _, size in arguments):
                    warnings.warn(
                        f"Arguments of snapshot({snapshot_id}) must be qubits, got whole registers.",
                        QFRWarning,
                    )
                qubits = [start + i for start, size in arguments for i in range(size)]
                circuit.append(NonUnitaryOperation.snapshot(circuit.nqubits, qubits, snapshot_id))
            case TokenKind.PROBABILITIES:
                parser.scan()
                parser.check(TokenKind.SEMICOLON)
                circuit.append(NonUnitaryOperation.show_probabilities(circuit.nqubits))
            case _:
                raise QFRError(
                    f"Unexpected statement: started with '{parser.sym}' in line {parser.la.line}."
                )

    for i in range(circuit.nqubits):
        circuit.input_permutation.setdefault(i, i)
        circuit.output_permutation.setdefault(i, i)


def _if_statement(circuit: Circuit, parser: Parser) -> None:
    parser.scan()
    parser.check(TokenKind.LPAR)
    parser.check(TokenKind.IDENTIFIER)
    creg = parser.token.text
    parser.check(TokenKind.EQ)
    parser.check(TokenKind.NNINTEGER)
    expected_value = int(parser.token.text)
    parser.check(TokenKind.RPAR)

    if parser.sym not in QOP_START:
        warnings.warn(
            f"Only quantum operations are supported in if statements, skipping statement "
            f"starting with '{parser.sym}' in line {parser.la.line}.",
            QFRWarning,
        )
        _skip_statement(parser)
        return
    operation = parser.qop()
    if creg not in circuit.cregs:
        warnings.warn(f"Error in if statement: {creg} is not a creg!", QFRWarning)
        return
    circuit.append(ClassicControlledOperation(operation, circuit.cregs[creg], expected_value))
