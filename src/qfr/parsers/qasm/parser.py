"""Recursive-descent parser for OpenQASM 2.0 quantum operations.

The :class:`Parser` builds single operations (gate calls, measurements and
resets) and keeps track of gate declarations. Top-level statements such as
register declarations or ``include`` are dispatched by
:func:`qfr.parsers.openqasm.import_openqasm`, which drives the parser through
:meth:`Parser.scan`, :meth:`Parser.check` and :meth:`Parser.qop`.

Gates from ``qelib1.inc`` are built in. Any number of leading ``c`` adds as
many (positive) controls to a built-in gate, so that ``ccx`` or ``crz`` do not
need to be declared.

"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final, TypeAlias

from qfr.circuit.registers import RegisterMap
from qfr.operations import (
    CompoundOperation,
    Control,
    NonUnitaryOperation,
    Operation,
    OpType,
    StandardOperation,
)
from qfr.parsers.qasm.scanner import Scanner, Token, TokenKind
from qfr.utils.exceptions import QFRError

Expression: TypeAlias = Callable[[Mapping[str, float]], float]
"""A parameter expression, evaluated against the values of the gate parameters in scope."""

Argument: TypeAlias = tuple[int, int]
"""``(start, size)`` of a single qubit (size ``1``) or of a whole register."""

_UNARY_FUNCTIONS: Final[dict[TokenKind, Callable[[float], float]]] = {
    TokenKind.SIN: math.sin,
    TokenKind.COS: math.cos,
    TokenKind.TAN: math.tan,
    TokenKind.EXP: math.exp,
    TokenKind.LN: math.log,
    TokenKind.SQRT: math.sqrt,
}

QOP_START: Final[frozenset[TokenKind]] = frozenset(
    {
        TokenKind.UGATE,
        TokenKind.CXGATE,
        TokenKind.IDENTIFIER,
        TokenKind.MEASURE,
        TokenKind.RESET,
    }
)


@dataclass(frozen=True)
class _BuiltinGate:
    gate: OpType
    nparameters: int = 0
    ntargets: int = 1


_BUILTIN_GATES: Final[dict[str, _BuiltinGate]] = {
    "u3": _BuiltinGate(OpType.U3, 3),
    "u": _BuiltinGate(OpType.U3, 3),
    "U": _BuiltinGate(OpType.U3, 3),
    "u2": _BuiltinGate(OpType.U2, 2),
    "u1": _BuiltinGate(OpType.U1, 1),
    "p": _BuiltinGate(OpType.U1, 1),
    "id": _BuiltinGate(OpType.I),
    "x": _BuiltinGate(OpType.X),
    "y": _BuiltinGate(OpType.Y),
    "z": _BuiltinGate(OpType.Z),
    "h": _BuiltinGate(OpType.H),
    "s": _BuiltinGate(OpType.S),
    "sdg": _BuiltinGate(OpType.SDG),
    "t": _BuiltinGate(OpType.T),
    "tdg": _BuiltinGate(OpType.TDG),
    "sx": _BuiltinGate(OpType.SX),
    "sxdg": _BuiltinGate(OpType.SXDG),
    "rx": _BuiltinGate(OpType.RX, 1),
    "ry": _BuiltinGate(OpType.RY, 1),
    "rz": _BuiltinGate(OpType.RZ, 1),
    "swap": _BuiltinGate(OpType.SWAP, 0, 2),
    "iswap": _BuiltinGate(OpType.ISWAP, 0, 2),
}


@dataclass(frozen=True)
class _GateCall:
    name: str
    parameters: list[Expression]
    arguments: list[str]
    builtin: bool = False
    """Set when a gate calls the built-in gate it shadows."""


@dataclass
class GateDefinition:
    """A gate declared with ``gate`` or ``opaque``.

    Attributes:
        parameters: names of the classical parameters.
        arguments: names of the qubit arguments.
        body: the gate calls making up the gate, or ``None`` for opaque gates.

    """

    parameters: list[str]
    arguments: list[str]
    body: list[_GateCall] | None = field(default_factory=list)


def _constant(value: float) -> Expression:
    return lambda _: value


def _variable(name: str) -> Expression:
    return lambda env: env[name]


def _negate(operand: Expression) -> Expression:
    return lambda env: -operand(env)


def _binary(op: TokenKind, lhs: Expression, rhs: Expression) -> Expression:
    match op:
        case TokenKind.PLUS:
            return lambda env: lhs(env) + rhs(env)
        case TokenKind.MINUS:
            return lambda env: lhs(env) - rhs(env)
        case TokenKind.TIMES:
            return lambda env: lhs(env) * rhs(env)
        case TokenKind.DIVIDE:
            return lambda env: lhs(env) / rhs(env)
    return lambda env: lhs(env) ** rhs(env)


def _builtin_with_controls(name: str) -> tuple[_BuiltinGate, int] | None:
    """Return the built-in gate ``name`` refers to and its number of controls, if any."""
    for ncontrols in range(len(name)):
        if ncontrols > 0 and name[ncontrols - 1] != "c":
            return None
        if name[ncontrols:] in _BUILTIN_GATES:
            return _BUILTIN_GATES[name[ncontrols:]], ncontrols
    return None


class Parser:
    """Parse OpenQASM operations from the tokens of ``scanner``.

    Args:
        scanner: source of tokens.
        qregs: qubit register table, shared with the circuit being built.
        cregs: classical register table, shared with the circuit being built.
        nqubits: current width of the circuit being built. Must be kept up to
            date by the caller when registers are added.

    Attributes:
        token: the last consumed token.
        la: the lookahead token, not consumed yet.
        gates: gates declared so far, by name.

    """

    def __init__(
        self, scanner: Scanner, qregs: RegisterMap, cregs: RegisterMap, nqubits: int = 0
    ) -> None:
        self.scanner = scanner
        self.qregs = qregs
        self.cregs = cregs
        self.nqubits = nqubits
        self.gates: dict[str, GateDefinition] = {}
        self.token = Token(TokenKind.EOF, "", 0)
        self.la = Token(TokenKind.EOF, "", 0)

    @property
    def sym(self) -> TokenKind:
        """Kind of the lookahead token."""
        return self.la.kind

    def scan(self) -> None:
        self.token = self.la
        self.la = self.scanner.next()

    def check(self, expected: TokenKind) -> None:
        """Consume the lookahead token, failing if it is not of the ``expected`` kind."""
        if self.sym != expected:
            raise QFRError(
                f"Expected '{expected}' but found '{self.sym}' in line {self.la.line}."
            )
        self.scan()

    def error(self, message: str) -> QFRError:
        return QFRError(f"{message} (line {self.token.line}).")

    # EXPRESSIONS
    def expression(self) -> Expression:
        negate = self.sym == TokenKind.MINUS
        if negate:
            self.scan()
        result = self.term()
        if negate:
            result = _negate(result)
        while self.sym in (TokenKind.PLUS, TokenKind.MINUS):
            self.scan()
            result = _binary(self.token.kind, result, self.term())
        return result

    def term(self) -> Expression:
        result = self.factor()
        while self.sym in (TokenKind.TIMES, TokenKind.DIVIDE):
            self.scan()
            result = _binary(self.token.kind, result, self.factor())
        return result

    def factor(self) -> Expression:
        base = self.primary()
        if self.sym == TokenKind.POWER:
            self.scan()
            return _binary(TokenKind.POWER, base, self.factor())
        return base

    def primary(self) -> Expression:
        match self.sym:
            case TokenKind.MINUS:
                self.scan()
                return _negate(self.primary())
            case TokenKind.REAL | TokenKind.NNINTEGER:
                self.scan()
                return _constant(self.token.value)
            case TokenKind.PI:
                self.scan()
                return _constant(math.pi)
            case TokenKind.IDENTIFIER:
                self.scan()
                return _variable(self.token.text)
            case TokenKind.LPAR:
                self.scan()
                inner = self.expression()
                self.check(TokenKind.RPAR)
                return inner
            case kind if kind in _UNARY_FUNCTIONS:
                self.scan()
                function = _UNARY_FUNCTIONS[kind]
                self.check(TokenKind.LPAR)
                operand = self.expression()
                self.check(TokenKind.RPAR)
                return lambda env: function(operand(env))
        raise QFRError(f"Invalid expression: unexpected '{self.sym}' in line {self.la.line}.")

    def expression_list(self) -> list[Expression]:
        expressions = [self.expression()]
        while self.sym == TokenKind.COMMA:
            self.scan()
            expressions.append(self.expression())
        return expressions

    def identifier_list(self) -> list[str]:
        self.check(TokenKind.IDENTIFIER)
        identifiers = [self.token.text]
        while self.sym == TokenKind.COMMA:
            self.scan()
            self.check(TokenKind.IDENTIFIER)
            identifiers.append(self.token.text)
        return identifiers

    # ARGUMENTS
    def _register_argument(self, registers: RegisterMap, kind: str) -> Argument:
        self.check(TokenKind.IDENTIFIER)
        name = self.token.text
        if name not in registers:
            raise self.error(f"Argument is not a {kind}: {name}")
        start, size = registers[name]
        if self.sym != TokenKind.LBRACK:
            return start, size
        self.scan()
        self.check(TokenKind.NNINTEGER)
        offset = int(self.token.text)
        self.check(TokenKind.RBRACK)
        if offset >= size:
            raise self.error(f"Index {offset} out of range for {kind} {name} of size {size}")
        return start + offset, 1

    def argument(self) -> Argument:
        """Parse a qubit or a qubit register."""
        return self._register_argument(self.qregs, "qreg")

    def classical_argument(self) -> Argument:
        """Parse a classical bit or a classical register."""
        return self._register_argument(self.cregs, "creg")

    def argument_list(self) -> list[Argument]:
        arguments = [self.argument()]
        while self.sym == TokenKind.COMMA:
            self.scan()
            arguments.append(self.argument())
        return arguments

    # OPERATIONS
    def qop(self) -> Operation:
        """Parse a quantum operation, including its terminating semicolon."""
        match self.sym:
            case TokenKind.UGATE:
                self.scan()
                self.check(TokenKind.LPAR)
                parameters = self.expression_list()
                self.check(TokenKind.RPAR)
                arguments = [self.argument()]
                self.check(TokenKind.SEMICOLON)
                return self.apply_gate("U", self._evaluate(parameters, {}), arguments)
            case TokenKind.CXGATE:
                self.scan()
                arguments = [self.argument()]
                self.check(TokenKind.COMMA)
                arguments.append(self.argument())
                self.check(TokenKind.SEMICOLON)
                return self.apply_gate("CX", [], arguments)
            case TokenKind.IDENTIFIER:
                self.scan()
                name = self.token.text
                parameters: list[Expression] = []
                if self.sym == TokenKind.LPAR:
                    self.scan()
                    if self.sym != TokenKind.RPAR:
                        parameters = self.expression_list()
                    self.check(TokenKind.RPAR)
                arguments = self.argument_list()
                self.check(TokenKind.SEMICOLON)
                return self.apply_gate(name, self._evaluate(parameters, {}), arguments)
            case TokenKind.MEASURE:
                self.scan()
                qubits = self.argument()
                self.check(TokenKind.ARROW)
                bits = self.classical_argument()
                self.check(TokenKind.SEMICOLON)
                if qubits[1] != bits[1]:
                    raise self.error(
                        f"Mismatched register sizes in measurement: {qubits[1]} vs. {bits[1]}"
                    )
                (qstart, size), (cstart, _) = qubits, bits
                return NonUnitaryOperation.measure(
                    self.nqubits,
                    list(range(qstart, qstart + size)),
                    list(range(cstart, cstart + size)),
                )
            case TokenKind.RESET:
                self.scan()
                start, size = self.argument()
                self.check(TokenKind.SEMICOLON)
                return NonUnitaryOperation.reset(self.nqubits, list(range(start, start + size)))
        raise QFRError(f"No valid quantum operation starts with '{self.sym}' in line {self.la.line}.")

    @staticmethod
    def _evaluate(parameters: Sequence[Expression], env: Mapping[str, float]) -> list[float]:
        try:
            return [parameter(env) for parameter in parameters]
        except KeyError as err:
            raise QFRError(f"Unknown parameter {err.args[0]}.") from None
        except (ArithmeticError, ValueError) as err:
            raise QFRError(f"Failed to evaluate a parameter: {err}.") from err

    def apply_gate(self, name: str, parameters: list[float], arguments: list[Argument]) -> Operation:
        """Build the operation applying gate ``name``, broadcasting it over whole registers.

        Raises:
            QFRError: if ``name`` is unknown or opaque, or if the numbers of
                parameters or arguments do not match the gate.

        """
        sizes = {size for _, size in arguments if size > 1}
        if len(sizes) > 1:
            raise self.error(f"Register sizes do not match in call to gate {name}")
        if sizes:
            (size,) = sizes
            return CompoundOperation(
                self.nqubits,
                [
                    self._apply_single(
                        name, parameters, [start + (i if n > 1 else 0) for start, n in arguments]
                    )
                    for i in range(size)
                ],
            )
        return self._apply_single(name, parameters, [start for start, _ in arguments])

    def _apply_single(
        self, name: str, parameters: list[float], qubits: list[int], builtin: bool = False
    ) -> Operation:
        if name == "CX":
            if len(qubits) != 2:
                raise self.error(f"Gate CX expects 2 arguments, got {len(qubits)}")
            return StandardOperation(self.nqubits, [qubits[1]], OpType.X, [Control(qubits[0])])
        if not builtin and name != "U" and name in self.gates:
            return self._expand(name, self.gates[name], parameters, qubits)
        resolved = _builtin_with_controls(name)
        if resolved is None:
            raise self.error(f"Undefined gate {name}")
        definition, ncontrols = resolved
        if len(parameters) != definition.nparameters:
            raise self.error(
                f"Gate {name} expects {definition.nparameters} parameter(s), got {len(parameters)}"
            )
        if len(qubits) != ncontrols + definition.ntargets:
            raise self.error(
                f"Gate {name} expects {ncontrols + definition.ntargets} argument(s), got {len(qubits)}"
            )
        lam = phi = theta = 0.0
        match parameters:
            case [theta, phi, lam]:
                pass
            case [phi, lam]:
                pass
            case [lam]:
                pass
        return StandardOperation(
            self.nqubits,
            qubits[ncontrols:],
            definition.gate,
            [Control(q) for q in qubits[:ncontrols]],
            lam=lam,
            phi=phi,
            theta=theta,
        )

    def _expand(
        self, name: str, definition: GateDefinition, parameters: list[float], qubits: list[int]
    ) -> CompoundOperation:
        if definition.body is None:
            raise self.error(f"Gate {name} is opaque and cannot be applied")
        if len(parameters) != len(definition.parameters):
            raise self.error(
                f"Gate {name} expects {len(definition.parameters)} parameter(s), "
                f"got {len(parameters)}"
            )
        if len(qubits) != len(definition.arguments):
            raise self.error(
                f"Gate {name} expects {len(definition.arguments)} argument(s), got {len(qubits)}"
            )
        env = dict(zip(definition.parameters, parameters))
        wires = dict(zip(definition.arguments, qubits))
        return CompoundOperation(
            self.nqubits,
            [
                self._apply_single(
                    call.name,
                    self._evaluate(call.parameters, env),
                    [wires[argument] for argument in call.arguments],
                    call.builtin,
                )
                for call in definition.body
            ],
        )

    # DECLARATIONS
    def _gate_signature(self) -> tuple[str, list[str], list[str]]:
        self.check(TokenKind.IDENTIFIER)
        name = self.token.text
        parameters: list[str] = []
        if self.sym == TokenKind.LPAR:
            self.scan()
            if self.sym != TokenKind.RPAR:
                parameters = self.identifier_list()
            self.check(TokenKind.RPAR)
        return name, parameters, self.identifier_list()

    def gate_declaration(self) -> None:
        """Parse ``gate name(params) args { body }`` and register the gate."""
        self.check(TokenKind.GATE)
        name, parameters, arguments = self._gate_signature()
        self.check(TokenKind.LBRACE)
        body: list[_GateCall] = []
        while self.sym != TokenKind.RBRACE:
            match self.sym:
                case TokenKind.UGATE:
                    self.scan()
                    self.check(TokenKind.LPAR)
                    expressions = self.expression_list()
                    self.check(TokenKind.RPAR)
                    body.append(_GateCall("U", expressions, self._local_arguments(arguments)))
                case TokenKind.CXGATE:
                    self.scan()
                    body.append(_GateCall("CX", [], self._local_arguments(arguments)))
                case TokenKind.IDENTIFIER:
                    self.scan()
                    callee = self.token.text
                    expressions = []
                    if self.sym == TokenKind.LPAR:
                        self.scan()
                        if self.sym != TokenKind.RPAR:
                            expressions = self.expression_list()
                        self.check(TokenKind.RPAR)
                    if callee not in self.gates and _builtin_with_controls(callee) is None:
                        raise self.error(f"Undefined gate {callee} used in declaration of {name}")
                    body.append(
                        _GateCall(
                            callee, expressions, self._local_arguments(arguments), callee == name
                        )
                    )
                case TokenKind.BARRIER:
                    self.scan()
                    self._local_arguments(arguments)
                case _:
                    raise QFRError(
                        f"Unexpected '{self.sym}' in declaration of gate {name} "
                        f"in line {self.la.line}."
                    )
            self.check(TokenKind.SEMICOLON)
        self.check(TokenKind.RBRACE)
        self.gates[name] = GateDefinition(parameters, arguments, body)

    def _local_arguments(self, arguments: list[str]) -> list[str]:
        names = self.identifier_list()
        for argument in names:
            if argument not in arguments:
                raise self.error(f"Unknown argument {argument} in gate declaration")
        return names

    def opaque_declaration(self) -> None:
        """Parse ``opaque name(params) args;`` and register the gate as opaque."""
        self.check(TokenKind.OPAQUE)
        name, parameters, arguments = self._gate_signature()
        self.check(TokenKind.SEMICOLON)
        self.gates[name] = GateDefinition(parameters, arguments, body=None)
