"""Fold the operations of a circuit into a single decision diagram.

Both entry points share :func:`_fold`, which multiplies the fragment of every
operation into a running accumulator. The accumulator always holds exactly one
reference on the package: the product is retained before the previous
accumulator is released, and the garbage collector runs once per operation.
If an operation fails, the reference held on the accumulator is released
before the error propagates.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from qfr.dd.package import DDPackage, Edge, new_line_buffer, reset_line_buffer
from qfr.utils.exceptions import QFRError

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit


@contextmanager
def matrix_normalization(package: DDPackage) -> Iterator[None]:
    """Enable matrix normalization on ``package`` for the duration of the ``with`` block."""
    package.use_matrix_normalization(True)
    try:
        yield
    finally:
        package.use_matrix_normalization(False)


def _fold(circuit: Circuit, package: DDPackage, start: Edge) -> Edge:
    line = new_line_buffer()
    accumulator = start
    package.inc_ref(accumulator)
    try:
        for op in circuit.operations:
            if not op.is_unitary():
                raise QFRError("Functionality not unitary.")
            reset_line_buffer(line)
            fragment = op.get_dd(package, line, circuit.output_permutation)
            product = package.multiply(fragment, accumulator)
            package.inc_ref(product)
            package.dec_ref(accumulator)
            accumulator = product
            package.garbage_collect()
    except Exception:
        package.dec_ref(accumulator)
        raise
    return accumulator


def build_functionality(circuit: Circuit, package: DDPackage) -> Edge:
    """Return the decision diagram of the unitary implemented by ``circuit``.

    The returned edge holds one reference that the caller is responsible for
    releasing.

    Raises:
        QFRError: if ``circuit`` contains a non-unitary operation.

    """
    if circuit.nqubits == 0:
        return package.make_identity(0)
    with matrix_normalization(package):
        return _fold(circuit, package, package.make_identity(circuit.nqubits))


def simulate(circuit: Circuit, state: Edge, package: DDPackage) -> Edge:
    """Apply every operation of ``circuit`` to ``state``.

    ``state`` is retained on entry. The returned edge holds one reference that
    the caller is responsible for releasing.

    Raises:
        QFRError: if ``circuit`` contains a non-unitary operation. Measurements
            and resets are not supported.

    """
    return _fold(circuit, package, state)
