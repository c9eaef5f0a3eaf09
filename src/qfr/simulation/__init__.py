"""Build the functionality of a circuit or simulate it on a decision-diagram package."""

from .functionality import build_functionality as build_functionality
from .functionality import matrix_normalization as matrix_normalization
from .functionality import simulate as simulate
