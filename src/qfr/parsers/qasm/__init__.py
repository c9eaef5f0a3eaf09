"""Tokenizer and parser for the OpenQASM 2.0 grammar."""

from .parser import QOP_START as QOP_START
from .parser import GateDefinition as GateDefinition
from .parser import Parser as Parser
from .scanner import Scanner as Scanner
from .scanner import Token as Token
from .scanner import TokenKind as TokenKind
from .scanner import tokenize as tokenize
