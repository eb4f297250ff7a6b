"""jl-core — streaming JSON field projection into delimited text lines."""

from .compiler import Pattern, compile_pattern, find_root
from .errors import JLError, LexError, ParseError, PatternError
from .interpreter import Interpreter, extract, skip_value
from .operations import ArrayOp, CollectOp, ObjectOp, Operation, Property
from .table import Table, TableRegistry
from .tokenizer import Token, Tokenizer, TokenType

__all__ = [
    "compile_pattern",
    "find_root",
    "extract",
    "skip_value",
    "Pattern",
    "Interpreter",
    "Tokenizer",
    "Token",
    "TokenType",
    "ArrayOp",
    "ObjectOp",
    "CollectOp",
    "Property",
    "Operation",
    "Table",
    "TableRegistry",
    "JLError",
    "PatternError",
    "LexError",
    "ParseError",
]
