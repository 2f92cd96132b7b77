"""
Expression DSL - safe arithmetic for material quantities.

`qty` fields are tokenized and parsed into a closed tree of Literal, VarRef
and BinOp nodes, then evaluated by an explicit-stack tree walk. Nothing is ever
handed to a general-purpose evaluator.
"""

from .tokenizer import Token, tokenize
from .parser import MAX_DEPTH, Literal, VarRef, BinOp, Node, Parser, parse, referenced_names
from .evaluator import evaluate, evaluate_tree, to_decimal

__all__ = [
    "Token",
    "tokenize",
    "MAX_DEPTH",
    "Literal",
    "VarRef",
    "BinOp",
    "Node",
    "Parser",
    "parse",
    "referenced_names",
    "evaluate",
    "evaluate_tree",
    "to_decimal",
]
