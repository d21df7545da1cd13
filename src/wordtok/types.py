"""
Core types for tokenization.
"""

from typing import TypeAlias

Token: TypeAlias = int
TokenBytes: TypeAlias = bytes
TokenPair: TypeAlias = tuple[Token, Token]
Word: TypeAlias = list[Token]
MergeRanks: TypeAlias = dict[TokenPair, int]
MergeTable: TypeAlias = dict[TokenPair, Token]
