"""
Core types for tokenization.
"""

from typing_extensions import TypeAliasType

Token = TypeAliasType("Token", str)
Index = TypeAliasType("Index", int)
TokenPair = TypeAliasType("TokenPair", tuple[Token, Token])
IndexList = TypeAliasType("IndexList", list[Index])
TokenList = TypeAliasType("TokenList", list[Token])
