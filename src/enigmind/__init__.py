"""Enigmind: generator for code-breaking logic puzzles."""

from .errors import (
    BitMaskError,
    CodeFormatError,
    ColumnIndexOutOfBounds,
    ConfigurationError,
    EnigmindError,
    GenerationFailed,
)
from .game import Criteria, Game, Verifier
from .generate import GenerationParams, generate_game
from .model import Code, Column, ColumnSet, GameConfiguration, decode, display, encode
from .rules import MatchesOp, Rule, XColumnsEquals, evaluate, mask_of

__all__ = [
    "BitMaskError",
    "Code",
    "CodeFormatError",
    "Column",
    "ColumnIndexOutOfBounds",
    "ColumnSet",
    "ConfigurationError",
    "Criteria",
    "EnigmindError",
    "Game",
    "GameConfiguration",
    "GenerationFailed",
    "GenerationParams",
    "MatchesOp",
    "Rule",
    "Verifier",
    "XColumnsEquals",
    "decode",
    "display",
    "encode",
    "evaluate",
    "generate_game",
    "mask_of",
]
