"""
Test configuration for Tally tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tokens import Token, TokenKind


SPELLINGS = {
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '=': TokenKind.ASSIGN,
    'print': TokenKind.LOG,
    '(': TokenKind.LPAR,
    ')': TokenKind.RPAR,
    ';': TokenKind.SEMICOLON,
}


def _classify(word: str) -> TokenKind:
  if word in SPELLINGS:
    return SPELLINGS[word]
  if word.isdigit():
    return TokenKind.NUMBER
  return TokenKind.VARIABLE


@pytest.fixture
def make_tokens():
  """Build a token list from space-separated words; positions are token indices"""
  def build(source: str):
    return [Token(_classify(word), word, index) for index, word in enumerate(source.split())]
  return build
