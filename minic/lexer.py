from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, List

from minic.diagnostics import LexError, Position


class TokenKind(Enum):
	INT = auto()
	IF = auto()
	ELSE = auto()
	WHILE = auto()
	PRINT = auto()
	IDENT = auto()
	NUMBER = auto()
	PLUS = auto()
	MINUS = auto()
	STAR = auto()
	SLASH = auto()
	PERCENT = auto()
	ASSIGN = auto()
	EQ = auto()
	NEQ = auto()
	LT = auto()
	GT = auto()
	LTE = auto()
	GTE = auto()
	LPAREN = auto()
	RPAREN = auto()
	LBRACE = auto()
	RBRACE = auto()
	SEMI = auto()
	EOF = auto()


KEYWORDS: Dict[str, TokenKind] = {
	"int": TokenKind.INT,
	"if": TokenKind.IF,
	"else": TokenKind.ELSE,
	"while": TokenKind.WHILE,
	"print": TokenKind.PRINT,
}


SYMBOLS: Dict[str, TokenKind] = {
	"+": TokenKind.PLUS,
	"-": TokenKind.MINUS,
	"*": TokenKind.STAR,
	"/": TokenKind.SLASH,
	"%": TokenKind.PERCENT,
	"=": TokenKind.ASSIGN,
	"==": TokenKind.EQ,
	"!=": TokenKind.NEQ,
	"<": TokenKind.LT,
	">": TokenKind.GT,
	"<=": TokenKind.LTE,
	">=": TokenKind.GTE,
	"(": TokenKind.LPAREN,
	")": TokenKind.RPAREN,
	"{": TokenKind.LBRACE,
	"}": TokenKind.RBRACE,
	";": TokenKind.SEMI,
}


@dataclass(frozen=True)
class Token:
	kind: TokenKind
	lexeme: str
	line: int
	column: int

	@property
	def position(self) -> Position:
		return Position(self.line, self.column)


def _is_digit(ch: str) -> bool:
	return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
	return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_ident_part(ch: str) -> bool:
	return _is_ident_start(ch) or _is_digit(ch)


class Lexer:
	def __init__(self, source: str) -> None:
		self.source = source
		self.length = len(source)
		self.index = 0
		self.line = 1
		self.column = 1

	def tokenize(self) -> List[Token]:
		tokens: List[Token] = []
		while not self._is_eof():
			ch = self._peek()
			if ch in " \t\r":
				self._advance()
			elif ch == "\n":
				self._advance()
				self.line += 1
				self.column = 1
			elif ch == "/" and self._peek_next() == "/":
				self._consume_comment()
			elif _is_ident_start(ch):
				tokens.append(self._consume_identifier())
			elif _is_digit(ch):
				tokens.append(self._consume_number())
			else:
				tokens.append(self._consume_symbol())
		tokens.append(Token(TokenKind.EOF, "", self.line, self.column))
		return tokens

	def _consume_comment(self) -> None:
		while not self._is_eof() and self._peek() != "\n":
			self._advance()

	def _consume_identifier(self) -> Token:
		line, column = self.line, self.column
		lexeme = self._consume_while(_is_ident_part)
		return Token(KEYWORDS.get(lexeme, TokenKind.IDENT), lexeme, line, column)

	def _consume_number(self) -> Token:
		line, column = self.line, self.column
		lexeme = self._consume_while(_is_digit)
		return Token(TokenKind.NUMBER, lexeme, line, column)

	def _consume_symbol(self) -> Token:
		line, column = self.line, self.column
		ch = self._advance()
		candidate = ch + self._peek_next_char()
		if len(candidate) == 2 and candidate in SYMBOLS:
			self._advance()
			return Token(SYMBOLS[candidate], candidate, line, column)
		# '!' only exists as the first half of '!='.
		if ch in SYMBOLS:
			return Token(SYMBOLS[ch], ch, line, column)
		raise LexError(ch, Position(line, column))

	def _consume_while(self, predicate: Callable[[str], bool]) -> str:
		start_index = self.index
		while not self._is_eof() and predicate(self._peek()):
			self._advance()
		return self.source[start_index:self.index]

	def _advance(self) -> str:
		ch = self.source[self.index]
		self.index += 1
		self.column += 1
		return ch

	def _peek(self) -> str:
		return self.source[self.index]

	def _peek_next(self) -> str:
		if self.index + 1 >= self.length:
			return ""
		return self.source[self.index + 1]

	def _peek_next_char(self) -> str:
		# Character at the cursor after the first symbol character was consumed.
		return "" if self._is_eof() else self._peek()

	def _is_eof(self) -> bool:
		return self.index >= self.length


def tokenize(source: str) -> List[Token]:
	return Lexer(source).tokenize()
