"""Positions, diagnostics and the compile error taxonomy shared by every stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class Severity(Enum):
	ERROR = auto()


@dataclass(frozen=True)
class Position:
	line: int
	column: int

	def __str__(self) -> str:
		return f"line {self.line}, col {self.column}"


@dataclass
class Diagnostic:
	severity: Severity
	message: str
	position: Optional[Position] = None
	hint: Optional[str] = None


# ---------------------------------------------------------------------------
# Errors


class CompileError(Exception):
	"""A user-facing failure in lexing, parsing or semantic analysis.

	The first one raised aborts the rest of the pipeline.
	"""

	hint: Optional[str] = None

	def __init__(self, message: str, position: Optional[Position] = None) -> None:
		super().__init__(message)
		self.message = message
		self.position = position

	def __str__(self) -> str:
		if self.position is None:
			return self.message
		return f"{self.message} at {self.position}"

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(Severity.ERROR, self.message, self.position, self.hint)


class LexError(CompileError):
	def __init__(self, character: str, position: Position) -> None:
		super().__init__(f"Unexpected character '{character}'", position)
		self.character = character
		if character == "!":
			self.hint = "There is no logical-not operator; only '!=' is valid."


class ParseError(CompileError):
	def __init__(self, expected: str, found: str, position: Position) -> None:
		super().__init__(f"Expected {expected}, found {found}", position)
		self.expected = expected
		self.found = found


class RedeclarationError(CompileError):
	hint = "Names must be unique within one block; declare it in a nested block to shadow it."

	def __init__(self, name: str, position: Position) -> None:
		super().__init__(f"Redeclaration of '{name}'", position)
		self.name = name
		self.line = position.line


class UndeclaredVariableError(CompileError):
	hint = "Declare the variable with 'int <name>;' before using it."

	def __init__(self, name: str, position: Position) -> None:
		super().__init__(f"Use of undeclared variable '{name}'", position)
		self.name = name
		self.line = position.line


class NestingTooDeepError(CompileError):
	def __init__(self, limit: int, position: Position) -> None:
		super().__init__("Program nested too deeply", position)
		self.limit = limit
		self.hint = f"Blocks, if/while bodies and parentheses may nest at most {limit} levels."


class InternalCompilerError(Exception):
	"""An invariant between stages was broken; never caused by user input."""


def format_diagnostic(diagnostic: Diagnostic) -> str:
	if diagnostic.position is None:
		return f"Error: {diagnostic.message}"
	return f"Error: {diagnostic.message} at line {diagnostic.position.line}, col {diagnostic.position.column}"


def format_error(error: CompileError) -> str:
	return format_diagnostic(error.to_diagnostic())
