from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from minic.diagnostics import InternalCompilerError, Position, RedeclarationError, UndeclaredVariableError
from minic.lexer import Token
from minic.nodes import (
	AssignmentStatement,
	ASTNode,
	BinaryExpression,
	BlockStatement,
	Expression,
	IdentifierExpression,
	IfStatement,
	LiteralExpression,
	PrintStatement,
	ProgramNode,
	VarDecl,
	WhileStatement,
)


# node_id of a VarDecl, assignment or identifier use -> slot
ResolutionMap = Dict[int, int]


@dataclass(frozen=True)
class Symbol:
	name: str
	slot: int
	depth: int
	position: Position


class Scope:
	def __init__(self, depth: int) -> None:
		self.depth = depth
		self.symbols: Dict[str, int] = {}


class SymbolTable:
	"""Stack of block scopes sharing one slot counter.

	Slots are never reused: a shadowing declaration gets a fresh one and
	nothing is released when its scope is popped.
	"""

	def __init__(self) -> None:
		self.scopes: List[Scope] = [Scope(0)]
		self.slot_count = 0

	@property
	def current(self) -> Scope:
		return self.scopes[-1]

	def push(self) -> None:
		self.scopes.append(Scope(len(self.scopes)))

	def pop(self) -> None:
		if len(self.scopes) == 1:
			raise InternalCompilerError("Cannot pop the program scope.")
		self.scopes.pop()

	def declare(self, name: str) -> Optional[int]:
		"""Bind ``name`` in the innermost scope; ``None`` if it is already bound there."""
		if name in self.current.symbols:
			return None
		slot = self.slot_count
		self.slot_count += 1
		self.current.symbols[name] = slot
		return slot

	def resolve(self, name: str) -> Optional[int]:
		for scope in reversed(self.scopes):
			if name in scope.symbols:
				return scope.symbols[name]
		return None


class SemanticAnalyzer:
	def __init__(self) -> None:
		self.table = SymbolTable()
		self.resolutions: ResolutionMap = {}
		self.symbols: List[Symbol] = []

	@property
	def slot_count(self) -> int:
		return self.table.slot_count

	def analyze(self, program: ProgramNode) -> ResolutionMap:
		for stmt in program.statements:
			self._visit(stmt)
		return self.resolutions

	def _visit(self, node: ASTNode) -> None:
		if isinstance(node, VarDecl):
			self._declare(node)
		elif isinstance(node, AssignmentStatement):
			self._visit(node.value)
			self._reference(node, node.name)
		elif isinstance(node, PrintStatement):
			self._visit(node.value)
		elif isinstance(node, BlockStatement):
			self.table.push()
			for stmt in node.statements:
				self._visit(stmt)
			self.table.pop()
		elif isinstance(node, IfStatement):
			self._visit(node.condition)
			self._visit(node.then_branch)
			if node.else_branch is not None:
				self._visit(node.else_branch)
		elif isinstance(node, WhileStatement):
			self._visit(node.condition)
			self._visit(node.body)
		elif isinstance(node, BinaryExpression):
			self._visit_operands(node)
		elif isinstance(node, IdentifierExpression):
			self._reference(node, node.name)
		elif isinstance(node, LiteralExpression):
			pass
		else:
			raise InternalCompilerError(f"Unsupported node: {node.__class__.__name__}")

	def _visit_operands(self, node: BinaryExpression) -> None:
		# Operator chains can be thousands of terms deep; walk them with a
		# stack, leftmost operand first.
		pending: List[Expression] = [node]
		while pending:
			expr = pending.pop()
			if isinstance(expr, BinaryExpression):
				pending.append(expr.right)
				pending.append(expr.left)
			else:
				self._visit(expr)

	def _declare(self, node: VarDecl) -> None:
		name = node.name.lexeme
		slot = self.table.declare(name)
		if slot is None:
			raise RedeclarationError(name, node.name.position)
		self.resolutions[node.node_id] = slot
		self.symbols.append(Symbol(name, slot, self.table.current.depth, node.name.position))

	def _reference(self, node: ASTNode, name: Token) -> None:
		slot = self.table.resolve(name.lexeme)
		if slot is None:
			raise UndeclaredVariableError(name.lexeme, name.position)
		self.resolutions[node.node_id] = slot


def analyze(program: ProgramNode) -> ResolutionMap:
	return SemanticAnalyzer().analyze(program)
