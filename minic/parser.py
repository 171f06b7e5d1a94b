from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

from minic.diagnostics import NestingTooDeepError, ParseError, Position
from minic.lexer import Token, TokenKind
from minic.nodes import (
	AssignmentStatement,
	BinaryExpression,
	BlockStatement,
	Expression,
	IdentifierExpression,
	IfStatement,
	LiteralExpression,
	PrintStatement,
	ProgramNode,
	Statement,
	VarDecl,
	WhileStatement,
)


COMPARISON_OPERATORS = (TokenKind.EQ, TokenKind.NEQ, TokenKind.LT, TokenKind.GT, TokenKind.LTE, TokenKind.GTE)
ADDITIVE_OPERATORS = (TokenKind.PLUS, TokenKind.MINUS)
MULTIPLICATIVE_OPERATORS = (TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT)

# Blocks, if/while statements and parenthesized expressions each count one
# level. Later passes recurse once per level; operator chains are walked
# without recursion.
MAX_NESTING_DEPTH = 100

_T = TypeVar("_T")


class Parser:
	"""Recursive-descent parser; stops at the first token that breaks the grammar."""

	def __init__(self, tokens: List[Token]) -> None:
		if not tokens or tokens[-1].kind != TokenKind.EOF:
			raise ValueError("Token stream must end with an EOF token.")
		self.tokens = tokens
		self.index = 0
		self._next_id = 0
		self._depth = 0

	def parse_program(self) -> ProgramNode:
		start = self._peek().position
		program_id = self._new_id()
		statements: List[Statement] = []
		while not self._is_at_end():
			statements.append(self._parse_statement())
		return ProgramNode(node_id=program_id, position=start, statements=statements)

	def _parse_statement(self) -> Statement:
		if self._match(TokenKind.INT):
			return self._parse_var_decl()
		if self._match(TokenKind.PRINT):
			return self._parse_print()
		if self._match(TokenKind.IF):
			return self._nested(self._parse_if)
		if self._match(TokenKind.WHILE):
			return self._nested(self._parse_while)
		if self._match(TokenKind.LBRACE):
			return self._nested(self._parse_block)
		return self._parse_assignment()

	def _parse_var_decl(self) -> VarDecl:
		keyword = self._previous()
		name = self._expect(TokenKind.IDENT, "variable name after 'int'")
		self._expect(TokenKind.SEMI, "';' after variable declaration")
		return VarDecl(node_id=self._new_id(), position=keyword.position, name=name)

	def _parse_print(self) -> PrintStatement:
		keyword = self._previous()
		node_id = self._new_id()
		self._expect(TokenKind.LPAREN, "'(' after 'print'")
		value = self._parse_expression()
		self._expect(TokenKind.RPAREN, "')' after print expression")
		self._expect(TokenKind.SEMI, "';' after print statement")
		return PrintStatement(node_id=node_id, position=keyword.position, value=value)

	def _parse_if(self) -> IfStatement:
		keyword = self._previous()
		node_id = self._new_id()
		self._expect(TokenKind.LPAREN, "'(' after 'if'")
		condition = self._parse_expression()
		self._expect(TokenKind.RPAREN, "')' after if condition")
		then_branch = self._parse_statement()
		else_branch: Optional[Statement] = None
		if self._match(TokenKind.ELSE):
			else_branch = self._parse_statement()
		return IfStatement(node_id=node_id, position=keyword.position, condition=condition, then_branch=then_branch, else_branch=else_branch)

	def _parse_while(self) -> WhileStatement:
		keyword = self._previous()
		node_id = self._new_id()
		self._expect(TokenKind.LPAREN, "'(' after 'while'")
		condition = self._parse_expression()
		self._expect(TokenKind.RPAREN, "')' after while condition")
		body = self._parse_statement()
		return WhileStatement(node_id=node_id, position=keyword.position, condition=condition, body=body)

	def _parse_block(self) -> BlockStatement:
		lbrace = self._previous()
		node_id = self._new_id()
		statements: List[Statement] = []
		while not self._check(TokenKind.RBRACE) and not self._is_at_end():
			statements.append(self._parse_statement())
		self._expect(TokenKind.RBRACE, "'}' after block")
		return BlockStatement(node_id=node_id, position=lbrace.position, statements=statements)

	def _parse_assignment(self) -> AssignmentStatement:
		name = self._expect(TokenKind.IDENT, "a statement")
		node_id = self._new_id()
		self._expect(TokenKind.ASSIGN, "'=' after identifier")
		value = self._parse_expression()
		self._expect(TokenKind.SEMI, "';' after assignment")
		return AssignmentStatement(node_id=node_id, position=name.position, name=name, value=value)

	# Expressions, lowest precedence first ------------------------------------

	def _parse_expression(self) -> Expression:
		return self._parse_comparison()

	def _parse_comparison(self) -> Expression:
		expr = self._parse_term()
		while self._match(*COMPARISON_OPERATORS):
			expr = self._binary(expr, self._previous(), self._parse_term())
		return expr

	def _parse_term(self) -> Expression:
		expr = self._parse_factor()
		while self._match(*ADDITIVE_OPERATORS):
			expr = self._binary(expr, self._previous(), self._parse_factor())
		return expr

	def _parse_factor(self) -> Expression:
		expr = self._parse_primary()
		while self._match(*MULTIPLICATIVE_OPERATORS):
			expr = self._binary(expr, self._previous(), self._parse_primary())
		return expr

	def _parse_primary(self) -> Expression:
		if self._match(TokenKind.NUMBER):
			token = self._previous()
			return LiteralExpression(node_id=self._new_id(), position=token.position, value=int(token.lexeme))
		if self._match(TokenKind.IDENT):
			token = self._previous()
			return IdentifierExpression(node_id=self._new_id(), position=token.position, name=token)
		if self._match(TokenKind.LPAREN):
			expr = self._nested(self._parse_expression)
			self._expect(TokenKind.RPAREN, "')' after expression")
			return expr
		raise self._error("an expression")

	def _binary(self, left: Expression, operator: Token, right: Expression) -> BinaryExpression:
		return BinaryExpression(node_id=self._new_id(), position=left.position, left=left, operator=operator, right=right)

	# Utility parsing helpers -------------------------------------------------

	def _nested(self, parse: Callable[[], _T]) -> _T:
		"""Run ``parse`` one nesting level deeper; the opening token was just consumed."""
		self._depth += 1
		if self._depth > MAX_NESTING_DEPTH:
			raise NestingTooDeepError(MAX_NESTING_DEPTH, self._previous().position)
		node = parse()
		self._depth -= 1
		return node

	def _new_id(self) -> int:
		node_id = self._next_id
		self._next_id += 1
		return node_id

	def _match(self, *kinds: TokenKind) -> bool:
		for kind in kinds:
			if self._check(kind):
				self.index += 1
				return True
		return False

	def _check(self, kind: TokenKind) -> bool:
		if self._is_at_end():
			return False
		return self.tokens[self.index].kind == kind

	def _expect(self, kind: TokenKind, expected: str) -> Token:
		if self._check(kind):
			self.index += 1
			return self._previous()
		raise self._error(expected)

	def _error(self, expected: str) -> ParseError:
		token = self._peek()
		found = "end of input" if token.kind == TokenKind.EOF else f"'{token.lexeme}'"
		return ParseError(expected, found, Position(token.line, token.column))

	def _peek(self) -> Token:
		return self.tokens[self.index]

	def _previous(self) -> Token:
		return self.tokens[self.index - 1]

	def _is_at_end(self) -> bool:
		return self.tokens[self.index].kind == TokenKind.EOF


def parse(tokens: List[Token]) -> ProgramNode:
	return Parser(tokens).parse_program()
