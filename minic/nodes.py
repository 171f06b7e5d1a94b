"""AST node variants.

Every node carries a ``node_id`` handed out by the parser in construction
order; later passes key their side tables on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from minic.diagnostics import Position
from minic.lexer import Token


@dataclass
class ASTNode:
	node_id: int
	position: Position


class Statement(ASTNode):
	pass


class Expression(ASTNode):
	pass


@dataclass
class ProgramNode(ASTNode):
	statements: List[Statement]


@dataclass
class VarDecl(Statement):
	name: Token


@dataclass
class AssignmentStatement(Statement):
	name: Token
	value: Expression


@dataclass
class PrintStatement(Statement):
	value: Expression


@dataclass
class BlockStatement(Statement):
	statements: List[Statement]


@dataclass
class IfStatement(Statement):
	condition: Expression
	then_branch: Statement
	else_branch: Optional[Statement]


@dataclass
class WhileStatement(Statement):
	condition: Expression
	body: Statement


@dataclass
class BinaryExpression(Expression):
	left: Expression
	operator: Token
	right: Expression


@dataclass
class LiteralExpression(Expression):
	value: int


@dataclass
class IdentifierExpression(Expression):
	name: Token


# A pending entry is either a node with its indent or a ready-made label line.
_Pending = Union[Tuple[ASTNode, int], str]


def _label(node: ASTNode) -> str:
	if isinstance(node, ProgramNode):
		return "Program"
	if isinstance(node, VarDecl):
		return f"VarDecl {node.name.lexeme}"
	if isinstance(node, AssignmentStatement):
		return f"Assign {node.name.lexeme}"
	if isinstance(node, PrintStatement):
		return "Print"
	if isinstance(node, BlockStatement):
		return "Block"
	if isinstance(node, IfStatement):
		return "If"
	if isinstance(node, WhileStatement):
		return "While"
	if isinstance(node, BinaryExpression):
		return f"Binary {node.operator.lexeme}"
	if isinstance(node, LiteralExpression):
		return f"Literal {node.value}"
	if isinstance(node, IdentifierExpression):
		return f"Identifier {node.name.lexeme}"
	return node.__class__.__name__


def _children(node: ASTNode, indent: int) -> List[_Pending]:
	pad = "  " * indent
	if isinstance(node, (ProgramNode, BlockStatement)):
		return [(stmt, indent + 1) for stmt in node.statements]
	if isinstance(node, (AssignmentStatement, PrintStatement)):
		return [(node.value, indent + 1)]
	if isinstance(node, IfStatement):
		children: List[_Pending] = [(node.condition, indent + 1), f"{pad}  Then", (node.then_branch, indent + 2)]
		if node.else_branch is not None:
			children += [f"{pad}  Else", (node.else_branch, indent + 2)]
		return children
	if isinstance(node, WhileStatement):
		return [(node.condition, indent + 1), f"{pad}  Do", (node.body, indent + 2)]
	if isinstance(node, BinaryExpression):
		return [(node.left, indent + 1), (node.right, indent + 1)]
	return []


def format_ast(node: ASTNode, indent: int = 0) -> List[str]:
	"""Render the tree one node per line, children indented by two spaces.

	Walks an explicit stack, so long operator chains render like any other tree.
	"""
	lines: List[str] = []
	pending: List[_Pending] = [(node, indent)]
	while pending:
		item = pending.pop()
		if isinstance(item, str):
			lines.append(item)
			continue
		current, depth = item
		lines.append("  " * depth + _label(current))
		pending.extend(reversed(_children(current, depth)))
	return lines
