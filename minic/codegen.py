from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from minic.diagnostics import InternalCompilerError
from minic.lexer import TokenKind
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
from minic.semantic import ResolutionMap


class OpCode(Enum):
	PUSH_INT = auto()
	LOAD = auto()
	STORE = auto()
	ADD = auto()
	SUB = auto()
	MUL = auto()
	DIV = auto()
	MOD = auto()
	CMP_EQ = auto()
	CMP_NE = auto()
	CMP_LT = auto()
	CMP_GT = auto()
	CMP_LE = auto()
	CMP_GE = auto()
	JMP = auto()
	JMP_IF_FALSE = auto()
	PRINT = auto()
	HALT = auto()


JUMP_OPCODES = frozenset({OpCode.JMP, OpCode.JMP_IF_FALSE})


BINARY_OPCODES: Dict[TokenKind, OpCode] = {
	TokenKind.PLUS: OpCode.ADD,
	TokenKind.MINUS: OpCode.SUB,
	TokenKind.STAR: OpCode.MUL,
	TokenKind.SLASH: OpCode.DIV,
	TokenKind.PERCENT: OpCode.MOD,
	TokenKind.EQ: OpCode.CMP_EQ,
	TokenKind.NEQ: OpCode.CMP_NE,
	TokenKind.LT: OpCode.CMP_LT,
	TokenKind.GT: OpCode.CMP_GT,
	TokenKind.LTE: OpCode.CMP_LE,
	TokenKind.GTE: OpCode.CMP_GE,
}


@dataclass
class Instruction:
	op: OpCode
	operand: Optional[int] = None
	# Shown in listings only; the VM never reads it.
	comment: Optional[str] = None


class CodeGenerator:
	def __init__(self, resolutions: ResolutionMap) -> None:
		self.resolutions = resolutions
		self.instructions: List[Instruction] = []

	def generate(self, program: ProgramNode) -> List[Instruction]:
		for stmt in program.statements:
			self._emit_node(stmt)
		self._emit(OpCode.HALT)
		return self.instructions

	def _emit_node(self, node: ASTNode) -> None:
		if isinstance(node, VarDecl):
			self._emit(OpCode.PUSH_INT, 0, f"init {node.name.lexeme}")
			self._emit(OpCode.STORE, self._slot(node))
		elif isinstance(node, AssignmentStatement):
			self._emit_node(node.value)
			self._emit(OpCode.STORE, self._slot(node), f"assign {node.name.lexeme}")
		elif isinstance(node, PrintStatement):
			self._emit_node(node.value)
			self._emit(OpCode.PRINT)
		elif isinstance(node, BlockStatement):
			for stmt in node.statements:
				self._emit_node(stmt)
		elif isinstance(node, IfStatement):
			self._emit_if(node)
		elif isinstance(node, WhileStatement):
			self._emit_while(node)
		elif isinstance(node, BinaryExpression):
			self._emit_binary(node)
		elif isinstance(node, LiteralExpression):
			self._emit(OpCode.PUSH_INT, node.value)
		elif isinstance(node, IdentifierExpression):
			self._emit(OpCode.LOAD, self._slot(node), f"load {node.name.lexeme}")
		else:
			raise InternalCompilerError(f"Unsupported node: {node.__class__.__name__}")

	def _emit_binary(self, node: BinaryExpression) -> None:
		# Post-order over an explicit stack; the flag marks operands already emitted.
		pending: List[Tuple[Expression, bool]] = [(node, False)]
		while pending:
			expr, operands_done = pending.pop()
			if not isinstance(expr, BinaryExpression):
				self._emit_node(expr)
			elif operands_done:
				op = BINARY_OPCODES.get(expr.operator.kind)
				if op is None:
					raise InternalCompilerError(f"No opcode for operator '{expr.operator.lexeme}'.")
				self._emit(op)
			else:
				pending.append((expr, True))
				pending.append((expr.right, False))
				pending.append((expr.left, False))

	def _emit_if(self, node: IfStatement) -> None:
		self._emit_node(node.condition)
		jump_if_false = self._emit(OpCode.JMP_IF_FALSE, 0, "if false")
		self._emit_node(node.then_branch)
		if node.else_branch is None:
			self._patch(jump_if_false, len(self.instructions))
			return
		jump_to_end = self._emit(OpCode.JMP, 0, "skip else")
		self._patch(jump_if_false, len(self.instructions))
		self._emit_node(node.else_branch)
		self._patch(jump_to_end, len(self.instructions))

	def _emit_while(self, node: WhileStatement) -> None:
		loop_head = len(self.instructions)
		self._emit_node(node.condition)
		jump_if_false = self._emit(OpCode.JMP_IF_FALSE, 0, "exit loop")
		self._emit_node(node.body)
		self._emit(OpCode.JMP, loop_head, "loop")
		self._patch(jump_if_false, len(self.instructions))

	def _emit(self, op: OpCode, operand: Optional[int] = None, comment: Optional[str] = None) -> int:
		self.instructions.append(Instruction(op, operand, comment))
		return len(self.instructions) - 1

	def _patch(self, index: int, target: int) -> None:
		self.instructions[index].operand = target

	def _slot(self, node: ASTNode) -> int:
		slot = self.resolutions.get(node.node_id)
		if slot is None:
			raise InternalCompilerError(f"No slot resolved for node {node.node_id} ({node.__class__.__name__}).")
		return slot


def generate(program: ProgramNode, resolutions: ResolutionMap) -> List[Instruction]:
	return CodeGenerator(resolutions).generate(program)


def disassemble(instructions: List[Instruction]) -> List[str]:
	lines: List[str] = []
	for index, inst in enumerate(instructions):
		text = f"{index:04d}  {inst.op.name:<13}"
		if inst.operand is not None:
			text += f" {inst.operand}"
		if inst.comment:
			text = f"{text:<26} ; {inst.comment}"
		lines.append(text.rstrip())
	return lines
