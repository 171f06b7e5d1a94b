from __future__ import annotations

import operator
from typing import Callable, Dict, List

from minic.codegen import Instruction, OpCode


MAX_STEPS = 100_000

LIMIT_MESSAGE = "Runtime Error: Exceeded execution limit (possible infinite loop)"
DIVISION_BY_ZERO_MESSAGE = "Runtime Error: Division by zero"


def floor_div(a: int, b: int) -> int:
	return a // b


def remainder(a: int, b: int) -> int:
	"""Remainder carrying the sign of the dividend (``-7 % 2 == -1``)."""
	r = abs(a) % abs(b)
	return -r if a < 0 else r


def _compare(predicate: Callable[[int, int], bool]) -> Callable[[int, int], int]:
	return lambda a, b: 1 if predicate(a, b) else 0


BINARY_OPERATIONS: Dict[OpCode, Callable[[int, int], int]] = {
	OpCode.ADD: operator.add,
	OpCode.SUB: operator.sub,
	OpCode.MUL: operator.mul,
	OpCode.DIV: floor_div,
	OpCode.MOD: remainder,
	OpCode.CMP_EQ: _compare(operator.eq),
	OpCode.CMP_NE: _compare(operator.ne),
	OpCode.CMP_LT: _compare(operator.lt),
	OpCode.CMP_GT: _compare(operator.gt),
	OpCode.CMP_LE: _compare(operator.le),
	OpCode.CMP_GE: _compare(operator.ge),
}


class RuntimeIssue(Exception):
	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def __str__(self) -> str:
		return self.message


class VirtualMachine:
	"""
	Stack machine for the instruction lists produced by ``minic.codegen``.

	Each ``run`` starts from fresh state. Runtime problems never escape:
	hitting the step cap or dividing by zero appends one ``Runtime Error``
	line to the output and stops.
	"""

	def __init__(self, instructions: List[Instruction], *, max_steps: int = MAX_STEPS) -> None:
		if max_steps <= 0:
			raise ValueError("max_steps must be positive.")
		self.instructions = instructions
		self.max_steps = max_steps
		self._reset()

	def _reset(self) -> None:
		self.stack: List[int] = []
		self.slots: List[int] = []
		self.ip = 0
		self.output: List[str] = []
		self.steps = 0
		self.limit_exceeded = False

	def run(self) -> List[str]:
		self._reset()
		try:
			self._execute()
		except RuntimeIssue as issue:
			self.output.append(issue.message)
		return self.output

	def _execute(self) -> None:
		code = self.instructions
		while self.ip < len(code) and self.steps < self.max_steps:
			self.steps += 1
			inst = code[self.ip]
			op = inst.op
			if op == OpCode.HALT:
				return
			if op == OpCode.PUSH_INT:
				self.stack.append(inst.operand)
			elif op == OpCode.LOAD:
				self.stack.append(self._load(inst.operand))
			elif op == OpCode.STORE:
				self._store(inst.operand, self.stack.pop())
			elif op == OpCode.JMP:
				self.ip = inst.operand
				continue
			elif op == OpCode.JMP_IF_FALSE:
				if self.stack.pop() == 0:
					self.ip = inst.operand
					continue
			elif op == OpCode.PRINT:
				self.output.append(str(self.stack.pop()))
			else:
				b = self.stack.pop()
				a = self.stack.pop()
				if b == 0 and op in (OpCode.DIV, OpCode.MOD):
					raise RuntimeIssue(DIVISION_BY_ZERO_MESSAGE)
				self.stack.append(BINARY_OPERATIONS[op](a, b))
			self.ip += 1
		if self.steps >= self.max_steps:
			self.limit_exceeded = True
			raise RuntimeIssue(LIMIT_MESSAGE)

	def _load(self, slot: int) -> int:
		if slot < len(self.slots):
			return self.slots[slot]
		return 0

	def _store(self, slot: int, value: int) -> None:
		if slot >= len(self.slots):
			self.slots.extend([0] * (slot + 1 - len(self.slots)))
		self.slots[slot] = value


def run(instructions: List[Instruction], max_steps: int = MAX_STEPS) -> List[str]:
	return VirtualMachine(instructions, max_steps=max_steps).run()
