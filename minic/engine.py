"""The compile/run pipeline: Lexer -> Parser -> SemanticAnalyzer -> CodeGenerator -> VM."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional

from minic.codegen import CodeGenerator, Instruction
from minic.diagnostics import CompileError, Diagnostic
from minic.lexer import Lexer, Token
from minic.nodes import ProgramNode
from minic.parser import Parser
from minic.semantic import ResolutionMap, SemanticAnalyzer, Symbol
from minic.vm import MAX_STEPS, VirtualMachine


def compile_source(source: str) -> List[Instruction]:
	"""Compile ``source`` to bytecode, raising the first ``CompileError``."""
	tokens = Lexer(source).tokenize()
	program = Parser(tokens).parse_program()
	resolutions = SemanticAnalyzer().analyze(program)
	return CodeGenerator(resolutions).generate(program)


def run_source(source: str, max_steps: int = MAX_STEPS) -> List[str]:
	return VirtualMachine(compile_source(source), max_steps=max_steps).run()


@dataclass
class CompilationArtifacts:
	tokens: List[Token] = field(default_factory=list)
	ast: Optional[ProgramNode] = None
	resolutions: ResolutionMap = field(default_factory=dict)
	symbols: List[Symbol] = field(default_factory=list)
	instructions: List[Instruction] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)
	duration_ms: float = 0.0

	@property
	def ok(self) -> bool:
		return not self.diagnostics


@dataclass
class RunArtifacts:
	output: List[str]
	steps: int
	limit_exceeded: bool


class CompilerEngine:
	"""Runs the pipeline and keeps every artifact produced before the first error."""

	def compile(self, source: str) -> CompilationArtifacts:
		artifacts = CompilationArtifacts()
		semantic = SemanticAnalyzer()
		# Shared list: symbols declared before a semantic error stay visible.
		artifacts.symbols = semantic.symbols
		start = time.perf_counter()
		try:
			artifacts.tokens = Lexer(source).tokenize()
			artifacts.ast = Parser(artifacts.tokens).parse_program()
			artifacts.resolutions = semantic.analyze(artifacts.ast)
			artifacts.instructions = CodeGenerator(artifacts.resolutions).generate(artifacts.ast)
		except CompileError as error:
			artifacts.diagnostics.append(error.to_diagnostic())
		artifacts.duration_ms = (time.perf_counter() - start) * 1000
		return artifacts

	def run(self, artifacts: CompilationArtifacts, max_steps: int = MAX_STEPS) -> Optional[RunArtifacts]:
		if not artifacts.ok:
			return None
		vm = VirtualMachine(artifacts.instructions, max_steps=max_steps)
		output = vm.run()
		return RunArtifacts(output=output, steps=vm.steps, limit_exceeded=vm.limit_exceeded)
