"""MiniC: a small integer language compiled to bytecode and run on a stack VM."""

from minic.codegen import Instruction, OpCode, disassemble, generate
from minic.diagnostics import (
	CompileError,
	Diagnostic,
	InternalCompilerError,
	LexError,
	NestingTooDeepError,
	ParseError,
	Position,
	RedeclarationError,
	Severity,
	UndeclaredVariableError,
	format_diagnostic,
	format_error,
)
from minic.engine import CompilationArtifacts, CompilerEngine, RunArtifacts, compile_source, run_source
from minic.lexer import Token, TokenKind, tokenize
from minic.nodes import format_ast
from minic.parser import parse
from minic.semantic import analyze
from minic.vm import MAX_STEPS, VirtualMachine, run

__all__ = [
	"CompilationArtifacts",
	"CompileError",
	"CompilerEngine",
	"Diagnostic",
	"Instruction",
	"InternalCompilerError",
	"LexError",
	"MAX_STEPS",
	"NestingTooDeepError",
	"OpCode",
	"ParseError",
	"Position",
	"RedeclarationError",
	"RunArtifacts",
	"Severity",
	"Token",
	"TokenKind",
	"UndeclaredVariableError",
	"VirtualMachine",
	"analyze",
	"compile_source",
	"disassemble",
	"format_ast",
	"format_diagnostic",
	"format_error",
	"generate",
	"parse",
	"run",
	"run_source",
	"tokenize",
]
