"""Command-line driver.

Usage: minic <file.mc> [--tokens] [--ast] [--bytecode] [--output] [--max-steps N]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from minic.codegen import disassemble
from minic.diagnostics import format_diagnostic
from minic.engine import CompilerEngine
from minic.lexer import TokenKind
from minic.nodes import format_ast
from minic.vm import MAX_STEPS


def build_arg_parser() -> argparse.ArgumentParser:
	argparser = argparse.ArgumentParser(prog="minic", description="Compile and run a MiniC program on the bytecode VM")
	argparser.add_argument("input", help="Source file (.mc)")
	argparser.add_argument("--tokens", action="store_true", help="Print the token stream")
	argparser.add_argument("--ast", action="store_true", help="Print the syntax tree")
	argparser.add_argument("--bytecode", action="store_true", help="Print the instruction listing")
	argparser.add_argument("--output", action="store_true", help="Print program output (default when nothing else is selected)")
	argparser.add_argument("--max-steps", type=int, default=MAX_STEPS, help=f"Instruction cap per run (default: {MAX_STEPS})")
	return argparser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_arg_parser().parse_args(argv)
	if args.max_steps <= 0:
		print("Error: --max-steps must be positive", file=sys.stderr)
		return 1
	show_output = args.output or not (args.tokens or args.ast or args.bytecode)

	try:
		source = Path(args.input).read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as e:
		print(f"Error: cannot read '{args.input}': {e}", file=sys.stderr)
		return 1

	engine = CompilerEngine()
	artifacts = engine.compile(source)
	if not artifacts.ok:
		for diagnostic in artifacts.diagnostics:
			print(format_diagnostic(diagnostic), file=sys.stderr)
		return 1

	sections: List[List[str]] = []
	if args.tokens:
		sections.append([f"{t.line}:{t.column} {t.kind.name} '{t.lexeme}'" for t in artifacts.tokens if t.kind != TokenKind.EOF])
	if args.ast:
		sections.append(format_ast(artifacts.ast))
	if args.bytecode:
		sections.append(disassemble(artifacts.instructions))
	if show_output:
		sections.append(engine.run(artifacts, max_steps=args.max_steps).output)

	for i, lines in enumerate(sections):
		if i:
			print()
		for line in lines:
			print(line)
	return 0


if __name__ == "__main__":
	sys.exit(main())
