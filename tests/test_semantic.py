"""Tests for scope resolution and slot assignment."""

import pytest

from minic.diagnostics import InternalCompilerError, RedeclarationError, UndeclaredVariableError
from minic.lexer import tokenize
from minic.nodes import ProgramNode
from minic.parser import parse
from minic.semantic import SemanticAnalyzer, SymbolTable, analyze


def parse_source(source: str) -> ProgramNode:
	return parse(tokenize(source))


class TestSlots:
	def test_every_operand_of_a_long_chain_is_resolved(self):
		analyzer = SemanticAnalyzer()
		resolutions = analyzer.analyze(parse_source("int a; int b; a = " + " - ".join(["b"] * 3000) + ";"))
		# Two declarations, one assignment target, 3000 uses of b.
		assert len(resolutions) == 3003
		assert sorted(set(resolutions.values())) == [0, 1]

	def test_slots_follow_declaration_order(self):
		analyzer = SemanticAnalyzer()
		analyzer.analyze(parse_source("int a; int b; int c;"))
		assert [(s.name, s.slot, s.depth) for s in analyzer.symbols] == [("a", 0, 0), ("b", 1, 0), ("c", 2, 0)]
		assert analyzer.slot_count == 3

	def test_declarations_are_resolved(self):
		program = parse_source("int a; int b;")
		resolutions = analyze(program)
		assert [resolutions[s.node_id] for s in program.statements] == [0, 1]

	def test_sibling_blocks_never_reuse_slots(self):
		analyzer = SemanticAnalyzer()
		analyzer.analyze(parse_source("{ int x; } { int x; }"))
		assert [(s.name, s.slot, s.depth) for s in analyzer.symbols] == [("x", 0, 1), ("x", 1, 1)]

	def test_uses_resolve_to_declared_slot(self):
		program = parse_source("int a; int b; b = a + 1;")
		resolutions = analyze(program)
		assign = program.statements[2]
		assert resolutions[assign.node_id] == 1
		assert resolutions[assign.value.left.node_id] == 0
		assert assign.value.right.node_id not in resolutions


class TestShadowing:
	def test_inner_declaration_shadows_outer(self):
		program = parse_source("int x; { int x; x = 1; } x = 2;")
		resolutions = analyze(program)
		outer_decl, block, outer_assign = program.statements
		inner_decl, inner_assign = block.statements
		assert resolutions[outer_decl.node_id] == 0
		assert resolutions[inner_decl.node_id] == 1
		assert resolutions[inner_assign.node_id] == 1
		assert resolutions[outer_assign.node_id] == 0

	def test_outer_variable_visible_inside_block(self):
		program = parse_source("int x; { x = 1; { print(x); } }")
		resolutions = analyze(program)
		block = program.statements[1]
		assert resolutions[block.statements[0].node_id] == 0
		print_stmt = block.statements[1].statements[0]
		assert resolutions[print_stmt.value.node_id] == 0

	def test_bare_if_body_declares_in_enclosing_scope(self):
		program = parse_source("if (1) int x; x = 3;")
		resolutions = analyze(program)
		assert resolutions[program.statements[1].node_id] == 0


class TestErrors:
	def test_redeclaration_in_same_scope(self):
		with pytest.raises(RedeclarationError) as info:
			analyze(parse_source("int a;\nint a;"))
		assert info.value.name == "a"
		assert info.value.line == 2

	def test_redeclaration_in_nested_block(self):
		with pytest.raises(RedeclarationError):
			analyze(parse_source("{ int a; int a; }"))

	def test_undeclared_use(self):
		with pytest.raises(UndeclaredVariableError) as info:
			analyze(parse_source("int x;\nprint(y);"))
		assert info.value.name == "y"
		assert info.value.line == 2
		assert info.value.position.column == 7

	def test_undeclared_assignment_target(self):
		with pytest.raises(UndeclaredVariableError) as info:
			analyze(parse_source("y = 1;"))
		assert info.value.name == "y"

	def test_variable_not_visible_after_block(self):
		with pytest.raises(UndeclaredVariableError):
			analyze(parse_source("{ int x; } x = 1;"))

	def test_use_before_declaration(self):
		with pytest.raises(UndeclaredVariableError):
			analyze(parse_source("x = 1; int x;"))

	def test_right_hand_side_checked_before_target(self):
		with pytest.raises(UndeclaredVariableError) as info:
			analyze(parse_source("y = z;"))
		assert info.value.name == "z"

	def test_first_error_aborts(self):
		with pytest.raises(RedeclarationError):
			analyze(parse_source("int a; int a; a = 10; print(b);"))

	def test_errors_inside_conditions(self):
		with pytest.raises(UndeclaredVariableError):
			analyze(parse_source("while (k < 3) { }"))

	def test_leftmost_undeclared_operand_reported_first(self):
		with pytest.raises(UndeclaredVariableError) as info:
			analyze(parse_source("int a; a = a + b * (c - a);"))
		assert info.value.name == "b"

	def test_undeclared_at_the_end_of_a_long_chain(self):
		with pytest.raises(UndeclaredVariableError) as info:
			analyze(parse_source("int a; a = " + " + ".join(["a"] * 3000) + " + z;"))
		assert info.value.name == "z"


class TestDeterminism:
	def test_same_ast_same_map(self):
		program = parse_source("int i; i = 0; while (i < 5) { int j; j = i * 2; print(j); i = i + 1; }")
		assert analyze(program) == analyze(program)


class TestSymbolTable:
	def test_resolve_innermost_first(self):
		table = SymbolTable()
		assert table.declare("x") == 0
		table.push()
		assert table.declare("x") == 1
		assert table.resolve("x") == 1
		table.pop()
		assert table.resolve("x") == 0

	def test_duplicate_returns_none(self):
		table = SymbolTable()
		table.declare("x")
		assert table.declare("x") is None
		assert table.slot_count == 1

	def test_cannot_pop_program_scope(self):
		with pytest.raises(InternalCompilerError):
			SymbolTable().pop()
