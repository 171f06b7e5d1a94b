from __future__ import annotations

import logging
import sys
from dataclasses import fields
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from minic.engine import CompilationArtifacts, CompilerEngine
from minic.lexer import Token, TokenKind
from minic.nodes import ASTNode, ProgramNode
from minic.vm import MAX_STEPS


logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger("minic-web")

app = FastAPI(title="MiniC Bytecode Compiler", version="1.0.0")

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


class CompileRequest(BaseModel):
	source: str


class RunRequest(BaseModel):
	source: str
	max_steps: int = Field(default=MAX_STEPS, ge=1, le=1_000_000)


def _ast_table(root: Optional[ProgramNode]) -> Optional[Dict[str, Any]]:
	"""Flatten the tree into rows ordered by node id; child nodes become id references.

	Rows stay one level deep however far the tree nests.
	"""
	if root is None:
		return None
	rows: List[Dict[str, Any]] = []
	pending: List[ASTNode] = [root]
	while pending:
		node = pending.pop()
		row: Dict[str, Any] = {
			"id": node.node_id,
			"_type": node.__class__.__name__,
			"line": node.position.line,
			"column": node.position.column,
		}
		for f in fields(node):
			if f.name in ("node_id", "position"):
				continue
			value = getattr(node, f.name)
			if isinstance(value, ASTNode):
				row[f.name] = value.node_id
				pending.append(value)
			elif isinstance(value, list):
				row[f.name] = [child.node_id for child in value]
				pending.extend(value)
			elif isinstance(value, Token):
				row[f.name] = value.lexeme
			else:
				row[f.name] = value
		rows.append(row)
	rows.sort(key=lambda row: row["id"])
	return {"root": root.node_id, "nodes": rows}


def _compile_payload(art: CompilationArtifacts) -> Dict[str, Any]:
	return {
		"duration_ms": art.duration_ms,
		"token_count": len(art.tokens),
		"diagnostic_count": len(art.diagnostics),
		"has_ast": art.ast is not None,
		"diagnostics": [
			{
				"severity": d.severity.name,
				"message": d.message,
				"hint": d.hint,
				"line": d.position.line if d.position else None,
				"column": d.position.column if d.position else None,
			}
			for d in art.diagnostics
		],
		"tokens": [
			{"kind": t.kind.name, "lexeme": t.lexeme, "line": t.line, "column": t.column}
			for t in art.tokens
			if t.kind != TokenKind.EOF
		],
		"ast": _ast_table(art.ast),
		"symbols": [
			{"name": s.name, "slot": s.slot, "depth": s.depth, "line": s.position.line}
			for s in art.symbols
		],
		"instructions": [
			{"index": i, "op": inst.op.name, "operand": inst.operand, "comment": inst.comment}
			for i, inst in enumerate(art.instructions)
		],
	}


def _log_compile(endpoint: str, art: CompilationArtifacts) -> None:
	for d in art.diagnostics:
		logger.warning("%s: %s (%s)", endpoint, d.message, d.position or "no position")
	logger.info(
		"%s: %d tokens, %d instructions in %.2f ms",
		endpoint,
		len(art.tokens),
		len(art.instructions),
		art.duration_ms,
	)


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
	return HTMLResponse(
		"<h2>MiniC Bytecode Compiler API</h2>"
		"<p>POST <code>/api/compile</code> with JSON: <code>{\"source\": \"...\"}</code></p>"
		"<p>POST <code>/api/run</code> with JSON: <code>{\"source\": \"...\", \"max_steps\": 100000}</code></p>"
	)


@app.get("/health")
def health() -> Dict[str, str]:
	return {"status": "ok"}


@app.post("/api/compile")
def compile_source(req: CompileRequest) -> Dict[str, Any]:
	art = CompilerEngine().compile(req.source)
	_log_compile("compile", art)
	return _compile_payload(art)


@app.post("/api/run")
def run_source(req: RunRequest) -> Dict[str, Any]:
	engine = CompilerEngine()
	art = engine.compile(req.source)
	_log_compile("run", art)
	payload = _compile_payload(art)

	run_art = engine.run(art, max_steps=req.max_steps)
	run: Dict[str, Any] | None = None
	if run_art is not None:
		output: List[str] = run_art.output
		run = {"output": output, "steps": run_art.steps, "limit_exceeded": run_art.limit_exceeded}
		logger.info("run: %d steps, %d output lines, limit_exceeded=%s", run_art.steps, len(output), run_art.limit_exceeded)
	payload["run"] = run
	return payload
