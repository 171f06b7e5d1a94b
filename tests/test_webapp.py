"""Tests for the FastAPI service."""

import pytest
from fastapi.testclient import TestClient

from minic.vm import LIMIT_MESSAGE
from webapp.main import app


@pytest.fixture
def client():
	return TestClient(app)


class TestMeta:
	def test_health(self, client):
		resp = client.get("/health")
		assert resp.status_code == 200
		assert resp.json() == {"status": "ok"}

	def test_index(self, client):
		resp = client.get("/")
		assert resp.status_code == 200
		assert "/api/compile" in resp.text


class TestCompile:
	def test_artifacts(self, client):
		resp = client.post("/api/compile", json={"source": "int a; a = 1; print(a);"})
		assert resp.status_code == 200
		body = resp.json()
		assert body["diagnostics"] == []
		assert body["has_ast"] is True
		assert body["token_count"] == len(body["tokens"]) + 1
		assert body["tokens"][0] == {"kind": "INT", "lexeme": "int", "line": 1, "column": 1}
		assert body["symbols"] == [{"name": "a", "slot": 0, "depth": 0, "line": 1}]
		assert body["instructions"][0] == {"index": 0, "op": "PUSH_INT", "operand": 0, "comment": "init a"}
		assert body["instructions"][-1]["op"] == "HALT"
		nodes = {row["id"]: row for row in body["ast"]["nodes"]}
		root = nodes[body["ast"]["root"]]
		assert root["_type"] == "ProgramNode"
		decl, assign, _ = (nodes[i] for i in root["statements"])
		assert decl == {"id": decl["id"], "_type": "VarDecl", "line": 1, "column": 1, "name": "a"}
		assert nodes[assign["value"]] == {"id": assign["value"], "_type": "LiteralExpression", "line": 1, "column": 12, "value": 1}

	def test_error_is_a_diagnostic(self, client):
		resp = client.post("/api/compile", json={"source": "int a;\nprint(b);"})
		assert resp.status_code == 200
		body = resp.json()
		assert body["diagnostic_count"] == 1
		diag = body["diagnostics"][0]
		assert diag["severity"] == "ERROR"
		assert diag["message"] == "Use of undeclared variable 'b'"
		assert (diag["line"], diag["column"]) == (2, 7)
		assert body["instructions"] == []
		assert body["symbols"][0]["name"] == "a"

	def test_deep_nesting_is_a_diagnostic(self, client):
		body = client.post("/api/compile", json={"source": "if (1) " * 600 + "print(1);"}).json()
		assert body["diagnostics"][0]["message"] == "Program nested too deeply"
		assert body["has_ast"] is False
		assert body["ast"] is None

	def test_missing_source(self, client):
		assert client.post("/api/compile", json={}).status_code == 422


class TestRun:
	def test_output(self, client):
		resp = client.post("/api/run", json={"source": "int n; int sum; n=10; while(n>0){ sum=sum+n; n=n-1; } print(sum);"})
		body = resp.json()
		assert body["run"]["output"] == ["55"]
		assert body["run"]["limit_exceeded"] is False
		assert body["run"]["steps"] > 0

	def test_compile_failure_has_no_run(self, client):
		body = client.post("/api/run", json={"source": "int a; int a;"}).json()
		assert body["run"] is None
		assert body["diagnostics"][0]["message"] == "Redeclaration of 'a'"

	def test_step_limit(self, client):
		body = client.post("/api/run", json={"source": "while (1) { }", "max_steps": 50}).json()
		assert body["run"] == {"output": [LIMIT_MESSAGE], "steps": 50, "limit_exceeded": True}

	@pytest.mark.parametrize("max_steps", [0, -5, 1_000_001])
	def test_max_steps_validation(self, client, max_steps):
		resp = client.post("/api/run", json={"source": "print(1);", "max_steps": max_steps})
		assert resp.status_code == 422

	def test_long_operator_chain(self, client):
		source = "int x; x = " + " + ".join(["1"] * 3000) + "; print(x);"
		body = client.post("/api/run", json={"source": source}).json()
		assert body["run"]["output"] == ["3000"]
		# Program, VarDecl, Assign, 3000 literals, 2999 binaries, Print, Identifier.
		assert len(body["ast"]["nodes"]) == 6004
