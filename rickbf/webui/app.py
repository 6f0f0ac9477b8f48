from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from rickbf.compiler import BrainfuckCompiler, CompilerConfig, addressing_of
from rickbf.emitter import RickrollEmitter
from rickbf.errors import CompileError
from rickbf.tape import DEFAULT_TAPE_SIZE

logger = logging.getLogger(__name__)


class CompileRequest(BaseModel):
    code: str = ""
    tape_size: int = Field(default=DEFAULT_TAPE_SIZE, ge=1)
    eof_value: int = Field(default=0, ge=0, le=255)
    wrap_cells: bool = False
    indent: int = Field(default=2, ge=0)
    trace: bool = False


class CompileResponse(BaseModel):
    output: str
    addressing: str
    line_count: int
    instruction_count: int


def _error_detail(exc: CompileError) -> dict:
    return {"kind": exc.kind, "message": str(exc), "position": exc.position}


def create_app(*, max_tape_size: Optional[int] = None) -> FastAPI:
    app = FastAPI(title="rickbf compile API", version="0.1.0")

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_source(payload: CompileRequest) -> CompileResponse:
        if max_tape_size is not None and payload.tape_size > max_tape_size:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"tape_size must not exceed {max_tape_size}",
            )
        config = CompilerConfig(
            tape_size=payload.tape_size,
            eof_value=payload.eof_value,
            wrap_cells=payload.wrap_cells,
            indent=payload.indent,
            trace=payload.trace,
        )
        compiler = BrainfuckCompiler(config)
        try:
            program = compiler.parse(payload.code)
            script = compiler.translate(program)
        except CompileError as exc:
            logger.info("Compilation rejected: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=_error_detail(exc),
            ) from exc

        output = RickrollEmitter(indent=config.indent, trace=config.trace).emit(script)
        return CompileResponse(
            output=output,
            addressing=addressing_of(script),
            line_count=output.count("\n"),
            instruction_count=len(program),
        )

    return app


__all__ = ["create_app"]
