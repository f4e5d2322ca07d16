from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from bfcells.bf_interpreter import DEFAULT_TAPE_LENGTH, RunResult, TapeInterpreter
from bfcells.compiler import parse
from bfcells.errors import CompileError, MachineFault, StepLimitExceeded

logger = logging.getLogger(__name__)

MAX_TAPE_SIZE = 65536
MAX_STEPS_CAP = 1_000_000
MAX_CODE_LENGTH = 1_000_000


def _string_to_input_bytes(data: str) -> bytes:
    return data.encode("utf-8")


class CompileRequest(BaseModel):
    code: str = Field(default="", max_length=MAX_CODE_LENGTH)


class CompileResponse(BaseModel):
    code: str
    instruction_count: int


class RunRequest(BaseModel):
    code: str = Field(default="", max_length=MAX_CODE_LENGTH)
    input: str = ""
    tape_size: int = Field(default=DEFAULT_TAPE_LENGTH, ge=1, le=MAX_TAPE_SIZE)
    max_steps: int = Field(default=MAX_STEPS_CAP, ge=1, le=MAX_STEPS_CAP)
    tape_window: int = Field(default=8, ge=0, le=256)


class RunResponse(BaseModel):
    output: List[int]
    output_text: str
    remaining_input: List[int]
    pointer: int
    tape_start: int
    tape: List[int]
    steps: int


def _result_to_response(result: RunResult, tape_window: int) -> RunResponse:
    start, cells = result.window(tape_window)
    return RunResponse(
        output=list(result.output),
        output_text=result.output_text,
        remaining_input=list(result.input),
        pointer=result.pointer,
        tape_start=start,
        tape=list(cells),
        steps=result.steps,
    )


def create_app(*, title: Optional[str] = None) -> FastAPI:
    app = FastAPI(title=title or "bfcells API", version="0.1.0")

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_program(payload: CompileRequest) -> CompileResponse:
        try:
            program = parse(payload.code)
        except CompileError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=exc.reason,
            ) from exc
        return CompileResponse(code=program.to_source(), instruction_count=len(program))

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        logger.info("Running %d characters on a tape of %d cells", len(payload.code), payload.tape_size)
        try:
            program = parse(payload.code)
        except CompileError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=exc.reason,
            ) from exc

        interpreter = TapeInterpreter(tape_length=payload.tape_size, max_steps=payload.max_steps)
        try:
            result = interpreter.run(program, input_data=_string_to_input_bytes(payload.input))
        except StepLimitExceeded as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(exc),
            ) from exc
        except MachineFault as exc:
            logger.warning("Machine fault while running program: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(exc),
            ) from exc
        return _result_to_response(result, payload.tape_window)

    return app


__all__ = ["create_app"]
