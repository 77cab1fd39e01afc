"""
Command endpoints for tool-calling clients.

GET lists the available booking commands with their parameter schemas; POST runs one.
Unknown names are a 404 and argument errors a 422, both before the engine is touched.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ValidationError

from cricnets.routes.bookings import get_booking_service
from cricnets.services.booking_commands import COMMANDS, BookingCommand, execute_command, parse_command_params
from cricnets.services.booking_service import BookingService
from cricnets.services.errors import BookingError
from cricnets.utils.http_errors import booking_error_to_http

router = APIRouter()


class ToolDescription(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]


@router.get("/tools", response_model=List[ToolDescription])
def list_tools():
    return [
        ToolDescription(
            name=spec.command.value,
            description=spec.description,
            parameters=spec.params_model.model_json_schema(),
        )
        for spec in COMMANDS.values()
    ]


@router.post("/tools/{name}")
def call_tool(
    name: str,
    args: Optional[Dict[str, Any]] = Body(default=None),
    service: BookingService = Depends(get_booking_service),
):
    try:
        command = BookingCommand(name)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    try:
        params = parse_command_params(command, args)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=jsonable_encoder(exc.errors(include_url=False)))

    try:
        result = execute_command(service, command, params)
    except BookingError as exc:
        raise booking_error_to_http(exc)
    return {"tool": command.value, "result": jsonable_encoder(result)}
