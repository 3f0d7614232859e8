"""Mining engine command, query and event-stream endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from minerdeck.exceptions import CommandRejectedError, EngineError
from minerdeck.models.engine import EngineEvent, EngineStatus, EventChannel
from minerdeck.utils.logging import get_logger

router = APIRouter(tags=["mining"])

logger = get_logger(__name__)

_STREAM_QUEUE_SIZE = 256


class CommandResponse(BaseModel):
    """Outcome of a start/stop command."""
    status: str


class RunningResponse(BaseModel):
    running: bool


class AlgorithmResponse(BaseModel):
    algorithm: str | None = None


class HashrateResponse(BaseModel):
    hashrate: float | None = None


def _engine():
    from minerdeck.api.app import get_engine
    return get_engine()


@router.post("/mining/start", response_model=CommandResponse)
async def start_mining() -> CommandResponse:
    """Start the miner."""
    try:
        await _engine().start()
    except CommandRejectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return CommandResponse(status="started")


@router.post("/mining/stop", response_model=CommandResponse)
async def stop_mining() -> CommandResponse:
    """Stop the miner."""
    try:
        await _engine().stop()
    except CommandRejectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return CommandResponse(status="stopped")


@router.get("/mining/running", response_model=RunningResponse)
async def is_mining() -> RunningResponse:
    try:
        return RunningResponse(running=await _engine().is_running())
    except EngineError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/mining/algorithm", response_model=AlgorithmResponse)
async def get_algorithm() -> AlgorithmResponse:
    try:
        return AlgorithmResponse(algorithm=await _engine().get_algorithm())
    except EngineError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/mining/hashrate", response_model=HashrateResponse)
async def get_hashrate() -> HashrateResponse:
    try:
        return HashrateResponse(hashrate=await _engine().get_hashrate())
    except EngineError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/mining/status", response_model=EngineStatus)
async def get_status() -> EngineStatus:
    """Full engine status snapshot."""
    return _engine().status()


@router.websocket("/mining/stream")
async def mining_stream(websocket: WebSocket) -> None:
    """Stream rate and algorithm events over WebSocket.

    Client messages are read and ignored so that a disconnect is noticed
    even while the engine is idle and no events flow.
    """
    await websocket.accept()

    engine = _engine()
    queue: asyncio.Queue[EngineEvent] = asyncio.Queue(maxsize=_STREAM_QUEUE_SIZE)

    def _enqueue(channel: EventChannel):
        def _handler(payload) -> None:
            try:
                queue.put_nowait(EngineEvent(channel=channel, payload=payload))
            except asyncio.QueueFull:
                logger.debug("stream_event_dropped", channel=channel.value)
            except ValueError:
                logger.debug("stream_event_malformed", channel=channel.value)
        return _handler

    async def _until_disconnect() -> None:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

    subscriptions = [
        engine.events.subscribe(channel, _enqueue(channel)) for channel in EventChannel
    ]
    closed = asyncio.ensure_future(_until_disconnect())
    getter: asyncio.Future | None = None
    try:
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait(
                {getter, closed}, return_when=asyncio.FIRST_COMPLETED,
            )
            if getter not in done:
                break
            await websocket.send_json(getter.result().model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    finally:
        closed.cancel()
        if getter is not None:
            getter.cancel()
        for subscription in subscriptions:
            subscription.unsubscribe()
        logger.debug("stream_closed")
