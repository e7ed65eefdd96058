"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class ControlRequest(BaseModel):
    action: Literal["play", "pause", "reset", "speed", "seek"]
    value: float | None = None


class TrainStatus(BaseModel):
    id: str
    name: str
    category: str
    track: int
    progress_km: float | None
    held: bool


class SimStateResponse(BaseModel):
    time: float
    clock: str
    horizon: float
    speed: float
    playing: bool
    trains: list[TrainStatus]


class ReconcileResponse(BaseModel):
    applied: bool
    stale: bool
    added: list[str]
    updated: list[str]
    removed: list[str]
    skipped: list[str]
    error: str | None = None


class TransitionResponse(BaseModel):
    from_context: str
    to_context: str
    center: tuple[float, float]
    zoom: float
    noop: bool
    redirected: bool


class ViewStateResponse(BaseModel):
    active: str
    in_flight: bool
