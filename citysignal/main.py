import asyncio
import json
import logging
import random
import time
from contextlib import asynccontextmanager
from typing import Any, Dict
from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from citysignal.application.route_service import RouteOptimizationService
from citysignal.domain import config
from citysignal.domain.errors import CitySignalError
from citysignal.domain.fixtures import load_signal_definitions
from citysignal.domain.models import (
    CommandAccepted, CorridorActivation, CorridorRequest, GreenWaveRequest,
    OverrideRequest, RouteOptimizationResult, RouteRequest, Signal,
    TrafficSnapshot, WeatherStatus, WeatherUpdate,
)
from citysignal.kernel.commands import ActivateGreenWaveCommand, OverrideSignalCommand, SetWeatherCommand
from citysignal.kernel.publisher import SnapshotPublisher
from citysignal.kernel.simulation_kernel import SimulationKernel
from citysignal.logging_setup import setup_logging
from citysignal.routing.incidents import IncidentRepository, InMemoryIncidentRepository, JsonFileIncidentRepository
from citysignal.routing.provider import OsrmRoutingProvider
from citysignal.settings import Settings, get_settings
from citysignal.systems.flux_system import speed_multiplier

logger = logging.getLogger(__name__)
settings = get_settings()

def build_incident_repository(app_settings: Settings) -> IncidentRepository:
    if app_settings.INCIDENTS_FILE:
        return JsonFileIncidentRepository(app_settings.INCIDENTS_FILE, window_hours=app_settings.INCIDENT_WINDOW_HOURS)
    return InMemoryIncidentRepository(window_hours=app_settings.INCIDENT_WINDOW_HOURS)

# Initialize Kernel
kernel = SimulationKernel(rng=random.Random(settings.SIMULATION_SEED))
publisher = SnapshotPublisher()
incident_repository = build_incident_repository(settings)
route_service = RouteOptimizationService(
    kernel,
    OsrmRoutingProvider(settings.OSRM_BASE_URL, timeout=settings.ROUTING_TIMEOUT_SECONDS),
    incident_repository
)

# Background task for simulation loop
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load the signal fixture and start the simulation loop
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    kernel.initialize(load_signal_definitions(settings.SIGNALS_FILE), seed=settings.SIMULATION_SEED)
    loop_task = asyncio.create_task(run_simulation())
    yield
    # Shutdown
    loop_task.cancel()

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(CitySignalError)
async def city_signal_error_handler(request, exc: CitySignalError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

async def run_simulation():
    """Runs the simulation update loop at 1Hz"""
    interval = settings.TICK_INTERVAL_SECONDS or config.TICK_INTERVAL

    while True:
        start_time = time.monotonic()

        # Tick, then publish before the next tick can start
        try:
            snapshot = kernel.run_tick()
            await publisher.publish(snapshot)
        except Exception:
            logger.exception("Simulation tick failed")

        # Sleep to maintain tick rate
        elapsed = time.monotonic() - start_time
        await asyncio.sleep(max(0.0, interval - elapsed))

def get_route_service() -> RouteOptimizationService:
    return route_service

@app.get("/api/signals", response_model=TrafficSnapshot)
async def get_traffic_state():
    """Returns the latest published snapshot of every signal"""
    return kernel.get_snapshot()

@app.get("/api/signals/{signal_id}", response_model=Signal)
async def get_signal_state(signal_id: str):
    """Returns one signal from the latest snapshot"""
    signal = kernel.get_signal(signal_id)
    if not signal:
        raise HTTPException(status_code=404, detail="Signal not found")
    return signal

@app.post("/api/signals/{signal_id}/override", response_model=CommandAccepted)
async def override_signal(signal_id: str, override: OverrideRequest):
    """Queues a manual light override; unknown ids are dropped by the kernel"""
    kernel.queue_command(OverrideSignalCommand(signal_id, override.action, override.duration))
    return {"status": "queued", "target": signal_id}

@app.get("/api/weather", response_model=WeatherStatus)
async def get_weather():
    weather = kernel.state.weather
    return {"weather": weather, "speedMultiplier": speed_multiplier(weather)}

@app.post("/api/weather", response_model=CommandAccepted)
async def set_weather(update: WeatherUpdate):
    kernel.queue_command(SetWeatherCommand(update.weather))
    return {"status": "queued", "target": update.weather.value}

@app.post("/api/emergency/green-wave", response_model=CommandAccepted)
async def activate_green_wave(request: GreenWaveRequest):
    """Queues a green wave for the given signals"""
    kernel.queue_command(ActivateGreenWaveCommand(request.signalIds, request.duration))
    return {"status": "queued", "target": ",".join(request.signalIds)}

@app.post("/api/emergency/corridor", response_model=CorridorActivation)
async def activate_corridor(request: CorridorRequest):
    """Selects the signals along a route polyline and queues a green wave for them"""
    signal_ids = kernel.corridor_for_route(request.route)
    duration = request.duration or config.GREEN_WAVE_TIME
    if signal_ids:
        kernel.queue_command(ActivateGreenWaveCommand(signal_ids, duration))
    return {"signalIds": signal_ids, "duration": duration, "status": "queued" if signal_ids else "no signals on route"}

@app.post("/api/traffic/optimize-route", response_model=RouteOptimizationResult)
async def optimize_route(request: RouteRequest, service: RouteOptimizationService = Depends(get_route_service)):
    """Ranks driving alternatives against live congestion and incidents"""
    try:
        return await service.optimize_route(request.start, request.end, request.type)
    except CitySignalError:
        raise
    except Exception:
        logger.exception("Optimizer Error")
        raise CitySignalError("Failed to optimize route")

# Messages accepted over the traffic WebSocket

def command_from_message(message: Dict[str, Any]):
    if not isinstance(message, dict):
        return None
    kind = message.get("type")
    if kind == "adminSignalUpdate":
        override = OverrideRequest(action=message.get("action"), duration=message.get("duration"))
        return OverrideSignalCommand(str(message.get("id")), override.action, override.duration)
    if kind == "adminWeatherUpdate":
        return SetWeatherCommand(WeatherUpdate(weather=message.get("weather")).weather)
    if kind == "emergencyRouteActive":
        request = GreenWaveRequest(signalIds=message.get("signalIds") or [], duration=message.get("duration"))
        return ActivateGreenWaveCommand(request.signalIds, request.duration)
    return None

@app.websocket("/ws/traffic")
async def traffic_socket(websocket: WebSocket):
    await publisher.connect(websocket, kernel.get_snapshot())
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.warning("Ignoring non-JSON message: %.80s", raw)
                continue
            try:
                command = command_from_message(message)
            except ValidationError as e:
                logger.warning("Rejected %s message: %s", message.get("type"), e)
                continue
            if command is None:
                logger.warning("Unknown message: %s", message)
                continue
            kernel.queue_command(command)
    except WebSocketDisconnect:
        pass
    finally:
        publisher.disconnect(websocket)

@app.get("/")
def read_root():
    return {"status": "City Signal Backend Running", "tick": kernel.get_snapshot().tick}
