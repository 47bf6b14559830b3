from collections import deque
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from .etl.data_loader import DataLoadError, load_dataset, DATA_DIR
from .engines.simulation_engine import SimulationEngine

app = FastAPI(title="COVID-19 Outbreak Simulator API")

# Allow CORS for the map/chart frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configuration
DATA_SOURCE = DATA_DIR
MAX_NOTIFICATIONS = 200

_engine = None
_notifications = deque(maxlen=MAX_NOTIFICATIONS)

# Models source of truth
class SpeedRequest(BaseModel):
    speed: float

class ModeRequest(BaseModel):
    mode: str  # 'virus' or 'government'

class VirusParamsUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    infectivity: Optional[float] = Field(default=None, gt=0)
    severity_pct: Optional[float] = None
    mortality_pct: Optional[float] = None
    incubation_days: Optional[float] = None
    infectious_days: Optional[float] = None

class MeasureRequest(BaseModel):
    measure: str


def _record_notifications(engine):
    """Keep recent variant changes / historical events for polling clients."""
    def on_variant(evt):
        _notifications.append({
            "type": "variant_changed",
            "date": evt.date.isoformat(),
            "variant_id": evt.variant_id,
            "variant": evt.variant.to_dict(),
        })

    def on_event(evt):
        _notifications.append({"type": "historical_event", **evt.event.to_dict()})

    engine.on_variant_changed(on_variant)
    engine.on_historical_event(on_event)


async def get_engine():
    global _engine
    if _engine is None:
        try:
            engine = SimulationEngine(load_dataset(DATA_SOURCE))
        except DataLoadError as e:
            print(f"Simulation init error: {e}")
            raise HTTPException(status_code=503, detail=f"Simulation data unavailable: {e.reason}")
        _record_notifications(engine)
        _engine = engine
    return _engine


# --- Health ---

@app.get("/api/health")
def health_check():
    return {"status": "ok"}

# --- Simulation Control ---
# Engine access stays on the event loop, the same thread as the clock task.

@app.get("/api/simulation/state")
async def get_state(engine: SimulationEngine = Depends(get_engine)):
    return engine.get_state()

@app.post("/api/simulation/start")
async def start_simulation(engine: SimulationEngine = Depends(get_engine)):
    engine.start()
    return {"status": "running", "date": engine.current_date.isoformat()}

@app.post("/api/simulation/pause")
async def pause_simulation(engine: SimulationEngine = Depends(get_engine)):
    paused = engine.pause()
    return {"status": "paused" if paused else "running", "is_paused": paused}

@app.post("/api/simulation/stop")
async def stop_simulation(engine: SimulationEngine = Depends(get_engine)):
    engine.stop()
    return {"status": "stopped"}

@app.post("/api/simulation/reset")
async def reset_simulation(engine: SimulationEngine = Depends(get_engine)):
    engine.reset()
    _notifications.clear()
    return {"status": "reset", "date": engine.current_date.isoformat()}

@app.post("/api/simulation/step")
async def step_simulation(days: int = 1, engine: SimulationEngine = Depends(get_engine)):
    """Advance synchronously (bypasses the wall-clock cadence)."""
    advanced = engine.run_days(max(0, days))
    return {"advanced": advanced, "date": engine.current_date.isoformat(),
            "global_stats": engine.world.global_stats.to_dict()}

@app.post("/api/simulation/speed")
async def set_speed(req: SpeedRequest, engine: SimulationEngine = Depends(get_engine)):
    speed = engine.set_speed(req.speed)
    return {"speed": speed, "tick_period_ms": engine.clock.tick_period_ms}

@app.post("/api/simulation/mode")
async def set_mode(req: ModeRequest, engine: SimulationEngine = Depends(get_engine)):
    if not engine.set_mode(req.mode):
        return {"status": "ignored", "mode": engine.mode}
    return {"status": "success", "mode": engine.mode}

@app.post("/api/simulation/virus-params")
async def update_virus_params(req: VirusParamsUpdate, engine: SimulationEngine = Depends(get_engine)):
    applied = engine.update_virus_params(req.model_dump(exclude_none=True))
    return {"applied": applied, "virus_params": engine.virus_params.to_dict()}

@app.get("/api/simulation/timeseries")
async def get_timeseries(tail: Optional[int] = None, engine: SimulationEngine = Depends(get_engine)):
    df = engine.get_timeseries(tail)
    df.index = df.index.strftime('%Y-%m-%d')
    return {"dates": df.index.tolist(), **{col: df[col].tolist() for col in df.columns}}

@app.get("/api/simulation/notifications")
async def get_notifications(engine: SimulationEngine = Depends(get_engine)):
    return list(_notifications)

# --- Countries & Government Measures ---

@app.get("/api/countries/top")
async def get_top_countries(limit: int = 10, engine: SimulationEngine = Depends(get_engine)):
    return engine.get_top_countries(limit)

@app.get("/api/countries/{country_code}")
async def get_country(country_code: str, engine: SimulationEngine = Depends(get_engine)):
    data = engine.get_country_data(country_code.upper())
    if data is None:
        raise HTTPException(status_code=404, detail="Country not found")
    return data

@app.post("/api/countries/{country_code}/measures")
async def toggle_measure(country_code: str, req: MeasureRequest, engine: SimulationEngine = Depends(get_engine)):
    code = country_code.upper()
    if not engine.apply_government_measure(code, req.measure):
        return {"status": "ignored"}
    country = engine.get_country_data(code)
    return {
        "status": "success",
        "active_measures": country["active_measures"],
        "effective_infectivity": country["effective_infectivity"],
    }

@app.post("/api/measures/apply-all")
async def toggle_measure_everywhere(req: MeasureRequest, engine: SimulationEngine = Depends(get_engine)):
    toggled = engine.apply_measure_to_all(req.measure)
    return {"status": "success" if toggled else "ignored", "countries": toggled}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
