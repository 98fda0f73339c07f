# api/main.py
"""
FastAPI backend for buildframe - exposes the analysis engine as a REST API.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from buildframe import (
    BuildingParams,
    MechanismError,
    ModelError,
    ZeroCapacityError,
    __version__,
    run_analysis,
)
from buildframe.analysis import AnalysisResult

logger = logging.getLogger(__name__)


app = FastAPI(
    title="buildframe API",
    description="3D Building Frame Analysis Engine",
    version=__version__,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Request/Response Models
# =============================================================================

class SeismicData(BaseModel):
    """Design spectral parameters."""
    model_config = ConfigDict(populate_by_name=True)

    sds: float = Field(..., ge=0.0, alias="SDS", description="Short-period spectral acceleration (g)")
    sd1: float = Field(..., ge=0.0, alias="SD1", description="1-second spectral acceleration (g)")
    r: float = Field(8.0, gt=0.0, alias="R", description="Response modification factor")
    importance: float = Field(1.0, gt=0.0, alias="Ie", description="Importance factor")
    tl: float = Field(6.0, gt=0.0, alias="TL", description="Long-period transition (s)")


class BuildingConfig(BaseModel):
    """Building configuration (camelCase keys, snake_case also accepted)."""
    model_config = ConfigDict(populate_by_name=True)

    floor_count: int = Field(3, ge=1, le=60, alias="floorCount")
    floor_height: float = Field(3.5, gt=0.0, alias="floorHeight", description="Storey height (m)")
    plan_length: float = Field(12.0, gt=0.0, alias="planLength", description="Plan X (m)")
    plan_width: float = Field(12.0, gt=0.0, alias="planWidth", description="Plan Y (m)")
    bay_spacing_x: float = Field(6.0, gt=0.0, alias="baySpacingX", description="Bay X (m)")
    bay_spacing_y: float = Field(6.0, gt=0.0, alias="baySpacingY", description="Bay Y (m)")
    concrete_strength: float = Field(25.0, gt=0.0, alias="concreteStrength", description="f'c (MPa)")
    steel_yield: float = Field(400.0, gt=0.0, alias="steelYield", description="fy (MPa)")
    concrete_elastic_modulus: float = Field(23500.0, gt=0.0, alias="concreteElasticModulus", description="Ec (MPa)")
    poisson_ratio: float = Field(0.2, ge=0.0, lt=0.5, alias="poissonRatio")
    concrete_density: float = Field(2400.0, gt=0.0, alias="concreteDensity", description="kg/m³")
    dead_load: float = Field(5.0, ge=0.0, alias="deadLoad", description="kN/m²")
    live_load: float = Field(2.5, ge=0.0, alias="liveLoad", description="kN/m²")
    wind_speed: float = Field(0.0, ge=0.0, alias="windSpeed", description="m/s")
    seismic: Optional[SeismicData] = Field(None, alias="seismicParameters")
    dead_load_factor: float = Field(1.0, ge=0.0, alias="deadLoadFactor")
    live_load_factor: float = Field(1.0, ge=0.0, alias="liveLoadFactor")
    wind_load_factor: float = Field(1.0, ge=0.0, alias="windLoadFactor")
    seismic_load_factor: float = Field(1.0, ge=0.0, alias="seismicLoadFactor")

    def to_params(self) -> BuildingParams:
        data = self.model_dump(exclude={'seismic'})
        if self.seismic is not None:
            data['seismic'] = self.seismic.model_dump()
        return BuildingParams.from_dict(data)


class NodeData(BaseModel):
    """Node geometry and displacement."""
    id: int
    x: float
    y: float
    z: float
    supported: bool
    ux: float
    uy: float
    uz: float
    displacement: float


class ElementData(BaseModel):
    """Element geometry and results."""
    id: int
    type: str
    ni: int
    nj: int
    length: float
    area: float
    axial: float
    moment_y: float
    moment_z: float
    utilization: float
    combined_stress: float
    safety_factor: Optional[float] = None


class SummaryData(BaseModel):
    """Headline results."""
    max_stress: float
    max_utilization: float
    min_safety_factor: Optional[float] = None
    max_displacement: float
    max_displacement_mm: float
    max_drift_ratio: float
    deflection_ok: bool
    empirical_period: Optional[float] = None
    modal_period: Optional[float] = None


class AnalysisResponse(BaseModel):
    """Complete analysis result."""
    nodes: List[NodeData]
    elements: List[ElementData]
    drift_ratios: List[float]
    summary: SummaryData
    validator: Dict[str, Any]


# =============================================================================
# Analysis
# =============================================================================

def build_response(result: AnalysisResult) -> AnalysisResponse:
    model = result.model
    deflections = {d.node_id: d for d in result.deflections}
    nodes_list = [
        NodeData(
            id=n.id, x=round(n.x, 4), y=round(n.y, 4), z=round(n.z, 4),
            supported=n.is_supported,
            ux=deflections[n.id].ux, uy=deflections[n.id].uy, uz=deflections[n.id].uz,
            displacement=deflections[n.id].magnitude,
        )
        for n in model.nodes.values()
    ]

    elements_list = []
    for e, f, s in zip(model.elements, result.forces, result.stresses):
        elements_list.append(ElementData(
            id=e.id,
            type=e.type.value,
            ni=e.ni,
            nj=e.nj,
            length=round(model.lengths[e.id], 4),
            area=e.section.area,
            axial=f.axial,
            moment_y=f.moment_y,
            moment_z=f.moment_z,
            utilization=f.utilization,
            combined_stress=s.combined,
            safety_factor=s.safety_factor,
        ))

    s = result.summary
    summary = SummaryData(
        max_stress=s.max_stress,
        max_utilization=s.max_utilization,
        min_safety_factor=s.min_safety_factor,
        max_displacement=s.max_displacement,
        max_displacement_mm=round(s.max_displacement * 1000, 3),
        max_drift_ratio=s.max_drift_ratio,
        deflection_ok=s.deflection_ok,
        empirical_period=s.empirical_period,
        modal_period=s.modal_period,
    )

    return AnalysisResponse(
        nodes=nodes_list,
        elements=elements_list,
        drift_ratios=result.drift_ratios,
        summary=summary,
        validator=result.validator_payload(),
    )


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "buildframe API", "version": __version__}


@app.post("/api/analyze", response_model=AnalysisResponse)
async def analyze(config: BuildingConfig):
    """Generate and analyse a building frame."""
    try:
        params = config.to_params()
        result = await run_in_threadpool(run_analysis, params)
    except (ModelError, ZeroCapacityError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except MechanismError as e:
        logger.warning("Unstable structure: %s", e)
        raise HTTPException(status_code=409, detail=f"Structure unstable: {e}")
    return build_response(result)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
