# FastAPI server for filleting uploaded meshes

from fastapi import FastAPI, UploadFile, File, HTTPException, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field
from typing import List, Optional
import asyncio
import logging
import os
import tempfile
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

from brute_fillet import (
    AngleEdgeSelection,
    FilletOptions,
    InvalidParameterError,
    PointEdgeSelection,
    SubtractionStrategy,
    analyze_solid,
    edge_adjacency_counts,
    extract_edges_from_arrays,
    fillet_with_report,
    get_kernel,
)
from brute_fillet.mesh_loader import load_trimesh

logger = logging.getLogger(__name__)

app = FastAPI(title="Brute Fillet Backend")

# Thread pool for running blocking fillet jobs
executor = ThreadPoolExecutor(max_workers=2)

# Store for tracking job progress
jobs: dict = {}

ALLOWED_EXTENSIONS = {'.stl', '.obj', '.ply', '.off'}

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class FilletParams(BaseModel):
    """Parameters for a fillet request"""
    radius: float = Field(2.0, gt=0)
    segments: int = Field(16, ge=3)
    min_angle: Optional[float] = 80.0  # Angle selection (ignored when a point is given)
    point_x: Optional[float] = None  # Point selection, all three required
    point_y: Optional[float] = None
    point_z: Optional[float] = None
    max_distance: Optional[float] = Field(None, ge=0)
    strategy: SubtractionStrategy = SubtractionStrategy.SEQUENTIAL

    def to_options(self) -> FilletOptions:
        point = (self.point_x, self.point_y, self.point_z)
        if any(c is not None for c in point):
            if any(c is None for c in point):
                raise InvalidParameterError("Point selection needs point_x, point_y and point_z")
            selection = PointEdgeSelection(point=point, max_distance=self.max_distance)
        else:
            min_angle = 80.0 if self.min_angle is None else self.min_angle
            selection = AngleEdgeSelection(min_angle=min_angle)

        return FilletOptions(
            radius=self.radius,
            selection=selection,
            segments=self.segments,
            strategy=self.strategy,
        )


def fillet_params(
    radius: float = Query(2.0, gt=0),
    segments: int = Query(16, ge=3),
    min_angle: Optional[float] = Query(80.0),
    point_x: Optional[float] = Query(None),
    point_y: Optional[float] = Query(None),
    point_z: Optional[float] = Query(None),
    max_distance: Optional[float] = Query(None, ge=0),
    strategy: SubtractionStrategy = Query(SubtractionStrategy.SEQUENTIAL)
) -> FilletParams:
    """Read fillet parameters from the query string"""
    return FilletParams(
        radius=radius,
        segments=segments,
        min_angle=min_angle,
        point_x=point_x,
        point_y=point_y,
        point_z=point_z,
        max_distance=max_distance,
        strategy=strategy,
    )


class JobStatus:
    """Track status of a fillet job"""
    def __init__(self, job_id: str):
        self.job_id = job_id
        self.status = "pending"  # pending, loading, filleting, subtracting, complete, error
        self.progress = 0  # 0-100
        self.message = "Initializing..."
        self.result: Optional[bytes] = None
        self.stats: Optional[dict] = None
        self.error: Optional[str] = None
        self.start_time = time.time()
        self.logs: List[dict] = []

    def log(self, message: str):
        """Add a log message with timestamp"""
        elapsed = time.time() - self.start_time
        self.logs.append({"time": elapsed, "message": message})
        # Keep only last 100 logs to avoid memory issues
        if len(self.logs) > 100:
            self.logs = self.logs[-100:]


def _file_extension(file: UploadFile) -> str:
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file format. Allowed formats: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    return file_ext


async def _save_upload(file: UploadFile, file_ext: str) -> str:
    with tempfile.NamedTemporaryFile(delete=False, suffix=file_ext) as tmp:
        content = await file.read()
        tmp.write(content)
        return tmp.name


def _load_solid(tmp_path: str):
    """Load a temp file as a kernel solid; the file is removed."""
    try:
        mesh = load_trimesh(tmp_path)
    finally:
        os.unlink(tmp_path)

    kernel = get_kernel()
    solid = kernel.from_trimesh(mesh)
    if kernel.is_empty(solid):
        raise ValueError("Mesh is not a closed manifold solid")
    return mesh, solid


def _run_fillet(solid, options: FilletOptions, progress_callback=None):
    """Fillet a solid and export it as STL bytes with stats."""
    kernel = get_kernel()
    result = fillet_with_report(solid, options, kernel, progress_callback)
    output = kernel.to_trimesh(result.solid)
    stats = result.to_dict()
    stats["volume_before"] = kernel.volume(solid)
    stats["volume_after"] = kernel.volume(result.solid)
    stats["num_faces"] = int(len(output.faces))
    return output.export(file_type='stl'), stats


def run_fillet_sync(tmp_path: str, options: FilletOptions, job: JobStatus):
    """Run a fillet job synchronously (called from thread pool)"""
    try:
        job.status = "loading"
        job.progress = 5
        job.message = "Loading mesh file..."
        job.log("Starting mesh load...")

        mesh, solid = _load_solid(tmp_path)
        job.log(f"Mesh loaded: {len(mesh.vertices):,} vertices, {len(mesh.faces):,} faces")

        job.status = "filleting"
        job.progress = 10
        job.message = "Building cutting tools..."

        def on_progress(done: int, total: int):
            # Tool building maps to 10-60%, subtraction to 60-95%
            if job.status == "filleting" and done == total:
                job.status = "subtracting"
                job.message = "Subtracting cutting tools..."
                job.log(f"Processed {total} edges")
                job.progress = 60
                return
            base, span = (10, 50) if job.status == "filleting" else (60, 35)
            job.progress = base + int(span * done / max(total, 1))

        job.result, job.stats = _run_fillet(solid, options, on_progress)

        job.status = "complete"
        job.progress = 100
        job.message = f"Fillet complete: {job.stats['tools_built']} tools subtracted"
        job.log(job.message)

    except Exception as e:
        logger.exception(f"Fillet job {job.job_id} failed")
        job.status = "error"
        job.progress = 0
        job.message = f"Error: {str(e)}"
        job.error = str(e)


def _stats_headers(stats: dict) -> dict:
    return {
        "X-Edges-Found": str(stats["edges_found"]),
        "X-Edges-Selected": str(stats["edges_selected"]),
        "X-Tools-Built": str(stats["tools_built"]),
        "X-Volume-Before": f"{stats['volume_before']:.6f}",
        "X-Volume-After": f"{stats['volume_after']:.6f}",
    }


def _options(params: FilletParams) -> FilletOptions:
    try:
        return params.to_options()
    except InvalidParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


@app.post("/edges")
async def list_edges(
    file: UploadFile = File(...),
    min_angle: Optional[float] = None
):
    """
    Extract manifold edges with dihedral angles.

    Args:
        file: Surface mesh file (.stl, .obj, .ply, .off)
        min_angle: Only return edges sharper than this (180 - dihedral)
    """
    file_ext = _file_extension(file)
    tmp_path = await _save_upload(file, file_ext)

    try:
        mesh = load_trimesh(tmp_path)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not load mesh: {str(e)}")
    finally:
        os.unlink(tmp_path)

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, _edges_payload, mesh, min_angle)


def _edges_payload(mesh, min_angle: Optional[float]) -> dict:
    """Edge list and adjacency stats for a loaded mesh."""
    edges = extract_edges_from_arrays(mesh.vertices, mesh.faces)
    if min_angle is not None:
        edges = [edge for edge in edges if edge.dihedral_angle <= 180.0 - min_angle]
    adjacency = edge_adjacency_counts(mesh.faces)

    return {
        "num_vertices": int(len(mesh.vertices)),
        "num_faces": int(len(mesh.faces)),
        "adjacency": {
            "total": adjacency.total_edges,
            "manifold": adjacency.manifold_edges,
            "boundary": adjacency.boundary_edges,
            "non_manifold": adjacency.non_manifold_edges,
        },
        "edges": [edge.to_dict() for edge in edges],
    }


@app.post("/analyze")
async def analyze_mesh(file: UploadFile = File(...)):
    """Return solid diagnostics for an uploaded mesh"""
    file_ext = _file_extension(file)
    tmp_path = await _save_upload(file, file_ext)

    try:
        _, solid = _load_solid(tmp_path)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not load mesh: {str(e)}")

    loop = asyncio.get_running_loop()
    diagnostics = await loop.run_in_executor(executor, analyze_solid, solid)
    return diagnostics.to_dict()


@app.post("/fillet")
async def fillet_mesh(
    file: UploadFile = File(...),
    params: FilletParams = Depends(fillet_params)
):
    """
    Fillet an uploaded mesh and return the result as binary STL.

    Statistics are returned in X-* response headers.
    """
    file_ext = _file_extension(file)
    options = _options(params)
    tmp_path = await _save_upload(file, file_ext)

    try:
        _, solid = _load_solid(tmp_path)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not load mesh: {str(e)}")

    try:
        loop = asyncio.get_running_loop()
        data, stats = await loop.run_in_executor(executor, _run_fillet, solid, options)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Fillet failed: {str(e)}")

    return Response(content=data, media_type="model/stl", headers=_stats_headers(stats))


@app.post("/fillet/start")
async def start_fillet(
    file: UploadFile = File(...),
    params: FilletParams = Depends(fillet_params)
):
    """
    Start a fillet job and return a job ID for tracking progress.
    Use GET /fillet/progress/{job_id} to check status.
    Use GET /fillet/result/{job_id} to download the STL when complete.
    """
    file_ext = _file_extension(file)
    options = _options(params)
    tmp_path = await _save_upload(file, file_ext)

    job_id = str(uuid.uuid4())
    job = JobStatus(job_id)
    jobs[job_id] = job

    loop = asyncio.get_running_loop()
    loop.run_in_executor(executor, run_fillet_sync, tmp_path, options, job)

    return {"job_id": job_id, "message": "Fillet started"}


@app.get("/fillet/progress/{job_id}")
async def get_fillet_progress(job_id: str, last_log_index: int = 0):
    """Get the progress of a fillet job"""
    if job_id not in jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = jobs[job_id]
    elapsed = time.time() - job.start_time

    return {
        "job_id": job_id,
        "status": job.status,
        "progress": job.progress,
        "message": job.message,
        "elapsed_seconds": round(elapsed, 1),
        "complete": job.status in ("complete", "error"),
        "error": job.error,
        "stats": job.stats,
        "logs": job.logs[last_log_index:],
        "log_index": len(job.logs),
    }


@app.get("/fillet/result/{job_id}")
async def get_fillet_result(job_id: str):
    """Download the STL result of a completed fillet job"""
    if job_id not in jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = jobs[job_id]

    if job.status == "error":
        raise HTTPException(status_code=500, detail=job.error)

    if job.status != "complete":
        raise HTTPException(status_code=202, detail="Job not yet complete")

    # Clean up job after returning result
    del jobs[job_id]

    return Response(content=job.result, media_type="model/stl", headers=_stats_headers(job.stats))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
