"""
Growthlog Web Server

FastAPI adapter exposing the growth-record facade over HTTP.
"""

import logging
from typing import Optional, Union

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from growthlog import __version__
from growthlog.auth.identity import RequestContext
from growthlog.auth.middleware import get_facade, get_guardian_context, issue_token
from growthlog.bootstrap import build_facade, configure_logging
from growthlog.config import Settings
from growthlog.errors import (
    Forbidden,
    GrowthlogError,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from growthlog.facade import SyncFacade


logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    NotFound: 404,
    Forbidden: 403,
    StorageUnavailable: 503,
}


def status_for(error: GrowthlogError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status_code
    return 500


# Request models. Unknown keys are kept so the store can reject read-only
# fields (bmi, age_years, ids) with a precise error. Measures accept strings
# so a non-numeric value reaches the validator as out_of_range.
# fields (bmi, age_years, ids) with a precise error.
class ChildRequest(BaseModel):
    """Request model for creating or patching a child."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, description="Child's name")
    gender: Optional[str] = Field(None, description="Free-text gender or sex tag")
    birth_date: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("birth_date", "birthDate", "dateOfBirth"),
        description="Birth date (YYYY-MM-DD)",
    )


class MeasurementRequest(BaseModel):
    """Request model for creating or patching a measurement."""
    model_config = ConfigDict(extra="allow")

    date: Optional[str] = Field(None, description="Measurement date (YYYY-MM-DD)")
    height_cm: Union[float, str, None] = Field(
        None, validation_alias=AliasChoices("height_cm", "heightCm"), description="Height in cm"
    )
    weight_kg: Union[float, str, None] = Field(
        None, validation_alias=AliasChoices("weight_kg", "weightKg"), description="Weight in kg"
    )
    head_circumference_cm: Union[float, str, None] = Field(
        None,
        validation_alias=AliasChoices("head_circumference_cm", "headCircumferenceCm"),
        description="Head circumference in cm",
    )
    note: Optional[str] = None


def request_fields(request: BaseModel) -> dict:
    """Fields the client actually sent, including unknown keys."""
    return {**request.model_dump(exclude_unset=True), **(request.model_extra or {})}


def create_app(settings: Optional[Settings] = None, facade: Optional[SyncFacade] = None) -> FastAPI:
    """
    Build the FastAPI app.

    With no facade given, settings are read from the environment and the
    storage backend is created from them.
    """
    if facade is None:
        settings = settings or Settings.from_env()
        configure_logging(settings)
        facade = build_facade(settings)

    app = FastAPI(
        title="Growthlog",
        description="Growthlog - Child Growth Record API",
        version=__version__,
    )
    app.state.facade = facade

    @app.exception_handler(GrowthlogError)
    async def growthlog_error_handler(request: Request, exc: GrowthlogError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        response = JSONResponse(status_code=status_code, content=exc.to_dict())
        context = getattr(request.state, "guardian_context", None)
        if context is not None:
            issue_token(response, context)
        return response

    # =========================================================================
    # HEALTH
    # =========================================================================

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    # =========================================================================
    # CHILD ENDPOINTS
    # =========================================================================

    @app.get("/api/children")
    def list_children(
        verbose: bool = Query(False, description="Include full measurement history"),
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """List the caller's children, each with its latest measurement."""
        return {"children": facade.list_children(context, verbose=verbose)}

    @app.post("/api/children", status_code=201)
    def create_child(
        request: ChildRequest,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Create a new child."""
        return facade.create_child(context, request_fields(request))

    @app.get("/api/children/{child_id}")
    def get_child(
        child_id: str,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Get a child with its full measurement history."""
        return facade.get_child(context, child_id)

    @app.patch("/api/children/{child_id}")
    def update_child(
        child_id: str,
        request: ChildRequest,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Update only the fields present in the body."""
        return facade.update_child(context, child_id, request_fields(request))

    @app.delete("/api/children/{child_id}")
    def delete_child(
        child_id: str,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Delete a child and all its measurements."""
        facade.delete_child(context, child_id)
        return {"status": "deleted", "child_id": child_id}

    # =========================================================================
    # MEASUREMENT ENDPOINTS
    # =========================================================================

    @app.get("/api/children/{child_id}/measurements")
    def list_measurements(
        child_id: str,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """A child's measurements, most recent first."""
        return {"measurements": facade.get_child(context, child_id)["measurements"]}

    @app.post("/api/children/{child_id}/measurements", status_code=201)
    def create_measurement(
        child_id: str,
        request: MeasurementRequest,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Record a measurement for a child."""
        return facade.create_measurement(context, child_id, request_fields(request))

    @app.patch("/api/measurements/{measurement_id}")
    def update_measurement(
        measurement_id: str,
        request: MeasurementRequest,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Update only the fields present in the body."""
        return facade.update_measurement(context, measurement_id, request_fields(request))

    @app.delete("/api/measurements/{measurement_id}")
    def delete_measurement(
        measurement_id: str,
        context: RequestContext = Depends(get_guardian_context),
        facade: SyncFacade = Depends(get_facade),
    ):
        """Delete a measurement."""
        facade.delete_measurement(context, measurement_id)
        return {"status": "deleted", "measurement_id": measurement_id}

    return app


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the server."""
    import uvicorn
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    run_server()
