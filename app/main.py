from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.logging import logger
from app.database import Database
from app.portal import Portal, build_portal
from app.routers import (
    appointments_router,
    assistant_router,
    auth_router,
    doctors_router,
    health_router,
    patients_router,
    resource_requests_router,
    resources_router,
)
from app.services.assistant_service import AssistantService


def create_app(portal: Optional[Portal] = None, assistant: Optional[AssistantService] = None) -> FastAPI:
    """Build the application. A ready portal can be passed in (tests, embedding)."""
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for FastAPI application."""
        # Startup
        logger.info("Starting MediCore HMS...")
        owns_database = False
        if getattr(app.state, "portal", None) is None:
            backend = None
            if settings.SYNC_ENABLED:
                backend = await Database.connect_db()
                owns_database = True
            app.state.portal = build_portal(backend=backend)
        
        if app.state.portal.sync is not None:
            app.state.portal.sync.start()
        logger.info("Application started successfully")
        
        yield
        
        # Shutdown
        logger.info("Shutting down...")
        await app.state.portal.close()
        if owns_database:
            await Database.close_db()
        logger.info("Application shutdown complete")
    
    app = FastAPI(
        title=settings.APP_NAME,
        description="MediCore hospital management portal API",
        version="0.1.0",
        lifespan=lifespan,
    )
    # One portal, hence one signed-in session, serves every client (see get_current_user)
    app.state.portal = portal
    app.state.assistant = assistant or AssistantService()
    
    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Register routers
    app.include_router(health_router)
    app.include_router(auth_router, prefix=settings.API_V1_PREFIX)
    app.include_router(doctors_router, prefix=settings.API_V1_PREFIX)
    app.include_router(appointments_router, prefix=settings.API_V1_PREFIX)
    app.include_router(resources_router, prefix=settings.API_V1_PREFIX)
    app.include_router(resource_requests_router, prefix=settings.API_V1_PREFIX)
    app.include_router(patients_router, prefix=settings.API_V1_PREFIX)
    app.include_router(assistant_router, prefix=settings.API_V1_PREFIX)
    
    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/health",
        }
    
    return app


app = create_app()
