# dependencies.py
"""FastAPI providers wiring services to the request session."""
from fastapi import Depends
from sqlalchemy.orm import Session

import config
from database import get_session
from services.annex_service import AnnexService
from services.artifact_store import ArtifactStore, get_artifact_store
from services.lease_service import LeaseService


def get_lease_service(
    db: Session = Depends(get_session),
    store: ArtifactStore = Depends(get_artifact_store),
) -> LeaseService:
    return LeaseService(db, store, auto_finalize=config.LEASE_AUTO_FINALIZE)


def get_annex_service(db: Session = Depends(get_session)) -> AnnexService:
    return AnnexService(db)
