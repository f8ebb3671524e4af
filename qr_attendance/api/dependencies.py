from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from qr_attendance.database.session import get_db
from qr_attendance.services import (
    AttendanceLedger,
    CredentialStore,
    DeviceRequestService,
    IdentityRegistry,
    SessionManager,
)
from qr_attendance.utils.notifier import get_notifier

# ----------------------------------------Service wiring--------------------------------------------
# Every service gets the request's own DB session; nothing is shared between requests.
db_dependency = Annotated[Session, Depends(get_db)]


def get_credential_store(db: db_dependency, notifier=Depends(get_notifier)) -> CredentialStore:
    return CredentialStore(db, notifier)


def get_identity_registry(
    db: db_dependency, credentials: CredentialStore = Depends(get_credential_store)
) -> IdentityRegistry:
    return IdentityRegistry(db, credentials)


def get_session_manager(db: db_dependency) -> SessionManager:
    return SessionManager(db)


def get_attendance_ledger(
    db: db_dependency, sessions: SessionManager = Depends(get_session_manager)
) -> AttendanceLedger:
    return AttendanceLedger(db, sessions)


def get_device_request_service(db: db_dependency) -> DeviceRequestService:
    return DeviceRequestService(db)


identity_dependency = Annotated[IdentityRegistry, Depends(get_identity_registry)]
sessions_dependency = Annotated[SessionManager, Depends(get_session_manager)]
ledger_dependency = Annotated[AttendanceLedger, Depends(get_attendance_ledger)]
device_requests_dependency = Annotated[DeviceRequestService, Depends(get_device_request_service)]
