"""
Consent records.

Applicants (OTP session) and logged-in users record consent against their
own subject id: the verified contact for applicants, the user id otherwise.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, Caller, get_caller, get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import ConsentContext, ConsentType
from hostel_admin.schemas.consent import (
    BulkConsentCheck,
    ConsentCheckResponse,
    ConsentGrant,
    ConsentResponse,
    ConsentRevoke,
    ConsentVerifyText,
    RenewalCheckResponse,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.consent_service import RENEWAL_WARNING_DAYS, ConsentService

router = APIRouter()


@router.post("", response_model=SuccessResponse[ConsentResponse], status_code=status.HTTP_201_CREATED)
def record_consent(payload: ConsentGrant, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    record = ConsentService(db).record(caller, payload.consent_type, payload.version, payload.consent_text)
    return one(ConsentResponse, record, "Consent recorded")


@router.post("/revoke", response_model=SuccessResponse[ConsentResponse])
def revoke_consent(payload: ConsentRevoke, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    record = ConsentService(db).revoke(caller, payload.consent_type, payload.reason)
    return one(ConsentResponse, record, "Consent revoked")


@router.get("/check/{context}", response_model=SuccessResponse[ConsentCheckResponse])
def check_required_consents(context: ConsentContext, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return ok(ConsentService(db).check_required(caller.id, context))


@router.post("/bulk-check", response_model=SuccessResponse[Dict[str, bool]])
def bulk_check_consents(payload: BulkConsentCheck, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return ok(ConsentService(db).bulk_check(caller.id, payload.consent_types))


@router.get("/history", response_model=SuccessResponse[List[ConsentResponse]])
def consent_history(
    consent_type: Optional[ConsentType] = Query(None, alias="consentType"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ok(many(ConsentResponse, ConsentService(db).history(caller.id, consent_type)))


@router.post("/verify", response_model=SuccessResponse[Dict[str, bool]])
def verify_consent_text(payload: ConsentVerifyText, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Check that the text shown to the user is the text they accepted."""
    matches = ConsentService(db).verify_text(caller.id, payload.consent_id, payload.consent_text)
    return ok({"valid": matches})


@router.get("/renewal/{consent_type}", response_model=SuccessResponse[RenewalCheckResponse])
def consent_renewal_check(consent_type: ConsentType, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return ok(ConsentService(db).renewal_check(caller.id, consent_type))


@router.get("/expiring", response_model=SuccessResponse[List[ConsentResponse]])
def expiring_consents(
    days: int = Query(RENEWAL_WARNING_DAYS, ge=1, le=365),
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    return ok(many(ConsentResponse, ConsentService(db).expiring(days)))
