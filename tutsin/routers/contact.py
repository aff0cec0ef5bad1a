"""Public contact form endpoint."""

import logging

from fastapi import APIRouter, Depends, Request

from tutsin.core.rate_limit import AUTH_LIMIT, limiter
from tutsin.schemas.content import ContactCreate, ContactRead, ContactResponse
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ContactResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
def submit_contact(
    request: Request,
    data: ContactCreate,
    storage: Storage = Depends(get_storage),
):
    fields = data.model_dump()
    fields["email"] = fields["email"].lower()
    submission = storage.create_contact_submission(fields)
    logger.info("Contact submission %s received (service: %s)", submission.id, submission.service)
    return ContactResponse(
        message="Message sent successfully!",
        submission=ContactRead.model_validate(submission),
    )
