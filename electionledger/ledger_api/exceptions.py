import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from . import errors

logger = logging.getLogger(__name__)

LEDGER_ERROR_STATUS = {
    errors.Unauthorized: status.HTTP_403_FORBIDDEN,
    errors.NotAuthorized: status.HTTP_403_FORBIDDEN,
    errors.InvalidCandidate: status.HTTP_404_NOT_FOUND,
    errors.InvalidAddress: status.HTTP_400_BAD_REQUEST,
}


def ledger_exception_handler(exc, context):
    """
    Turns ledger failures into JSON error responses.
    Anything else goes through DRF's default handler.
    """
    if isinstance(exc, errors.LedgerError):
        http_status = LEDGER_ERROR_STATUS.get(type(exc), status.HTTP_409_CONFLICT)
        logger.info("ledger_request_rejected error=%s status=%d", exc.kind, http_status)
        return Response(
            {"status": "error", "error": exc.kind, "message": exc.message},
            status=http_status
        )

    return exception_handler(exc, context)
