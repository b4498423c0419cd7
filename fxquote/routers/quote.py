from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from fxquote.core.errors import QuoteValidationError
from fxquote.models.quote import QuoteRequest, QuoteResult
from fxquote.services.quote_service import QuoteService

router = APIRouter(tags=["quote"])

# Dependencies -----------------------------------------------------


def get_quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def parse_quote_request(
    request: Request,
    base_currency: Optional[str] = Query(None, alias="baseCurrency"),
    quote_currency: Optional[str] = Query(None, alias="quoteCurrency"),
    base_amount: Optional[str] = Query(None, alias="baseAmount"),
) -> QuoteRequest:
    raw = {
        "baseCurrency": base_currency,
        "quoteCurrency": quote_currency,
        "baseAmount": base_amount,
    }
    context = {"supported_currencies": request.app.state.settings.supported_currencies}
    try:
        return QuoteRequest.model_validate(
            {k: v for k, v in raw.items() if v is not None}, context=context
        )
    except ValidationError as e:
        raise QuoteValidationError(_messages(e)) from e


def _messages(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        if err["type"] in ("unsupported_currency", "invalid_amount"):
            messages.append(err["msg"])
        else:
            field = ".".join(str(p) for p in err["loc"])
            messages.append(f"{field}: {err['msg']}")
    return messages


# Routes -----------------------------------------------------------
@router.get(
    "/quote",
    response_model=QuoteResult,
    response_model_exclude_none=True,
    summary="Convert an amount between two supported currencies",
)
def get_quote(
    payload: QuoteRequest = Depends(parse_quote_request),
    service: QuoteService = Depends(get_quote_service),
):
    return service.get_quote(
        payload.base_currency, payload.quote_currency, payload.base_amount
    )


@router.get(
    "/debug",
    response_model=QuoteResult,
    response_model_exclude_none=True,
    summary="Quote with cache and timing diagnostics",
)
def get_debug_quote(
    payload: QuoteRequest = Depends(parse_quote_request),
    service: QuoteService = Depends(get_quote_service),
):
    return service.get_quote(
        payload.base_currency,
        payload.quote_currency,
        payload.base_amount,
        debug=True,
    )
