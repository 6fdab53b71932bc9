"""GET /v1/bank-accounts/{bank_account_id}/forecast - Projected low balance for an account"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

from forecast_gateway.api.v1.schemas import ForecastResponse
from forecast_gateway.api.dependencies import get_forecast_engine, get_request_id
from forecast_gateway.infrastructure.database.session import get_db
from forecast_gateway.infrastructure.database.repositories import UserAppVersionRepository
from forecast_gateway.domain.forecast import ForecastEngine
from forecast_gateway.domain.versions import should_show_available_to_spend
from forecast_gateway.domain.exceptions import TransactionStoreError
from forecast_gateway.infrastructure.observability.metrics import (
    forecast_duration_histogram,
    forecast_not_found_counter,
    record_forecast,
)
from forecast_gateway.infrastructure.observability.logging import log_forecast

router = APIRouter()


def resolve_show_available_to_spend(
    db: Session,
    user_id: int,
    app_version: Optional[str],
    device_type: Optional[str],
) -> bool:
    """Prefer the client's headers; fall back to the last version we saw the user on"""
    if app_version or device_type:
        return should_show_available_to_spend(app_version, device_type)

    stored = UserAppVersionRepository(db).get_by_user_id(user_id)
    if stored is None:
        return should_show_available_to_spend(None, None, has_stored_version=False)

    return should_show_available_to_spend(stored.app_version, stored.device_type)


@router.get("/bank-accounts/{bank_account_id}/forecast", response_model=ForecastResponse)
async def get_forecast(
    bank_account_id: int,
    request: Request,
    start_from_pay_period: bool = Query(False, description="Start the window at the last paycheck"),
    x_app_version: Optional[str] = Header(None),
    x_device_type: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    engine: ForecastEngine = Depends(get_forecast_engine),
):
    """
    Compute the account forecast.

    Returns:
        Lowest projected balance before the next paycheck, with the recurring
        and pending items behind it
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        with forecast_duration_histogram.time():
            forecast = await engine.compute_from_bank_account_id(
                bank_account_id,
                start_from_pay_period=start_from_pay_period,
            )

        if forecast is None:
            forecast_not_found_counter.inc()
            raise HTTPException(status_code=404, detail="Bank account not found")

        show_available_to_spend = resolve_show_available_to_spend(
            db, forecast.user_id, x_app_version, x_device_type
        )

        duration_ms = (time.time() - start_time) * 1000
        record_forecast(forecast.paycheck is not None, forecast.lowest_balance)
        log_forecast(request_id, bank_account_id, forecast, duration_ms)

        return ForecastResponse(**forecast.to_dict(), show_available_to_spend=show_available_to_spend)

    except HTTPException:
        raise

    except TransactionStoreError as e:
        db.rollback()
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
