from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flight_booking.database import get_db
from flight_booking.promotions.schemas import PromoInfo, PromoValidationRequest, PromoValidationResponse
from flight_booking.promotions.service import PromotionService

router = APIRouter()

@router.post("/validate", response_model=PromoValidationResponse)
def validate_promo_code(request: PromoValidationRequest, db: Session = Depends(get_db)):
    """Check whether a promotion code can be used right now"""
    promo = PromotionService(db).validate(request.code)
    return PromoValidationResponse(valid=True, promo=PromoInfo.model_validate(promo))
