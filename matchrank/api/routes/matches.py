"""Match selection endpoints.

Unknown content types are rejected by FastAPI's enum validation (422).
"""

from fastapi import APIRouter, Depends, Query

from matchrank.api.dependencies import get_selector
from matchrank.api.models import (
    BestMatchResponse,
    CompleteAnalysisResponse,
    RecommendationsResponse,
    TopMatchesResponse,
)
from matchrank.core import ContentType, ScoringRequest
from matchrank.services.selector import MatchSelector

router = APIRouter()


# =============================================================================
# SELECTION
# =============================================================================


@router.get("/best", response_model=BestMatchResponse)
def best_match(
    content_type: ContentType = Query(..., description="Content type to select for"),
    language: str = Query("en", description="Language hint"),
    channel_id: str | None = Query(None, description="Channel whose timezone to use"),
    timezone: str | None = Query(None, description="IANA timezone (overrides channel)"),
    selector: MatchSelector = Depends(get_selector),
):
    """Best match for a content type, or null when nothing qualifies.

    degraded is true when the timezone was invalid and UTC was used.
    """
    request = ScoringRequest(
        content_type=content_type,
        language=language,
        max_results=1,
        channel_timezone=timezone,
    )
    result = selector.get_best_matches(request, channel_id=channel_id)
    return BestMatchResponse.model_validate(
        {
            "content_type": content_type.value,
            "match": result.best.to_dict() if result.best else None,
            "timezone": result.timezone,
            "degraded": result.degraded,
            "reference_time": result.reference_time,
        }
    )


@router.get("/top", response_model=TopMatchesResponse)
def top_matches(
    content_type: ContentType = Query(...),
    n: int = Query(3, ge=1, le=20, description="Number of matches"),
    language: str = Query("en"),
    channel_id: str | None = Query(None),
    selector: MatchSelector = Depends(get_selector),
):
    """Top matches with team analysis and head-to-head where available."""
    enriched = selector.get_top_matches_with_details(
        content_type, n=n, language=language, channel_id=channel_id
    )
    return TopMatchesResponse.model_validate(
        {
            "content_type": content_type.value,
            "count": len(enriched),
            "matches": [e.to_dict() for e in enriched],
        }
    )


@router.get("/recommendations", response_model=RecommendationsResponse)
def recommendations(
    content_type: ContentType = Query(...),
    limit: int = Query(5, ge=1, le=50),
    language: str = Query("en"),
    channel_id: str | None = Query(None),
    selector: MatchSelector = Depends(get_selector),
):
    """Selected matches labelled excellent / good / moderate / limited."""
    items = selector.get_matches_for_content_type(
        content_type, limit=limit, language=language, channel_id=channel_id
    )
    return RecommendationsResponse.model_validate(
        {
            "content_type": content_type.value,
            "count": len(items),
            "recommendations": [r.to_dict() for r in items],
        }
    )


# =============================================================================
# ANALYSIS
# =============================================================================


@router.get("/analysis", response_model=CompleteAnalysisResponse)
def complete_analysis(
    content_type: ContentType = Query(...),
    language: str = Query("en"),
    channel_id: str | None = Query(None),
    selector: MatchSelector = Depends(get_selector),
):
    """Best match with its details and both teams' analysis."""
    analysis = selector.get_complete_analysis(content_type, language=language, channel_id=channel_id)
    return CompleteAnalysisResponse.model_validate(analysis.to_dict())
