from fastapi import APIRouter

from ..models import TopicExtractRequest, TopicExtractResponse
from ..services import services
from ..topic_extractor import TopicExtractor

router = APIRouter(prefix="/topic", tags=["Topic"])

@router.post("/extract", response_model=TopicExtractResponse)
async def extract_topic(req: TopicExtractRequest):
    """
    Main topic of a text, trying the AI model before the local heuristics.
    """
    topic_model = services.topic_model
    generate = topic_model.generate if topic_model is not None and topic_model.configured else None
    result = await TopicExtractor(generate=generate).extract(req.text)
    return TopicExtractResponse(topic=result.topic, strategy=result.strategy)
