from fastapi import APIRouter, Depends

from ..flows.name_generation import NameGenerationFlow
from ..logging import logger
from ..models.name import NameRecord, NameRequest

router = APIRouter(tags=["names"])


def get_name_flow() -> NameGenerationFlow:
    """リクエストごとにフローを組み立てる（テストでは dependency_overrides で差し替え）。"""

    return NameGenerationFlow()


@router.post(
    "/generate",
    response_model=list[NameRecord],
    response_model_exclude_none=True,
    summary="名前候補を生成",
    response_description="検証済みの名前候補（最大 count 件）",
)
async def generate_names(
    req: NameRequest,
    flow: NameGenerationFlow = Depends(get_name_flow),
) -> list[NameRecord]:
    """Generate validated baby name suggestions.

    LLM の出力から JSON 配列を抽出・検証し、重複や除外済みの名前を取り除いた
    リストを返す。候補モデルをすべて試しても条件を満たさなければエラーを返す。
    """

    logger.info(
        "name_generate_request",
        gender=req.gender.value,
        style=req.style.value,
        origin=req.origin,
        count=req.count,
        exclude=len(req.exclude),
    )
    records = await flow.run(req)
    logger.info("name_generate_response", names=len(records), requested=req.count)
    return records
